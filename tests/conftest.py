"""Shared fixtures for pkgsolver tests."""

from __future__ import annotations

import pathlib

import pytest

# Versions are quoted: YAML would read an unquoted 1.10 as the float 1.1.
_REPOSITORY_MANIFESTS = {
    "A/1.0.0.yaml": """\
name: A
version: "1.0.0"
dependencies:
  - name: B
    version: "^1.0"
""",
    "B/1.0.0.yaml": 'name: B\nversion: "1.0.0"\n',
    "B/1.1.0.yaml": 'name: B\nversion: "1.1.0"\n',
    "B/2.0.0.json": '{"name": "B", "version": "2.0.0"}\n',
    "Foo/1.0.0.yaml": 'name: Foo\nversion: "1.0.0"\n',
    "Foo/1.1.0.yaml": 'name: Foo\nversion: "1.1.0"\n',
    "Foo/1.2.0-rc1.yaml": 'name: Foo\nversion: "1.2.0-rc1"\n',
    "Conflict/1.0.0.yaml": """\
name: Conflict
version: "1.0.0"
dependencies:
  C: "^1.0"
""",
    "Other/1.0.0.yaml": """\
name: Other
version: "1.0.0"
dependencies:
  C: "^2.0"
""",
    "C/1.5.0.yaml": 'name: C\nversion: "1.5.0"\n',
    "C/2.1.0.yaml": 'name: C\nversion: "2.1.0"\n',
}

_INSTALLED_MANIFESTS = {
    "Packages/App/package.yaml": """\
name: App
version: "2.0.0"
dependencies:
  - name: Lib
    version: "^1.2"
  - name: Plugin
""",
    "Packages/Lib/package.yaml": 'name: Lib\nversion: "1.1.0"\n',
    "Packages/Plugin/package.json": '{"name": "Plugin", "version": "0.3.0", "dependencies": {"Gone": "1.0"}}\n',
    "Packages/Tool/package.yaml": 'name: Tool\nversion: "3.0.0"\n',
}


def _write_tree(root: pathlib.Path, files: dict[str, str]) -> pathlib.Path:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def repo_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a repository directory with a small catalog of manifests.

    Contents: A 1.0.0 (needs B ^1.0); B 1.0.0, 1.1.0, 2.0.0; Foo 1.0.0,
    1.1.0, 1.2.0-rc1; Conflict (needs C ^1.0) and Other (needs C ^2.0);
    C 1.5.0, 2.1.0.
    """
    return _write_tree(tmp_path / "repo", _REPOSITORY_MANIFESTS)


@pytest.fixture
def installation_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create an installation with one healthy and two broken packages.

    App 2.0.0 needs Lib ^1.2 (1.1.0 installed) and Plugin; Plugin needs
    Gone, which is not installed; Tool has no dependencies.
    """
    return _write_tree(tmp_path / "install", _INSTALLED_MANIFESTS)
