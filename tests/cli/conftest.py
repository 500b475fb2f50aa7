"""Shared fixtures for CLI tests.

The repository and installation fixtures come from the top-level
conftest; the ones here build configuration files around them.
"""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """Create an empty directory (no installed packages)."""
    d = tmp_path / "empty"
    d.mkdir()
    return d


@pytest.fixture
def config_file(tmp_path: Path, repo_dir: Path) -> Path:
    """Create a configuration file pointing at ``repo_dir``."""
    path = tmp_path / "pkgsolver.yaml"
    path.write_text(f"repositories:\n  - {repo_dir.as_posix()}\nstrategy: tree\n")
    return path


@pytest.fixture
def unreachable_config(tmp_path: Path) -> Path:
    """Create a configuration file whose only repository does not exist."""
    path = tmp_path / "unreachable.yaml"
    path.write_text(f"repositories:\n  - {(tmp_path / 'no-such-repo').as_posix()}\n")
    return path
