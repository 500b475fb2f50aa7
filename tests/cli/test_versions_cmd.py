"""Tests for ``pkgsolver versions`` command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from pkgsolver.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


class TestVersions:
    """Listing versions across repositories."""

    def test_text(self, runner: CliRunner, repo_dir: Path) -> None:
        result = runner.invoke(cli, ["versions", "B", "--repo", str(repo_dir)])
        assert result.exit_code == 0
        assert "Versions of B" in result.output
        assert "2.0.0" in result.output

    def test_json_newest_first(self, runner: CliRunner, repo_dir: Path) -> None:
        result = runner.invoke(cli, ["versions", "Foo", "--repo", str(repo_dir), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"name": "Foo", "versions": ["1.2.0-rc1", "1.1.0", "1.0.0"]}

    def test_unknown_package(self, runner: CliRunner, repo_dir: Path) -> None:
        result = runner.invoke(cli, ["versions", "Nope", "--repo", str(repo_dir)])
        assert result.exit_code == 1
        assert "No versions of Nope found." in result.output

    def test_repositories_merged(self, runner: CliRunner, repo_dir: Path, tmp_path: Path) -> None:
        extra = tmp_path / "extra"
        extra.mkdir()
        (extra / "b.yaml").write_text('name: B\nversion: "3.0.0"\n')
        result = runner.invoke(
            cli, ["versions", "B", "-r", str(extra), "-r", str(repo_dir), "--format", "json"]
        )
        assert json.loads(result.stdout)["versions"] == ["3.0.0", "2.0.0", "1.1.0", "1.0.0"]
