"""Tests for solver settings loading."""

from __future__ import annotations

import os
import pathlib

import pytest

from pkgsolver.config import ENV_INSTALLATION, ENV_REPOSITORIES, SolverSettings
from pkgsolver.exceptions import ConfigError


class TestFromDict:
    """Validation of parsed configuration mappings."""

    def test_defaults(self) -> None:
        settings = SolverSettings.from_dict({})
        assert settings.repositories == []
        assert settings.installation is None
        assert settings.strategy == "tree"

    def test_values(self) -> None:
        settings = SolverSettings.from_dict(
            {"repositories": ["a", "b"], "installation": "inst", "strategy": "greedy", "extra": 1}
        )
        assert settings.repositories == ["a", "b"]
        assert settings.installation == "inst"
        assert settings.strategy == "greedy"

    def test_single_repository_string(self) -> None:
        assert SolverSettings.from_dict({"repositories": "only"}).repositories == ["only"]

    @pytest.mark.parametrize(
        "data",
        [
            {"repositories": [1, 2]},
            {"repositories": {"a": 1}},
            {"installation": ["x"]},
            {"strategy": "random"},
        ],
    )
    def test_invalid(self, data) -> None:
        with pytest.raises(ConfigError):
            SolverSettings.from_dict(data)


class TestLoad:
    """File and environment sources."""

    def test_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "pkgsolver.yaml"
        path.write_text("repositories:\n  - ./repo\ninstallation: ./install\nstrategy: greedy\n")
        settings = SolverSettings.load(path, environ={})
        assert settings.repositories == ["./repo"]
        assert settings.installation == "./install"
        assert settings.strategy == "greedy"

    def test_empty_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "pkgsolver.yaml"
        path.write_text("")
        assert SolverSettings.load(path, environ={}) == SolverSettings()

    def test_missing_explicit_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            SolverSettings.load(tmp_path / "absent.yaml", environ={})

    def test_missing_default_file(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert SolverSettings.load(environ={}) == SolverSettings()

    def test_default_file_in_working_directory(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pkgsolver.yaml").write_text("strategy: greedy\n")
        monkeypatch.chdir(tmp_path)
        assert SolverSettings.load(environ={}).strategy == "greedy"

    def test_not_a_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "pkgsolver.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            SolverSettings.load(path, environ={})

    def test_malformed_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "pkgsolver.yaml"
        path.write_text("repositories: [oops\n")
        with pytest.raises(ConfigError, match="cannot read configuration"):
            SolverSettings.load(path, environ={})

    def test_environment_overrides_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "pkgsolver.yaml"
        path.write_text("repositories: [file-repo]\ninstallation: file-install\n")
        environ = {
            ENV_REPOSITORIES: os.pathsep.join(["env-a", "", "env-b"]),
            ENV_INSTALLATION: "env-install",
        }
        settings = SolverSettings.load(path, environ=environ)
        assert settings.repositories == ["env-a", "env-b"]
        assert settings.installation == "env-install"
