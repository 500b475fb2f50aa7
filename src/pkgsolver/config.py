"""Solver configuration.

Settings are taken, from lowest to highest precedence, from built-in
defaults, a YAML file, environment variables and finally command-line
options::

    # pkgsolver.yaml
    repositories:
      - ./repo
      - /srv/packages
    installation: ./install
    strategy: tree            # or "greedy"

Environment variables:

- ``PKGSOLVER_REPOSITORIES``: repository paths separated by ``os.pathsep``;
  replaces the list from the file.
- ``PKGSOLVER_INSTALLATION``: installation directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

from pkgsolver.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "pkgsolver.yaml"
STRATEGIES = ("tree", "greedy")

ENV_REPOSITORIES = "PKGSOLVER_REPOSITORIES"
ENV_INSTALLATION = "PKGSOLVER_INSTALLATION"


@dataclass
class SolverSettings:
    """Effective solver settings.

    Attributes:
        repositories: Repository directories, highest priority first.
        installation: Installation directory, if any.
        strategy: ``"tree"`` (backtracking) or ``"greedy"`` (incremental).
    """

    repositories: list[str] = field(default_factory=list)
    installation: str | None = None
    strategy: str = "tree"

    @classmethod
    def from_dict(cls, data: Mapping[str, object], source: str = "<config>") -> SolverSettings:
        """Build settings from a parsed configuration mapping.

        Unknown keys are ignored.

        Raises:
            ConfigError: If a known key has the wrong type or value.
        """
        settings = cls()
        repos = data.get("repositories")
        if repos is not None:
            if isinstance(repos, str):
                repos = [repos]
            if not isinstance(repos, list) or not all(isinstance(r, str) for r in repos):
                raise ConfigError(f"{source}: 'repositories' must be a list of paths")
            settings.repositories = list(repos)

        installation = data.get("installation")
        if installation is not None:
            if not isinstance(installation, str):
                raise ConfigError(f"{source}: 'installation' must be a path")
            settings.installation = installation

        strategy = data.get("strategy")
        if strategy is not None:
            if strategy not in STRATEGIES:
                raise ConfigError(
                    f"{source}: 'strategy' must be one of {', '.join(STRATEGIES)}, got {strategy!r}"
                )
            settings.strategy = str(strategy)
        return settings

    @classmethod
    def load(cls, path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> SolverSettings:
        """Load settings from ``path`` (or ``pkgsolver.yaml``) and the environment.

        A missing default file yields the defaults; a missing explicit
        ``path`` is an error.

        Raises:
            ConfigError: If the file is unreadable or invalid.
        """
        environ = os.environ if environ is None else environ
        explicit = path is not None
        config_path = Path(path) if explicit else Path(DEFAULT_CONFIG_FILE)

        data: object = {}
        if config_path.is_file():
            try:
                data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError) as exc:
                raise ConfigError(f"{config_path}: cannot read configuration: {exc}") from exc
        elif explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path}: configuration must be a mapping")
        settings = cls.from_dict(data, str(config_path))

        env_repos = environ.get(ENV_REPOSITORIES)
        if env_repos:
            settings.repositories = [p for p in env_repos.split(os.pathsep) if p]
        env_installation = environ.get(ENV_INSTALLATION)
        if env_installation:
            settings.installation = env_installation
        return settings
