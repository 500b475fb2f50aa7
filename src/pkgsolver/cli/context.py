"""Helpers shared by the CLI commands."""

from __future__ import annotations

import sys

import click

from pkgsolver.config import SolverSettings
from pkgsolver.repository import DirectoryRepository, PackageRepository


def get_settings(ctx: click.Context) -> SolverSettings:
    """Return the settings loaded by the command group (defaults if run standalone)."""
    obj = ctx.find_object(dict)
    if obj is None or "settings" not in obj:
        return SolverSettings()
    return obj["settings"]


def open_repositories(cli_paths: tuple[str, ...], settings: SolverSettings) -> list[PackageRepository]:
    """Open the repositories given on the command line, else those from the settings.

    Exits with code 2 when no repository is configured.
    """
    paths = list(cli_paths) or settings.repositories
    if not paths:
        click.echo("No package repositories configured (use --repo or the configuration file).", err=True)
        sys.exit(2)
    return [DirectoryRepository(path) for path in paths]
