"""pkgsolver CLI: dependency resolution and consistency checks.

Entry point for the ``pkgsolver`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve   Resolve requirements to a consistent set of packages.
    check     Report broken packages in an installation.
    versions  List the available versions of a package.

Usage::

    pkgsolver resolve Demo:^9.0 --repo ./repo
    pkgsolver resolve Demo OpenTAP:9.12 --repo ./repo --strategy greedy
    pkgsolver check --installed ./install
    pkgsolver check --installed ./install --package Demo
    pkgsolver versions OpenTAP --repo ./repo
"""

from __future__ import annotations

import logging
import sys

import click

from pkgsolver import __version__
from pkgsolver.cli.check_cmd import check_command
from pkgsolver.cli.resolve_cmd import resolve_command
from pkgsolver.cli.versions_cmd import versions_command
from pkgsolver.config import SolverSettings
from pkgsolver.exceptions import ConfigError

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbosity: int) -> None:
    """Configure root logging: WARNING by default, INFO with -v, DEBUG with -vv."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (default: ./pkgsolver.yaml if present).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, config_path: str | None) -> None:
    """pkgsolver: package dependency resolution and consistency analysis.

    Resolve package requirements against one or more repositories, either
    with a backtracking solver or an incremental best-effort resolver, and
    check installations for broken dependencies.
    """
    configure_logging(verbose)
    try:
        settings = SolverSettings.load(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# Register all subcommands
cli.add_command(resolve_command)
cli.add_command(check_command)
cli.add_command(versions_command)
