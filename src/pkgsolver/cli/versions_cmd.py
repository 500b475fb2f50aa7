"""``pkgsolver versions <name>``: List the available versions of a package.

Exit Codes:
    0: At least one version was found.
    1: No versions found, or no repository could be queried.
    2: No repositories configured.
"""

from __future__ import annotations

import sys

import click

from pkgsolver.cli.context import get_settings, open_repositories
from pkgsolver.cli.output import print_json, print_versions
from pkgsolver.exceptions import RepositoryUnavailableError
from pkgsolver.repository import get_all_versions_from_all_repos


@click.command("versions")
@click.argument("name")
@click.option(
    "--repo", "-r", "repos",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    help="Repository directory (repeatable).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def versions_command(ctx: click.Context, name: str, repos: tuple[str, ...], output_format: str) -> None:
    """List every version of package NAME across repositories, newest first."""
    repositories = open_repositories(repos, get_settings(ctx))
    try:
        versions = get_all_versions_from_all_repos(repositories, name)
    except RepositoryUnavailableError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_format == "json":
        print_json({"name": name, "versions": [str(v.version) for v in versions]})
    elif versions:
        print_versions(name, versions)
    else:
        click.echo(f"No versions of {name} found.")
    sys.exit(0 if versions else 1)
