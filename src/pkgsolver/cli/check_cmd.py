"""``pkgsolver check``: Report broken packages in an installation.

Runs the dependency analyzer over the installed packages. With
``--package`` the report is restricted to packages related to the named
ones (their dependencies and their dependers, transitively).

Exit Codes:
    0: No broken packages.
    1: One or more packages are broken.
    2: The installation contains no packages.
"""

from __future__ import annotations

import sys

import click

from pkgsolver.cli.context import get_settings
from pkgsolver.cli.output import package_to_json, print_broken_packages, print_json
from pkgsolver.core.dependency import DependencyAnalyzer
from pkgsolver.installation import Installation


@click.command("check")
@click.option(
    "--installed",
    type=click.Path(file_okay=False),
    default=None,
    help="Installation directory (default: configuration or current directory).",
)
@click.option(
    "--package", "-p", "packages",
    multiple=True,
    help="Only report issues related to this package (repeatable).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def check_command(
    ctx: click.Context,
    installed: str | None,
    packages: tuple[str, ...],
    output_format: str,
) -> None:
    """Check installed packages for missing or incompatible dependencies.

    Exit code 0 if nothing is broken, 1 otherwise, 2 if no packages are installed.
    """
    settings = get_settings(ctx)
    directory = installed or settings.installation or "."
    installed_packages = Installation(directory).get_packages()
    if not installed_packages:
        click.echo(f"No installed packages found in {directory}.")
        sys.exit(2)

    analyzer = DependencyAnalyzer.build(installed_packages)
    if packages:
        analyzer = analyzer.filter_related(list(packages))

    if output_format == "json":
        print_json({
            "broken": [
                {
                    **package_to_json(pkg),
                    "issues": [
                        {
                            "package": issue.package_name,
                            "type": issue.issue_type.value,
                            "expected": str(issue.expected_version),
                            "loaded": str(issue.loaded_version) if issue.loaded_version is not None else None,
                        }
                        for issue in analyzer.get_issues(pkg)
                    ],
                }
                for pkg in analyzer.broken_packages
            ],
        })
    else:
        print_broken_packages(analyzer)

    sys.exit(1 if analyzer.broken_packages else 0)
