"""``pkgsolver resolve <requirement>...``: Resolve requirements against repositories.

Requirements are written ``name`` or ``name:specifier``, e.g.
``Demo:^9.0`` or ``OpenTAP:9.12.1``.

Exit Codes:
    0: A consistent set of packages was found.
    1: Resolution failed (unsatisfiable, unknown dependencies, version
        conflicts, or no repository could be queried), or installing the
        result would break installed packages.
    2: Invalid input or no repositories configured.
"""

from __future__ import annotations

import sys

import click

from pkgsolver.cli.context import get_settings, open_repositories
from pkgsolver.cli.output import (
    package_to_json,
    print_greedy_result,
    print_json,
    print_broken_packages,
    print_tree_result,
)
from pkgsolver.config import STRATEGIES
from pkgsolver.core.dependency import DependencyResolver, TreeSolver, check_dependencies
from pkgsolver.core.package import CpuArchitecture, PackageSpecifier
from pkgsolver.core.version import VersionSpecifier
from pkgsolver.exceptions import RepositoryUnavailableError, VersionFormatError
from pkgsolver.installation import Installation
from pkgsolver.repository import InMemoryRepository


def parse_requirement(
    text: str,
    architecture: CpuArchitecture = CpuArchitecture.UNSPECIFIED,
    os: str | None = None,
) -> PackageSpecifier:
    """Parse ``name`` or ``name:specifier`` into a ``PackageSpecifier``.

    Raises:
        VersionFormatError: If the name is empty or the specifier is malformed.
    """
    name, _, spec = text.partition(":")
    name = name.strip()
    if not name:
        raise VersionFormatError(f"Requirement {text!r} has no package name")
    version = VersionSpecifier.parse(spec) if spec.strip() else VersionSpecifier.ANY
    return PackageSpecifier(name, version, architecture, os)


@click.command("resolve")
@click.argument("requirements", nargs=-1, required=True)
@click.option(
    "--repo", "-r", "repos",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    help="Repository directory (repeatable, highest priority first).",
)
@click.option(
    "--installed",
    type=click.Path(file_okay=False),
    default=None,
    help="Installation directory whose packages are already present.",
)
@click.option(
    "--strategy",
    type=click.Choice(STRATEGIES),
    default=None,
    help="Resolver: backtracking 'tree' (default) or incremental 'greedy'.",
)
@click.option("--os", "os_name", default=None, help="Target operating system.")
@click.option("--arch", default=None, help="Target CPU architecture (x86, x64, arm, arm64, AnyCPU).")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def resolve_command(
    ctx: click.Context,
    requirements: tuple[str, ...],
    repos: tuple[str, ...],
    installed: str | None,
    strategy: str | None,
    os_name: str | None,
    arch: str | None,
    output_format: str,
) -> None:
    """Resolve REQUIREMENTS to a consistent set of package versions.

    Exit code 0 on success, 1 on resolution failure, 2 on invalid input.
    """
    settings = get_settings(ctx)
    try:
        architecture = CpuArchitecture.parse(arch)
        specs = [parse_requirement(r, architecture, os_name) for r in requirements]
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    repositories = open_repositories(repos, settings)
    installed_dir = installed or settings.installation
    installed_packages = Installation(installed_dir).get_packages() if installed_dir else []
    strategy = strategy or settings.strategy

    try:
        if strategy == "greedy":
            resolver = DependencyResolver(
                installed_packages, specs, repositories, architecture=architecture, os=os_name
            )
            ok = not resolver.unknown_dependencies and not resolver.dependency_issues
            resolved = resolver.dependencies
            data = {
                "strategy": "greedy",
                "success": ok,
                "dependencies": [package_to_json(p) for p in resolver.dependencies],
                "missing": [package_to_json(p) for p in resolver.missing_dependencies],
                "unknown": [str(d) for d in resolver.unknown_dependencies],
                "issues": [str(i) for i in resolver.dependency_issues],
            }
        else:
            if installed_packages:
                repositories = [InMemoryRepository("installed", installed_packages)] + repositories
            resolution = TreeSolver(repositories).resolve(specs)
            ok = resolution.success
            resolved = resolution.packages
            data = {
                "strategy": "tree",
                "success": resolution.success,
                "packages": [package_to_json(p) for p in resolution.packages],
                "conflicts": resolution.conflicts,
            }
    except RepositoryUnavailableError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    # Packages left broken once the result is installed over the installation.
    analyzer = check_dependencies(installed_packages, resolved) if installed_packages and resolved else None
    broken = list(analyzer.broken_packages) if analyzer is not None else []
    if broken:
        ok = False

    if output_format == "json":
        data["success"] = ok
        data["broken"] = [package_to_json(p) for p in broken]
        print_json(data)
    else:
        if strategy == "greedy":
            print_greedy_result(resolver)
        else:
            print_tree_result(resolution)
        if broken:
            print_broken_packages(analyzer)

    sys.exit(0 if ok else 1)
