"""Rich output formatting helpers for the pkgsolver CLI."""

from __future__ import annotations

import json
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pkgsolver.core.dependency import (
    DependencyAnalyzer,
    DependencyIssueType,
    DependencyResolver,
    Resolution,
)
from pkgsolver.core.package import PackageDef, PackageVersion

_ISSUE_STYLES: dict[DependencyIssueType, str] = {
    DependencyIssueType.MISSING: "bold red",
    DependencyIssueType.INCOMPATIBLE_VERSION: "yellow",
    DependencyIssueType.DEPENDENCY_MISSING: "cyan",
}

console = Console()


def issue_style(issue_type: DependencyIssueType) -> str:
    """Return the Rich style string for a dependency issue type."""
    return _ISSUE_STYLES.get(issue_type, "white")


def package_to_json(package: PackageDef) -> dict[str, Any]:
    return {
        "name": package.name,
        "version": str(package.version) if package.version is not None else None,
        "architecture": str(package.architecture),
        "os": package.os,
        "source": package.package_source,
    }


def print_json(data: Any) -> None:
    """Print data as indented JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def _package_table(title: str, packages: list[PackageDef]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Architecture")
    table.add_column("Source", style="dim")
    for pkg in packages:
        table.add_row(
            pkg.name,
            str(pkg.version) if pkg.version is not None else "-",
            str(pkg.architecture),
            pkg.package_source or "",
        )
    return table


def print_tree_result(resolution: Resolution) -> None:
    """Print the outcome of a tree-solver run."""
    if not resolution.success:
        console.print(Panel("[bold red]Resolution failed[/bold red]", title="Dependency Resolution"))
        for conflict in resolution.conflicts:
            console.print(f"  [red]- {conflict}[/red]")
        return

    console.print(Panel("[bold green]Resolution successful[/bold green]", title="Dependency Resolution"))
    if resolution.packages:
        console.print(_package_table("Resolved Packages", resolution.packages))
    else:
        console.print("[dim]No packages to resolve.[/dim]")


def print_greedy_result(resolver: DependencyResolver) -> None:
    """Print the outcome of an incremental resolver run."""
    ok = not resolver.unknown_dependencies and not resolver.dependency_issues
    if ok:
        console.print(Panel("[bold green]Resolution successful[/bold green]", title="Dependency Resolution"))
    else:
        console.print(Panel("[bold yellow]Resolution incomplete[/bold yellow]", title="Dependency Resolution"))

    console.print(_package_table("Resolved Packages", resolver.dependencies))
    if resolver.missing_dependencies:
        names = ", ".join(f"{p.name} {p.version}" for p in resolver.missing_dependencies)
        console.print(f"[bold]To install:[/bold] {names}")
    for dep in resolver.unknown_dependencies:
        console.print(f"  [red]- Unknown dependency: {dep}[/red]")
    for issue in resolver.dependency_issues:
        console.print(f"  [yellow]- Version conflict: {issue}[/yellow]")
    if resolver.cancelled:
        console.print("[dim]Resolution was cancelled; results are partial.[/dim]")


def print_broken_packages(analyzer: DependencyAnalyzer) -> None:
    """Print the broken packages found by the analyzer with their issues."""
    if not analyzer.broken_packages:
        console.print(Panel("[bold green]No broken packages[/bold green]", title="Dependency Check"))
        return

    console.print(
        Panel(
            f"[bold red]{len(analyzer.broken_packages)} broken package(s)[/bold red]",
            title="Dependency Check",
        )
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Issue")
    table.add_column("Dependency")
    for pkg in analyzer.broken_packages:
        version = str(pkg.version) if pkg.version is not None else "-"
        for issue in analyzer.get_issues(pkg):
            style = issue_style(issue.issue_type)
            table.add_row(
                pkg.name,
                version,
                f"[{style}]{issue.issue_type.value}[/{style}]",
                str(issue),
            )
    console.print(table)


def print_versions(name: str, versions: list[PackageVersion]) -> None:
    """Print the available versions of a package, newest first."""
    table = Table(title=f"Versions of {name}", show_header=True, header_style="bold")
    table.add_column("Version", style="bold")
    table.add_column("Architecture")
    table.add_column("OS")
    for pv in versions:
        table.add_row(str(pv.version), str(pv.architecture), pv.os or "")
    console.print(table)
