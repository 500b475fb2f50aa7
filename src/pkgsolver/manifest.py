"""Package manifest loading and dumping (YAML or JSON).

A manifest is a mapping describing one package::

    name: Demo
    version: 9.0.2
    architecture: AnyCPU
    os: windows,linux
    description: Demo package
    dependencies:
      - name: OpenTAP
        version: ^9.11.0

``dependencies`` may also be given as a mapping of name to version
specifier. A missing dependency version means ``Any``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from pkgsolver.core.package import CpuArchitecture, PackageDef, PackageDependency
from pkgsolver.core.version import SemanticVersion, VersionSpecifier
from pkgsolver.exceptions import ManifestError, VersionFormatError

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


def _version_text(value: Any, where: str) -> str:
    # YAML reads an unquoted 1.10 as the float 1.1.
    if not isinstance(value, str):
        raise ManifestError(f"{where}: version {value!r} must be a quoted string")
    return value


def _parse_dependencies(raw: Any, source: str) -> list[PackageDependency]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        entries = [{"name": name, "version": spec} for name, spec in raw.items()]
    elif isinstance(raw, list):
        entries = raw
    else:
        raise ManifestError(f"{source}: 'dependencies' must be a list or a mapping")

    deps: list[PackageDependency] = []
    for entry in entries:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ManifestError(f"{source}: every dependency needs a 'name'")
        where = f"{source}: dependency {entry['name']!r}"
        spec_text = entry.get("version")
        version = VersionSpecifier.ANY
        try:
            if spec_text is not None:
                version = VersionSpecifier.parse(_version_text(spec_text, where))
        except VersionFormatError as exc:
            raise ManifestError(f"{where}: {exc}") from exc
        deps.append(PackageDependency(str(entry["name"]), version))
    return deps


def package_def_from_dict(data: dict[str, Any], source: str | None = None) -> PackageDef:
    """Build a ``PackageDef`` from a parsed manifest mapping.

    Args:
        data: The manifest contents.
        source: Where the manifest came from; used in error messages and
            stored as ``package_source``.

    Raises:
        ManifestError: If a required key is missing or a value is invalid.
    """
    label = source or "<manifest>"
    if not isinstance(data, dict):
        raise ManifestError(f"{label}: manifest must be a mapping")
    name = data.get("name")
    if not name:
        raise ManifestError(f"{label}: manifest has no 'name'")

    version = None
    if data.get("version") is not None:
        try:
            version = SemanticVersion.parse(_version_text(data["version"], label))
        except VersionFormatError as exc:
            raise ManifestError(f"{label}: {exc}") from exc

    try:
        architecture = CpuArchitecture.parse(data.get("architecture") or CpuArchitecture.ANY_CPU)
    except ValueError as exc:
        raise ManifestError(f"{label}: {exc}") from exc

    return PackageDef(
        name=str(name),
        version=version,
        architecture=architecture,
        os=data.get("os") or None,
        dependencies=_parse_dependencies(data.get("dependencies"), label),
        description=str(data.get("description") or ""),
        package_source=source,
    )


def package_def_to_dict(package: PackageDef) -> dict[str, Any]:
    """Serialize a ``PackageDef`` to a manifest mapping."""
    data: dict[str, Any] = {"name": package.name}
    if package.version is not None:
        data["version"] = str(package.version)
    data["architecture"] = str(package.architecture)
    if package.os:
        data["os"] = package.os
    if package.description:
        data["description"] = package.description
    if package.dependencies:
        data["dependencies"] = [
            {"name": dep.name, "version": str(dep.version)} for dep in package.dependencies
        ]
    return data


def load_package_def(path: Path) -> PackageDef:
    """Read a manifest file (``.yaml``, ``.yml`` or ``.json``).

    Raises:
        ManifestError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"{path}: cannot read manifest: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"{path}: malformed manifest: {exc}") from exc

    return package_def_from_dict(data, str(path))


def dump_package_def(package: PackageDef, path: Path) -> None:
    """Write ``package`` to ``path`` as JSON or YAML depending on the suffix."""
    path = Path(path)
    data = package_def_to_dict(package)
    if path.suffix.lower() == ".json":
        text = json.dumps(data, indent=2, sort_keys=True)
    else:
        text = yaml.safe_dump(data, sort_keys=False)
    path.write_text(text, encoding="utf-8")
