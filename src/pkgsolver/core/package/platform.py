"""CPU architecture and operating system compatibility rules.

A package is built for one architecture (or ``AnyCPU``) and for a
comma-separated list of operating systems (or none, meaning any OS).
The helpers here decide whether such a package can be used on a given
host, and whether two packages can be loaded side by side.
"""

from __future__ import annotations

import enum


class CpuArchitecture(enum.Enum):
    """Processor architecture a package is built for."""

    UNSPECIFIED = "Unspecified"
    ANY_CPU = "AnyCPU"
    X86 = "x86"
    X64 = "x64"
    ARM = "arm"
    ARM64 = "arm64"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str | CpuArchitecture | None) -> CpuArchitecture:
        """Parse an architecture name case-insensitively.

        ``None`` and the empty string yield ``UNSPECIFIED``.

        Raises:
            ValueError: If ``text`` names no known architecture.
        """
        if isinstance(text, CpuArchitecture):
            return text
        if not text:
            return cls.UNSPECIFIED
        wanted = text.strip().lower()
        for member in cls:
            if member.value.lower() == wanted or member.name.lower() == wanted:
                return member
        raise ValueError(f"Unknown CPU architecture: {text!r}")


def architecture_compatible_with(host: CpuArchitecture, plugin: CpuArchitecture) -> bool:
    """Return True if a package built for ``plugin`` can run on ``host``."""
    if plugin in (CpuArchitecture.ANY_CPU, CpuArchitecture.UNSPECIFIED):
        return True
    if host == CpuArchitecture.UNSPECIFIED:
        return True
    return host == plugin


def plugins_compatible(a: CpuArchitecture, b: CpuArchitecture) -> bool:
    """Return True if packages built for ``a`` and ``b`` can be loaded together."""
    neutral = (CpuArchitecture.ANY_CPU, CpuArchitecture.UNSPECIFIED)
    if a in neutral or b in neutral:
        return True
    return a == b


def split_os_list(os: str | None) -> set[str]:
    """Split a comma-separated OS list into a set of lowercase names."""
    if not os:
        return set()
    return {part.strip().lower() for part in os.split(",") if part.strip()}


def os_compatible(selected: str | None, package_os: str | None) -> bool:
    """Return True if a package for ``package_os`` can be used on ``selected``.

    Either side being empty means "any OS". Otherwise the two lists must
    share at least one entry.
    """
    wanted = split_os_list(selected)
    offered = split_os_list(package_os)
    if not wanted or not offered:
        return True
    return bool(wanted & offered)
