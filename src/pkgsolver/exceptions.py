"""pkgsolver exception hierarchy.

All public exceptions inherit from PkgSolverError, giving callers a single
base class to catch when they want to handle any pkgsolver-specific failure
without swallowing unrelated errors.

Unsatisfiable or conflicting requirements are *not* reported through this
hierarchy: the resolvers and the analyzer return them as data.
"""

from __future__ import annotations

from dataclasses import dataclass


class PkgSolverError(Exception):
    """Base exception for all pkgsolver errors."""


class VersionFormatError(PkgSolverError, ValueError):
    """Raised when a version or version specifier string cannot be parsed."""


class ManifestError(PkgSolverError):
    """Raised when a package manifest cannot be loaded.

    Covers unreadable files, malformed YAML/JSON, missing required keys
    and invalid version strings inside a manifest.
    """


class ConfigError(PkgSolverError):
    """Raised when the solver configuration file is invalid."""


@dataclass(frozen=True)
class RepositoryFailure:
    """A single repository that failed to answer a query.

    Attributes:
        url: URL or path identifying the failing repository.
        error: The exception raised by the repository.
    """

    url: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.url}: {self.error}"


class RepositoryUnavailableError(PkgSolverError):
    """Raised when every queried repository failed.

    A failure of only some repositories is logged and tolerated; this
    error is reserved for the case where no repository could answer.

    Attributes:
        failures: One ``RepositoryFailure`` per failed repository.
    """

    def __init__(self, failures: list[RepositoryFailure]) -> None:
        self.failures = list(failures)
        details = "; ".join(str(f) for f in self.failures)
        super().__init__(f"No package repository could be queried ({details})")
