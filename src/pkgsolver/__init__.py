"""pkgsolver: Dependency resolution and consistency analysis for package repositories."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
