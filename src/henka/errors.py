"""Exceptions raised by henka.

Only ``MigrationFileNameError`` is ever handled internally: the catalog
builder skips entries that do not follow the naming convention.
"""

from __future__ import annotations


class HenkaError(Exception):
    """Base class for all henka errors."""

    pass


class ConfigurationError(HenkaError):
    """Raised when the migrations root is missing or is not a directory."""

    pass


class MigrationFileNameError(HenkaError):
    """Raised when a file name does not follow the migration naming convention."""

    pass


class DuplicateMigrationError(HenkaError):
    """Raised when one version is defined under two different names."""

    def __init__(self, version: int, existing_name: str, conflicting_name: str) -> None:
        self.version = version
        self.existing_name = existing_name
        self.conflicting_name = conflicting_name
        super().__init__(
            f"migration version already exists with different name: "
            f'version {version} has conflicting names: "{existing_name}" and "{conflicting_name}"'
        )


class SourceError(HenkaError):
    """Raised when migration definitions cannot be listed or read."""

    pass


class DriverError(HenkaError):
    """Raised when the application log cannot be read or written."""

    pass


class InvalidLogTableError(DriverError):
    """Raised when the application log holds a row that cannot be interpreted."""

    pass


class ReconciliationError(HenkaError):
    """Raised when a collaborator fails during validation."""

    pass
