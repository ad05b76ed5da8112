"""henka - database migration catalog and state checker.

Discovers migration scripts that follow the ``V<version>_<name>.up.hmf``
naming convention and reconciles them with the application log kept by a
storage driver.

Usage:
    from henka import FilesSource, Henka, SqliteDriver

    result = Henka(FilesSource("db/migrations"), SqliteDriver("app.db")).validate()
"""

from .driver import Driver, SqliteDriver
from .errors import (
    ConfigurationError,
    DriverError,
    DuplicateMigrationError,
    HenkaError,
    InvalidLogTableError,
    MigrationFileNameError,
    ReconciliationError,
    SourceError,
)
from .migration import (
    Description,
    Direction,
    LogEntry,
    Migration,
    State,
    Status,
    ValidationResult,
)
from .reconciler import Henka, fold_log, reconcile
from .source import FilesSource, Source, build_catalog

__all__ = [
    "ConfigurationError",
    "Description",
    "Direction",
    "Driver",
    "DriverError",
    "DuplicateMigrationError",
    "FilesSource",
    "Henka",
    "HenkaError",
    "InvalidLogTableError",
    "LogEntry",
    "Migration",
    "MigrationFileNameError",
    "ReconciliationError",
    "Source",
    "SourceError",
    "SqliteDriver",
    "State",
    "Status",
    "ValidationResult",
    "build_catalog",
    "fold_log",
    "reconcile",
]
