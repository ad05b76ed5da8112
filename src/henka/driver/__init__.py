"""Storage drivers that keep the migration application log."""

from .base import Driver
from .sqlite import DEFAULT_TABLE_NAME, SqliteDriver

__all__ = ["DEFAULT_TABLE_NAME", "Driver", "SqliteDriver"]
