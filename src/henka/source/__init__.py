"""Migration definition sources.

Usage:
    from henka.source import FilesSource
    catalog = FilesSource("db/migrations").get_available_migrations()
"""

from .base import Source
from .files import (
    DOWN_SUFFIX,
    UP_SUFFIX,
    DirEntry,
    FilesSource,
    build_catalog,
    list_directory,
    migration_file_name,
    parse_migration_file_name,
)

__all__ = [
    "DOWN_SUFFIX",
    "UP_SUFFIX",
    "DirEntry",
    "FilesSource",
    "Source",
    "build_catalog",
    "list_directory",
    "migration_file_name",
    "parse_migration_file_name",
]
