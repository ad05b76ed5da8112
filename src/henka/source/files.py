"""Directory-backed migration source.

Migration scripts live side by side in one directory and are named

    V<14-digit version>_<name>.up.hmf
    V<14-digit version>_<name>.down.hmf

Files that do not follow the convention are ignored. Two files that share a
version but not a name make the whole catalog invalid.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from henka.errors import (
    ConfigurationError,
    DuplicateMigrationError,
    MigrationFileNameError,
    SourceError,
)
from henka.migration import (
    MAX_VERSION,
    VERSION_LENGTH,
    Description,
    Direction,
    Migration,
)

logger = logging.getLogger(__name__)

PREFIX = "V"
UP_SUFFIX = ".up.hmf"
DOWN_SUFFIX = ".down.hmf"

_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class DirEntry:
    """One entry of a directory listing."""

    name: str
    is_dir: bool = False
    is_file: bool = True


Lister = Callable[[Path], list[DirEntry]]


def list_directory(root: Path) -> list[DirEntry]:
    """List the entries of ``root`` without following symlinks."""
    try:
        with os.scandir(root) as it:
            return [
                DirEntry(
                    name=entry.name,
                    is_dir=entry.is_dir(follow_symlinks=False),
                    is_file=entry.is_file(follow_symlinks=False),
                )
                for entry in it
            ]
    except OSError as e:
        raise SourceError(f"failed to read contents of migrations directory {root}: {e}") from e


def _suffix_for(direction: Direction) -> str:
    return UP_SUFFIX if direction is Direction.UP else DOWN_SUFFIX


def migration_file_name(migration: Migration, direction: Direction) -> str:
    """Build the conventional file name of a migration script."""
    return f"{PREFIX}{migration.version:0{VERSION_LENGTH}d}_{migration.name}{_suffix_for(direction)}"


def parse_migration_file_name(file_name: str) -> tuple[Migration, Direction]:
    """Extract the migration and direction encoded in a file name.

    Raises:
        MigrationFileNameError: If the name does not follow the convention.
    """
    if not file_name.startswith(PREFIX):
        raise MigrationFileNameError(f"{file_name} does not start with {PREFIX!r}")

    full_name = file_name[len(PREFIX):]
    if full_name.endswith(UP_SUFFIX):
        direction = Direction.UP
        full_name = full_name[: -len(UP_SUFFIX)]
    elif full_name.endswith(DOWN_SUFFIX):
        direction = Direction.DOWN
        full_name = full_name[: -len(DOWN_SUFFIX)]
    else:
        raise MigrationFileNameError(
            f"{file_name} ends with neither {UP_SUFFIX!r} nor {DOWN_SUFFIX!r}"
        )

    if len(full_name) < VERSION_LENGTH + 1:
        raise MigrationFileNameError(f"{file_name} is too short")

    digits = full_name[:VERSION_LENGTH]
    if not _DIGITS.issuperset(digits):
        raise MigrationFileNameError(f"{file_name} does not contain a valid version")
    version = int(digits)
    if version > MAX_VERSION:
        raise MigrationFileNameError(f"{file_name} does not contain a valid version")

    separator = full_name[VERSION_LENGTH]
    if separator != "_":
        raise MigrationFileNameError(
            f"{file_name} is missing an underscore after version ({separator!r} given)"
        )

    name = full_name[VERSION_LENGTH + 1:]
    if not name:
        raise MigrationFileNameError(f"{file_name} is missing name section")

    return Migration(version=version, name=name), direction


def _update_description(
    descriptions: dict[int, Description], migration: Migration, direction: Direction
) -> None:
    existing = descriptions.get(migration.version)

    if existing is None:
        descriptions[migration.version] = Description(
            migration=migration,
            can_undo=direction is Direction.DOWN,
        )
    elif existing.name != migration.name:
        raise DuplicateMigrationError(migration.version, existing.name, migration.name)
    elif direction is Direction.DOWN and not existing.can_undo:
        descriptions[migration.version] = existing.model_copy(update={"can_undo": True})


def build_catalog(entries: Iterable[DirEntry]) -> list[Description]:
    """Build the migration catalog from a directory listing.

    Entries are merged by version in listing order; the result is sorted
    ascending by version.

    Raises:
        DuplicateMigrationError: If a version appears under two names.
    """
    descriptions: dict[int, Description] = {}

    for entry in entries:
        if entry.is_dir or not entry.is_file:
            continue

        try:
            migration, direction = parse_migration_file_name(entry.name)
        except MigrationFileNameError as e:
            logger.debug("Skipping migration file: %s", e)
            continue

        _update_description(descriptions, migration, direction)

    return [descriptions[version] for version in sorted(descriptions)]


class FilesSource:
    """Migration source reading scripts from a single directory.

    Usage:
        source = FilesSource(Path("db/migrations"))
        catalog = source.get_available_migrations()
    """

    def __init__(self, migrations_dir: Path | str, lister: Lister = list_directory) -> None:
        self.migrations_dir = Path(migrations_dir)
        self._lister = lister

        try:
            st = os.stat(self.migrations_dir)
        except OSError as e:
            raise ConfigurationError(
                f"failed to stat migrations directory {self.migrations_dir}: {e}"
            ) from e

        if not stat.S_ISDIR(st.st_mode):
            raise ConfigurationError(f"{self.migrations_dir} is not a directory")

    def get_available_migrations(self) -> list[Description]:
        entries = self._lister(self.migrations_dir)
        catalog = build_catalog(entries)
        logger.debug(
            "Found %d migration(s) in %s", len(catalog), self.migrations_dir
        )
        return catalog

    def read_migration(self, migration: Migration, direction: Direction) -> str:
        """Read the script of ``migration`` for ``direction``.

        Raises:
            SourceError: If the script does not exist or cannot be read.
        """
        path = self.migrations_dir / migration_file_name(migration, direction)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise SourceError(f"failed to read migration script {path.name}: {e}") from e
