from __future__ import annotations

from typing import Protocol, runtime_checkable

from henka.migration import Description, Direction, Migration


@runtime_checkable
class Source(Protocol):
    """Protocol for migration definition sources.

    A source knows which migrations exist and can hand out their scripts.
    """

    def get_available_migrations(self) -> list[Description]:
        """Return every valid migration, ascending by version."""
        ...

    def read_migration(self, migration: Migration, direction: Direction) -> str:
        """Return the script of one migration in the given direction."""
        ...
