from __future__ import annotations

from typing import Protocol, runtime_checkable

from henka.migration import LogEntry


@runtime_checkable
class Driver(Protocol):
    """Protocol for storage drivers that keep the application log."""

    def list_migrations_log(self) -> list[LogEntry]:
        """Return every recorded application event in insertion order."""
        ...
