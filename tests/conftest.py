from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from henka.migration import Description, Direction, LogEntry, Migration


def at(seconds: int) -> datetime:
    """Timestamp ``seconds`` after the epoch, in UTC."""
    return datetime.fromtimestamp(seconds, tz=UTC)


def describe(version: int, name: str, can_undo: bool = False) -> Description:
    return Description(migration=Migration(version=version, name=name), can_undo=can_undo)


def up(description: Description, seconds: int) -> LogEntry:
    return LogEntry(migration=description.migration, direction=Direction.UP, applied_at=at(seconds))


def down(description: Description, seconds: int) -> LogEntry:
    return LogEntry(migration=description.migration, direction=Direction.DOWN, applied_at=at(seconds))


def touch(directory: Path, *names: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text(f"-- {name}\n", encoding="utf-8")


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    """An empty migrations directory."""
    directory = tmp_path / "migrations"
    directory.mkdir()
    return directory


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging() during the test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
