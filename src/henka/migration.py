"""Value objects shared by the catalog builder and the state reconciler."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

VERSION_BITS = 64
VERSION_LENGTH = 14
MAX_VERSION = 2**VERSION_BITS - 1


class Direction(str, Enum):
    """Which script of a migration: forward or reverse."""

    UP = "u"
    DOWN = "d"


class Status(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    MISSING = "missing"


class Migration(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = Field(..., ge=0, le=MAX_VERSION)
    name: str = Field(..., min_length=1)


class Description(BaseModel):
    """A migration found in the catalog and whether it can be reverted."""

    model_config = ConfigDict(frozen=True)

    migration: Migration
    can_undo: bool = False

    @property
    def version(self) -> int:
        return self.migration.version

    @property
    def name(self) -> str:
        return self.migration.name


class LogEntry(BaseModel):
    """One historical application event as recorded by a driver."""

    model_config = ConfigDict(frozen=True)

    migration: Migration
    direction: Direction
    applied_at: datetime | None = None

    @property
    def version(self) -> int:
        return self.migration.version


class State(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: Description
    status: Status
    applied_at: datetime | None = Field(
        default=None, description="Set only for applied migrations (or missing ones applied last)."
    )

    @property
    def version(self) -> int:
        return self.description.version

    @property
    def name(self) -> str:
        return self.description.name

    @property
    def can_undo(self) -> bool:
        return self.description.can_undo


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    migrations: list[State] = Field(default_factory=list)
    applied_count: int = 0
    pending_count: int = 0
    missing_count: int = 0

    @property
    def is_consistent(self) -> bool:
        """True when no applied migration has lost its definition."""
        return self.missing_count == 0
