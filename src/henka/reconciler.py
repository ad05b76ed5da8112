"""Reconcile the migration catalog against the application log.

The log is replayed strictly in the order the driver returns it: the last
event recorded for a version decides its state, regardless of timestamps.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from henka.driver.base import Driver
from henka.errors import ReconciliationError
from henka.migration import Description, Direction, LogEntry, State, Status, ValidationResult
from henka.source.base import Source

logger = logging.getLogger(__name__)


def fold_log(entries: Iterable[LogEntry]) -> dict[int, State]:
    """Reduce the application log to the last known state of every version."""
    states: dict[int, State] = {}

    for entry in entries:
        description = Description(migration=entry.migration, can_undo=False)
        if entry.direction is Direction.UP:
            states[entry.version] = State(
                description=description,
                status=Status.APPLIED,
                applied_at=entry.applied_at,
            )
        else:
            states[entry.version] = State(description=description, status=Status.PENDING)

    return states


def reconcile(catalog: Iterable[Description], entries: Iterable[LogEntry]) -> ValidationResult:
    """Classify every known version as pending, applied or missing.

    Versions present in the log but absent from the catalog are reported as
    missing, whatever their last logged direction was.
    """
    folded = fold_log(entries)

    migrations: list[State] = []
    applied_count = pending_count = missing_count = 0
    known_versions: set[int] = set()

    for description in catalog:
        known_versions.add(description.version)
        logged = folded.get(description.version)

        if logged is None:
            state = State(description=description, status=Status.PENDING)
        else:
            state = State(
                description=description,
                status=logged.status,
                applied_at=logged.applied_at,
            )

        if state.status is Status.PENDING:
            pending_count += 1
        else:
            applied_count += 1
        migrations.append(state)

    for version, logged in folded.items():
        if version in known_versions:
            continue
        migrations.append(
            State(
                description=logged.description.model_copy(update={"can_undo": False}),
                status=Status.MISSING,
                applied_at=logged.applied_at,
            )
        )
        missing_count += 1

    migrations.sort(key=lambda state: state.version)

    return ValidationResult(
        migrations=migrations,
        applied_count=applied_count,
        pending_count=pending_count,
        missing_count=missing_count,
    )


class Henka:
    """Migration state checker bound to a source and a driver.

    Usage:
        henka = Henka(FilesSource("db/migrations"), SqliteDriver("app.db"))
        result = henka.validate()
    """

    def __init__(self, source: Source, driver: Driver) -> None:
        self.source = source
        self.driver = driver

    def validate(self) -> ValidationResult:
        """Compare available migrations with the application log.

        Raises:
            ReconciliationError: If either collaborator fails. The original
                exception is chained as ``__cause__``.
        """
        try:
            catalog = self.source.get_available_migrations()
        except Exception as e:
            raise ReconciliationError(
                f"failed to get the list of available migrations: {e}"
            ) from e

        try:
            log = self.driver.list_migrations_log()
        except Exception as e:
            raise ReconciliationError(
                f"failed to get the list of applied migrations: {e}"
            ) from e

        result = reconcile(catalog, log)

        logger.info(
            "Validated %d migration(s): %d applied, %d pending, %d missing",
            len(result.migrations),
            result.applied_count,
            result.pending_count,
            result.missing_count,
        )
        if result.missing_count:
            logger.warning(
                "Applied migrations without a definition: %s",
                ", ".join(str(s.version) for s in result.migrations if s.status is Status.MISSING),
            )
        return result
