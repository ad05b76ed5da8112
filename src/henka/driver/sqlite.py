"""SQLite-backed application log.

Every forward or reverse application of a migration appends one row to the
log table. Rows are returned in insertion order (``ORDER BY id``), which is
the order the reconciler replays them in.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path

from henka.errors import DriverError, InvalidLogTableError
from henka.migration import Direction, LogEntry, Migration

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "migrations_log"


def quote_identifier(name: str) -> str:
    """Quote an SQLite identifier, escaping embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def _parse_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    # CURRENT_TIMESTAMP is UTC but carries no offset
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class SqliteDriver:
    """Application log stored in a local SQLite database.

    Usage:
        driver = SqliteDriver(Path("app.db"))
        driver.record_migration(migration, Direction.UP)
        log = driver.list_migrations_log()
    """

    def __init__(self, db_path: Path | str, table_name: str = DEFAULT_TABLE_NAME) -> None:
        self.db_path = Path(db_path)
        self.table_name = table_name
        self._local = threading.local()

    def connect(self) -> sqlite3.Connection:
        """Open or return an existing connection."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        except (OSError, sqlite3.Error) as e:
            raise DriverError(f"failed to open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        self._local.conn = conn
        return conn

    def close(self) -> None:
        """Close the database connection."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None

    def _ensure_log_table(self, conn: sqlite3.Connection) -> None:
        table = quote_identifier(self.table_name)
        try:
            with conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        version INTEGER NOT NULL,
                        migration_name TEXT,
                        direction CHAR(1),  -- "u" or "d"
                        start_time TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                        end_time TEXT
                    )
                    """
                )
        except sqlite3.Error as e:
            raise DriverError(f"failed to create migrations table {table}: {e}") from e

    def list_migrations_log(self) -> list[LogEntry]:
        """Return the application log in insertion order.

        Raises:
            InvalidLogTableError: If a row holds an unknown direction code.
            DriverError: If the table cannot be created or queried.
        """
        conn = self.connect()
        self._ensure_log_table(conn)

        try:
            rows = conn.execute(
                f"SELECT version, migration_name, direction, start_time "
                f"FROM {quote_identifier(self.table_name)} ORDER BY id"
            ).fetchall()
        except sqlite3.Error as e:
            raise DriverError(f"failed to query migrations log table: {e}") from e

        log = [self._row_to_entry(row) for row in rows]
        logger.debug("Loaded %d log entries from %s", len(log), self.table_name)
        return log

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> LogEntry:
        raw_direction = str(row["direction"] or "").lower()
        try:
            direction = Direction(raw_direction)
        except ValueError:
            raise InvalidLogTableError(
                f'an error has occurred when reading log table: direction "{row["direction"]}" is unknown'
            ) from None

        try:
            migration = Migration(version=row["version"], name=row["migration_name"])
        except ValueError as e:
            raise InvalidLogTableError(
                f"an error has occurred when reading log table: {e}"
            ) from e

        return LogEntry(
            migration=migration,
            direction=direction,
            applied_at=_parse_timestamp(row["start_time"]),
        )

    def record_migration(
        self,
        migration: Migration,
        direction: Direction,
        applied_at: datetime | None = None,
    ) -> None:
        """Append one application event to the log."""
        conn = self.connect()
        self._ensure_log_table(conn)

        # naive datetimes are local time; the log stores UTC
        started = (applied_at or datetime.now(UTC)).astimezone(UTC)
        try:
            with conn:
                conn.execute(
                    f"""
                    INSERT INTO {quote_identifier(self.table_name)}
                        (version, migration_name, direction, start_time, end_time)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        migration.version,
                        migration.name,
                        direction.value,
                        started.isoformat(),
                        datetime.now(UTC).isoformat(),
                    ),
                )
        except (sqlite3.Error, OverflowError) as e:
            raise DriverError(f"failed to record migration {migration.version}: {e}") from e

        logger.info(
            "Recorded migration %d (%s) direction=%s", migration.version, migration.name, direction.value
        )
