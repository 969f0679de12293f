"""SQLite-backed persistence for raw events, derived sessions and focus violations."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Optional

from focusreport.core.models import UNKNOWN_APP, Event, FocusViolation, Session

logger = logging.getLogger(__name__)


class ActivityStore:
    """Read/write interface to the local SQLite database.

    Acts as both the event store (append-only samples) and the session
    store (derived sessions, replaced a day at a time).  Timestamps are
    persisted as ISO 8601 text.

    All access is serialized through one re-entrant lock.  Use
    :meth:`transaction` to group several operations into a single atomic
    unit; the lock is held until the unit commits or rolls back, so a
    sampler appending from another thread waits instead of interleaving.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed operations as one transaction.

        Commits when the outermost block exits normally and rolls back if
        it raises.  Nested blocks join the enclosing transaction.
        """
        with self._lock:
            conn = self._get_conn()
            self._depth += 1
            try:
                yield conn
            except BaseException:
                if self._depth == 1:
                    conn.rollback()
                raise
            else:
                if self._depth == 1:
                    conn.commit()
            finally:
                self._depth -= 1

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_db(self) -> None:
        """Create tables and indexes if they don't already exist."""
        with self._lock:
            conn = self._get_conn()
            conn.executescript(
                """\
                CREATE TABLE IF NOT EXISTS app_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    app_identifier TEXT NOT NULL,
                    app_name TEXT NOT NULL,
                    is_idle INTEGER NOT NULL DEFAULT 0,
                    window_title TEXT
                );

                CREATE TABLE IF NOT EXISTS focus_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    app_identifier TEXT NOT NULL,
                    app_name TEXT NOT NULL,
                    duration_seconds INTEGER NOT NULL,
                    ended_by_idle INTEGER NOT NULL DEFAULT 0,
                    window_title TEXT
                );

                CREATE TABLE IF NOT EXISTS focus_violations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    app_identifier TEXT NOT NULL,
                    app_name TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_events_timestamp
                    ON app_events(timestamp);

                CREATE INDEX IF NOT EXISTS idx_sessions_start
                    ON focus_sessions(start_time);

                CREATE INDEX IF NOT EXISTS idx_violations_timestamp
                    ON focus_violations(timestamp);
                """
            )
            conn.commit()

    # ------------------------------------------------------------------
    # Event operations
    # ------------------------------------------------------------------

    def append_event(self, event: Event) -> int:
        """Persist a raw sample. Returns the row id."""
        with self.transaction() as conn:
            cursor = conn.execute(
                """\
                INSERT INTO app_events
                    (timestamp, app_identifier, app_name, is_idle, window_title)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    event.timestamp.isoformat(),
                    event.app_identifier,
                    event.app_name,
                    1 if event.is_idle else 0,
                    event.window_title or None,
                ),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def fetch_events(self, start: datetime, end: datetime) -> list[Event]:
        """Return all events whose timestamp falls in [start, end), oldest first."""
        with self._lock:
            rows = self._get_conn().execute(
                """\
                SELECT * FROM app_events
                WHERE timestamp >= ? AND timestamp < ?
                ORDER BY timestamp, id
                """,
                (start.isoformat(), end.isoformat()),
            ).fetchall()
        return [self._row_to_event(r) for r in rows]

    # ------------------------------------------------------------------
    # Session operations
    # ------------------------------------------------------------------

    def insert_session(self, session: Session) -> int:
        """Persist a derived session. Returns the row id."""
        with self.transaction() as conn:
            cursor = conn.execute(
                """\
                INSERT INTO focus_sessions
                    (start_time, end_time, app_identifier, app_name,
                     duration_seconds, ended_by_idle, window_title)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.start_time.isoformat(),
                    session.end_time.isoformat(),
                    session.app_identifier,
                    session.app_name,
                    session.duration_seconds,
                    1 if session.ended_by_idle else 0,
                    session.window_title,
                ),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def delete_sessions(self, start: datetime, end: datetime) -> int:
        """Delete sessions starting in [start, end). Returns the number removed."""
        with self.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM focus_sessions WHERE start_time >= ? AND start_time < ?",
                (start.isoformat(), end.isoformat()),
            )
        return cursor.rowcount

    def replace_sessions(
        self, start: datetime, end: datetime, sessions: Iterable[Session]
    ) -> None:
        """Atomically swap the sessions of [start, end) for *sessions*.

        Either every old session is replaced or, if any insert fails,
        the previous sessions are left untouched.
        """
        with self.transaction():
            removed = self.delete_sessions(start, end)
            count = 0
            for session in sessions:
                self.insert_session(session)
                count += 1
        logger.debug(
            "Replaced %d sessions with %d in [%s, %s)", removed, count, start, end
        )

    def fetch_sessions(self, start: datetime, end: datetime) -> list[Session]:
        """Return all sessions whose start_time falls in [start, end), by start."""
        with self._lock:
            rows = self._get_conn().execute(
                """\
                SELECT * FROM focus_sessions
                WHERE start_time >= ? AND start_time < ?
                ORDER BY start_time, id
                """,
                (start.isoformat(), end.isoformat()),
            ).fetchall()
        return [self._row_to_session(r) for r in rows]

    # ------------------------------------------------------------------
    # Focus violation operations
    # ------------------------------------------------------------------

    def insert_violation(self, violation: FocusViolation) -> int:
        with self.transaction() as conn:
            cursor = conn.execute(
                """\
                INSERT INTO focus_violations (timestamp, app_identifier, app_name)
                VALUES (?, ?, ?)
                """,
                (
                    violation.timestamp.isoformat(),
                    violation.app_identifier,
                    violation.app_name,
                ),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def fetch_violation_count(self, start: datetime, end: datetime) -> int:
        with self._lock:
            row = self._get_conn().execute(
                """\
                SELECT COUNT(*) FROM focus_violations
                WHERE timestamp >= ? AND timestamp < ?
                """,
                (start.isoformat(), end.isoformat()),
            ).fetchone()
        return row[0]

    def fetch_violations(
        self, start: datetime, end: datetime, limit: int = 10
    ) -> list[FocusViolation]:
        """Return up to *limit* violations in [start, end), newest first."""
        with self._lock:
            rows = self._get_conn().execute(
                """\
                SELECT * FROM focus_violations
                WHERE timestamp >= ? AND timestamp < ?
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
                """,
                (start.isoformat(), end.isoformat(), limit),
            ).fetchall()
        return [
            FocusViolation(
                timestamp=datetime.fromisoformat(r["timestamp"]),
                app_identifier=r["app_identifier"] or UNKNOWN_APP,
                app_name=r["app_name"] or UNKNOWN_APP,
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Row mapping helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> Event:
        return Event(
            timestamp=datetime.fromisoformat(row["timestamp"]),
            app_identifier=row["app_identifier"] or UNKNOWN_APP,
            app_name=row["app_name"] or UNKNOWN_APP,
            is_idle=bool(row["is_idle"]),
            window_title=row["window_title"],
        )

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> Session:
        return Session(
            start_time=datetime.fromisoformat(row["start_time"]),
            end_time=datetime.fromisoformat(row["end_time"]),
            app_identifier=row["app_identifier"] or UNKNOWN_APP,
            app_name=row["app_name"] or UNKNOWN_APP,
            duration_seconds=row["duration_seconds"],
            ended_by_idle=bool(row["ended_by_idle"]),
            window_title=row["window_title"],
        )
