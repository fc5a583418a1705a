from __future__ import annotations
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.


"""SQLite-backed record store for supervised children.

Tables:
- ``children``: one row per spawned child (never physically deleted)
- ``child_lifecycle_events``: append-only transition history
- ``kv``: generic key/value table (constitution digests live here)

Each call opens a fresh WAL connection so that the parent automaton and
this process can share the file.  No locks or transactions span separate
calls: a status read followed by a transition is not atomic, and callers
are expected to tolerate the resulting races.

Database: ``~/.automaton/state.db`` (WAL mode).
"""

import json
import logging
import sqlite3
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from core.schemas import ChildRecord, ChildState, LifecycleEvent

logger = logging.getLogger("brood.state")

# ── Schema SQL ──────────────────────────────────────────────

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS children (
    id           TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    sandbox_id   TEXT,
    status       TEXT NOT NULL DEFAULT 'requested',
    created_at   TEXT NOT NULL,
    last_checked TEXT
);
CREATE INDEX IF NOT EXISTS idx_children_status ON children(status);

CREATE TABLE IF NOT EXISTS child_lifecycle_events (
    id         TEXT PRIMARY KEY,
    child_id   TEXT NOT NULL,
    from_state TEXT NOT NULL,
    to_state   TEXT NOT NULL,
    reason     TEXT,
    metadata   TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_lifecycle_child ON child_lifecycle_events(child_id);

CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _row_to_child(row: sqlite3.Row) -> ChildRecord:
    return ChildRecord(
        id=row["id"],
        name=row["name"],
        sandbox_id=row["sandbox_id"] or None,
        status=ChildState(row["status"]),
        created_at=row["created_at"],
        last_checked=row["last_checked"],
    )


def _row_to_event(row: sqlite3.Row) -> LifecycleEvent:
    try:
        metadata = json.loads(row["metadata"] or "{}")
    except json.JSONDecodeError:
        logger.debug("Corrupted metadata on lifecycle event %s", row["id"])
        metadata = {}
    return LifecycleEvent(
        id=row["id"],
        child_id=row["child_id"],
        from_state=row["from_state"],
        to_state=ChildState(row["to_state"]),
        reason=row["reason"],
        metadata=metadata,
        created_at=row["created_at"],
    )


# ── SupervisionDB ───────────────────────────────────────────


class SupervisionDB:
    """Parameterized query/execute access plus typed helpers."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        """Open a new connection with WAL mode and dict row factory."""
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist."""
        with self._connect() as conn:
            conn.executescript(_SCHEMA_SQL)

    # ── Generic access ──────────────────────────────────────

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._connect() as conn:
            return conn.execute(sql, tuple(params)).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._connect() as conn:
            return conn.execute(sql, tuple(params)).fetchone()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and return the affected row count."""
        with self._connect() as conn:
            return conn.execute(sql, tuple(params)).rowcount

    # ── Children ────────────────────────────────────────────

    def get_child(self, child_id: str) -> ChildRecord | None:
        row = self.query_one("SELECT * FROM children WHERE id = ?", (child_id,))
        return _row_to_child(row) if row else None

    def get_child_status(self, child_id: str) -> ChildState | None:
        row = self.query_one("SELECT status FROM children WHERE id = ?", (child_id,))
        return ChildState(row["status"]) if row else None

    def list_children(self, status: ChildState | None = None) -> list[ChildRecord]:
        if status is None:
            rows = self.query("SELECT * FROM children ORDER BY created_at, id")
        else:
            rows = self.query(
                "SELECT * FROM children WHERE status = ? ORDER BY created_at, id",
                (status.value,),
            )
        return [_row_to_child(r) for r in rows]

    def list_stale_children(
        self,
        statuses: Iterable[ChildState],
        cutoff: str,
    ) -> list[ChildRecord]:
        """Children in *statuses* whose ``last_checked`` is before *cutoff*.

        Children that were never checked (``last_checked IS NULL``) are
        not returned.
        """
        values = [s.value for s in statuses]
        if not values:
            return []
        placeholders = ", ".join("?" for _ in values)
        rows = self.query(
            f"SELECT * FROM children WHERE status IN ({placeholders}) "
            "AND last_checked < ? ORDER BY last_checked, id",
            (*values, cutoff),
        )
        return [_row_to_child(r) for r in rows]

    def touch_last_checked(self, child_id: str, ts: str) -> None:
        self.execute("UPDATE children SET last_checked = ? WHERE id = ?", (ts, child_id))

    def register_child(self, record: ChildRecord, event: LifecycleEvent) -> None:
        """Insert a child row and its registration event atomically."""
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO children (id, name, sandbox_id, status, created_at, last_checked) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.name,
                    record.sandbox_id,
                    record.status.value,
                    record.created_at,
                    record.last_checked,
                ),
            )
            self._insert_event(conn, event)

    def record_transition(self, event: LifecycleEvent) -> None:
        """Append *event* and mirror its target state onto ``children``."""
        with self._connect() as conn:
            self._insert_event(conn, event)
            conn.execute(
                "UPDATE children SET status = ?, last_checked = ? WHERE id = ?",
                (event.to_state.value, event.created_at, event.child_id),
            )

    # ── Lifecycle events ────────────────────────────────────

    @staticmethod
    def _insert_event(conn: sqlite3.Connection, event: LifecycleEvent) -> None:
        conn.execute(
            "INSERT INTO child_lifecycle_events "
            "(id, child_id, from_state, to_state, reason, metadata, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                event.id,
                event.child_id,
                event.from_state,
                event.to_state.value,
                event.reason,
                json.dumps(event.metadata, ensure_ascii=False),
                event.created_at,
            ),
        )

    def get_events(self, child_id: str) -> list[LifecycleEvent]:
        rows = self.query(
            "SELECT * FROM child_lifecycle_events WHERE child_id = ? "
            "ORDER BY created_at ASC, rowid ASC",
            (child_id,),
        )
        return [_row_to_event(r) for r in rows]

    def get_latest_state(self, child_id: str) -> ChildState | None:
        row = self.query_one(
            "SELECT to_state FROM child_lifecycle_events WHERE child_id = ? "
            "ORDER BY created_at DESC, rowid DESC LIMIT 1",
            (child_id,),
        )
        return ChildState(row["to_state"]) if row else None

    # ── Key/value ───────────────────────────────────────────

    def kv_get(self, key: str) -> str | None:
        row = self.query_one("SELECT value FROM kv WHERE key = ?", (key,))
        return row["value"] if row else None

    def kv_set(self, key: str, value: str, ts: str) -> None:
        """Insert or replace *key*; no history is kept."""
        self.execute(
            "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
            "updated_at=excluded.updated_at",
            (key, value, ts),
        )

    def kv_delete(self, key: str) -> None:
        self.execute("DELETE FROM kv WHERE key = ?", (key,))
