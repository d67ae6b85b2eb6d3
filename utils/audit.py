from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime, timezone
from typing import Any

AUDIT_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id INTEGER,
    user_id INTEGER,
    ts_iso TEXT,
    entity TEXT,
    entity_id INTEGER,
    action TEXT,
    field TEXT,
    old_value TEXT,
    new_value TEXT
)
"""

_AUDIT_COLUMNS = {
    "company_id": "INTEGER",
    "user_id": "INTEGER",
    "ts_iso": "TEXT",
    "entity": "TEXT",
    "entity_id": "INTEGER",
    "action": "TEXT",
    "field": "TEXT",
    "old_value": "TEXT",
    "new_value": "TEXT",
}


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_utc_naive() -> datetime:
    """UTC now without tzinfo, for SQLite DateTime columns."""
    return now_utc().replace(tzinfo=None)


def today_utc() -> date:
    return now_utc().date()


def ensure_audit_schema(conn: sqlite3.Connection) -> None:
    conn.execute(AUDIT_SCHEMA)
    cur = conn.execute("PRAGMA table_info(audit_logs)")
    existing = {row[1] for row in cur.fetchall()}
    # Older databases predate some columns; add them nullable.
    for column, col_type in _AUDIT_COLUMNS.items():
        if column not in existing:
            conn.execute(f"ALTER TABLE audit_logs ADD COLUMN {column} {col_type}")


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    return str(value)


def log_audit(
    conn: sqlite3.Connection,
    *,
    company_id: int | None,
    entity: str,
    entity_id: int | None,
    action: str,
    field: str | None = None,
    old_value: Any = None,
    new_value: Any = None,
    user_id: int | None = None,
) -> None:
    conn.execute(
        """
        INSERT INTO audit_logs (company_id, user_id, ts_iso, entity, entity_id, action, field, old_value, new_value)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            company_id,
            user_id,
            now_utc_iso(),
            entity,
            entity_id,
            action,
            field,
            _as_text(old_value),
            _as_text(new_value),
        ),
    )


def fetch_audit_rows(
    conn: sqlite3.Connection, *, entity: str | None = None, limit: int = 50
) -> list[sqlite3.Row]:
    ensure_audit_schema(conn)
    if entity is None:
        cur = conn.execute("SELECT * FROM audit_logs ORDER BY id DESC LIMIT ?", (limit,))
    else:
        cur = conn.execute(
            "SELECT * FROM audit_logs WHERE entity = ? ORDER BY id DESC LIMIT ?",
            (entity, limit),
        )
    return cur.fetchall() or []


__all__ = [
    "ensure_audit_schema",
    "fetch_audit_rows",
    "log_audit",
    "now_utc",
    "now_utc_iso",
    "today_utc",
]
