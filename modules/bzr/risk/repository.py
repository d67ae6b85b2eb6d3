"""SQLite persistence helpers for hazard assessments."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from utils.app_settings import load_settings
from utils.audit import ensure_audit_schema, log_audit, now_utc_iso

from .models import HazardAssessment

TRIPLE_FIELDS = (
    "initial_e",
    "initial_p",
    "initial_f",
    "residual_e",
    "residual_p",
    "residual_f",
)

INSERT_FIELDS = (
    "company_id",
    "position_id",
    "position_name",
    "hazard_code",
    "hazard_description",
    *TRIPLE_FIELDS,
    "corrective_measures",
    "is_high_risk",
    "supersedes_id",
)


def _connect(path: Path) -> sqlite3.Connection:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def _ensure_schema(conn: sqlite3.Connection) -> None:
    factor_checks = " ".join(
        f"{name} INTEGER NOT NULL CHECK ({name} BETWEEN 1 AND 6)," for name in TRIPLE_FIELDS
    )
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS hazard_assessments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            company_id INTEGER NOT NULL,
            position_id INTEGER NOT NULL,
            position_name TEXT NOT NULL,
            hazard_code TEXT NOT NULL,
            hazard_description TEXT NULL,
            {factor_checks}
            corrective_measures TEXT NULL,
            is_high_risk INTEGER NOT NULL DEFAULT 0,
            document_version TEXT NULL,
            supersedes_id INTEGER NULL REFERENCES hazard_assessments(id),
            superseded_at TEXT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_hazard_assessments_position "
        "ON hazard_assessments(company_id, position_id)"
    )
    ensure_audit_schema(conn)
    conn.commit()


@contextmanager
def company_connection(path: Path | None = None) -> Iterator[sqlite3.Connection]:
    conn = _connect(path or load_settings().database_path)
    try:
        _ensure_schema(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _row_to_assessment(row: sqlite3.Row) -> HazardAssessment:
    return HazardAssessment(
        id=row["id"],
        company_id=row["company_id"],
        position_id=row["position_id"],
        position_name=row["position_name"],
        hazard_code=row["hazard_code"],
        hazard_description=row["hazard_description"],
        initial_e=row["initial_e"],
        initial_p=row["initial_p"],
        initial_f=row["initial_f"],
        residual_e=row["residual_e"],
        residual_p=row["residual_p"],
        residual_f=row["residual_f"],
        corrective_measures=row["corrective_measures"],
        is_high_risk=bool(row["is_high_risk"]),
        document_version=row["document_version"],
        supersedes_id=row["supersedes_id"],
        superseded_at=row["superseded_at"],
        created_at=row["created_at"],
    )


def fetch_assessment(conn: sqlite3.Connection, assessment_id: int) -> HazardAssessment | None:
    cur = conn.execute("SELECT * FROM hazard_assessments WHERE id = ?", (assessment_id,))
    row = cur.fetchone()
    return _row_to_assessment(row) if row else None


def list_current(conn: sqlite3.Connection, company_id: int, position_id: int) -> list[HazardAssessment]:
    cur = conn.execute(
        """
        SELECT * FROM hazard_assessments
        WHERE company_id = ? AND position_id = ? AND superseded_at IS NULL
        ORDER BY id
        """,
        (company_id, position_id),
    )
    return [_row_to_assessment(row) for row in cur.fetchall()]


def list_current_high_risk(conn: sqlite3.Connection, company_id: int) -> list[HazardAssessment]:
    cur = conn.execute(
        """
        SELECT * FROM hazard_assessments
        WHERE company_id = ? AND is_high_risk = 1 AND superseded_at IS NULL
        ORDER BY position_id, id
        """,
        (company_id,),
    )
    return [_row_to_assessment(row) for row in cur.fetchall()]


def insert_assessment(conn: sqlite3.Connection, payload: dict[str, Any]) -> HazardAssessment:
    values = [payload.get(field) for field in INSERT_FIELDS]
    values[INSERT_FIELDS.index("is_high_risk")] = int(bool(payload.get("is_high_risk")))
    placeholders = ", ".join(["?"] * (len(INSERT_FIELDS) + 1))
    cur = conn.execute(
        f"INSERT INTO hazard_assessments ({', '.join(INSERT_FIELDS)}, created_at) VALUES ({placeholders})",
        [*values, now_utc_iso()],
    )
    assessment_id = cur.lastrowid
    assessment = fetch_assessment(conn, assessment_id)
    log_audit(
        conn,
        company_id=payload.get("company_id"),
        entity="hazard_assessment",
        entity_id=assessment_id,
        action="create",
        new_value={k: payload.get(k) for k in INSERT_FIELDS},
    )
    return assessment  # type: ignore[return-value]


def mark_superseded(conn: sqlite3.Connection, assessment_id: int) -> HazardAssessment:
    current = fetch_assessment(conn, assessment_id)
    if current is None:
        raise KeyError(f"Assessment {assessment_id} not found")
    stamp = now_utc_iso()
    conn.execute(
        "UPDATE hazard_assessments SET superseded_at = ? WHERE id = ? AND superseded_at IS NULL",
        (stamp, assessment_id),
    )
    updated = fetch_assessment(conn, assessment_id)
    if updated is None:
        raise KeyError(f"Assessment {assessment_id} not found")
    log_audit(
        conn,
        company_id=current.company_id,
        entity="hazard_assessment",
        entity_id=assessment_id,
        action="supersede",
        field="superseded_at",
        old_value=current.superseded_at,
        new_value=updated.superseded_at,
    )
    return updated


def set_document_version(conn: sqlite3.Connection, assessment_id: int, version: str) -> HazardAssessment:
    current = fetch_assessment(conn, assessment_id)
    if current is None:
        raise KeyError(f"Assessment {assessment_id} not found")
    conn.execute(
        "UPDATE hazard_assessments SET document_version = ? WHERE id = ?",
        (version, assessment_id),
    )
    updated = fetch_assessment(conn, assessment_id)
    if updated is None:
        raise KeyError(f"Assessment {assessment_id} not found")
    if current.document_version != version:
        log_audit(
            conn,
            company_id=current.company_id,
            entity="hazard_assessment",
            entity_id=assessment_id,
            action="attach_document",
            field="document_version",
            old_value=current.document_version,
            new_value=version,
        )
    return updated
