from __future__ import annotations

import sqlite3

from modules.bzr.risk import repository, service
from utils.audit import ensure_audit_schema, fetch_audit_rows, log_audit, now_utc_naive


def test_old_audit_table_gains_missing_columns(tmp_path):
    conn = sqlite3.connect(tmp_path / "old.db")
    conn.execute("CREATE TABLE audit_logs (id INTEGER PRIMARY KEY AUTOINCREMENT, action TEXT)")
    ensure_audit_schema(conn)
    columns = {row[1] for row in conn.execute("PRAGMA table_info(audit_logs)")}
    assert {"company_id", "entity", "entity_id", "old_value", "new_value"} <= columns
    log_audit(conn, company_id=1, entity="x", entity_id=2, action="create", new_value={"b": 1, "a": 2})
    conn.row_factory = sqlite3.Row
    row = fetch_audit_rows(conn)[0]
    assert row["new_value"] == '{"a": 2, "b": 1}'
    conn.close()


def test_assessment_changes_are_audited():
    created = service.record_assessment(
        {
            "company_id": 4,
            "position_id": 40,
            "position_name": "Magacioner",
            "hazard_code": "T-01",
            "initial_e": 3,
            "initial_p": 3,
            "initial_f": 3,
            "residual_e": 2,
            "residual_p": 2,
            "residual_f": 2,
        }
    )
    service.reassess(created.id, {"residual_e": 1})
    with repository.company_connection() as conn:
        actions = [row["action"] for row in fetch_audit_rows(conn, entity="hazard_assessment")]
    assert actions == ["create", "supersede", "create"]


def test_now_utc_naive_drops_tzinfo():
    assert now_utc_naive().tzinfo is None
