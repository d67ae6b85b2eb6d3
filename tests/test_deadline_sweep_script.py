from __future__ import annotations

import importlib.util
import json
from datetime import date
from pathlib import Path

import pytest

from modules.bzr.obligations import services

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_deadline_sweep.py"


@pytest.fixture()
def sweep_script():
    spec = importlib.util.spec_from_file_location("run_deadline_sweep", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _seed():
    agency_id = services.add_agency("Agencija", "agencija@zastita.rs")
    company_id = services.add_company("Delta", email="delta@delta.rs", agency_id=agency_id)
    services.add_equipment_inspection(company_id, "Kompresor", next_inspection=date(2025, 3, 10))
    return company_id


def test_full_run_prints_summary(sweep_script, capsys):
    company_id = _seed()
    exit_code = sweep_script.main(["--today", "2025-03-01", "--dry-run"])
    assert exit_code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["sync"][0]["company_id"] == company_id
    assert summary["sync"][0]["created"] == 1
    assert summary["sweep"]["sent"] == 1
    assert summary["sweep"]["delivered"] == 2


def test_sync_only_skips_sweep(sweep_script):
    company_id = _seed()
    summary = sweep_script.run(["--company", str(company_id), "--sync-only", "--today", "2025-03-01"])
    assert "sweep" not in summary
    assert summary["sync"][0]["created"] == 1


def test_notify_only_without_obligations(sweep_script):
    _seed()
    summary = sweep_script.run(["--notify-only", "--dry-run", "--today", "2025-03-01"])
    assert "sync" not in summary
    assert summary["sweep"]["sent"] == 0


def test_invalid_date_is_rejected(sweep_script):
    with pytest.raises(SystemExit):
        sweep_script.run(["--today", "01.03.2025"])


def test_unknown_company_sets_exit_code(sweep_script, capsys):
    assert sweep_script.main(["--company", "999", "--sync-only"]) == 1
    assert "company 999 not found" in capsys.readouterr().out


def test_missing_smtp_host_fails_the_run(sweep_script, capsys):
    _seed()
    assert sweep_script.main(["--today", "2025-03-01"]) == 1
    summary = json.loads(capsys.readouterr().out)
    assert summary["sweep"]["sent"] == 1
    assert summary["sweep"]["delivered"] == 0
    assert summary["sweep"]["failed"] == 2
