from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from modules.bzr import risk


@pytest.fixture()
def client():
    app = FastAPI()
    risk.register_api(app)
    return TestClient(app)


BASE = {
    "company_id": 5,
    "position_id": 50,
    "position_name": "Operater na presi",
    "hazard_code": "M-02",
    "initial_e": 5,
    "initial_p": 4,
    "initial_f": 4,
    "residual_e": 3,
    "residual_p": 2,
    "residual_f": 2,
    "corrective_measures": "Dvorucno upravljanje",
}


def test_classify_endpoint(client):
    resp = client.post(
        "/api/bzr/risk/classify",
        json={"initial": {"e": 6, "p": 4, "f": 3}, "residual": {"e": 3, "p": 3, "f": 4}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["initial"] == {"value": 72, "band": "unacceptable", "label": "Висок ризик (неприхватљив)"}
    assert body["residual"]["band"] == "acceptable"
    assert body["is_high_risk"] is True
    assert body["residual_reduced"] is True


def test_classify_rejects_factor_out_of_range(client):
    resp = client.post(
        "/api/bzr/risk/classify",
        json={"initial": {"e": 7, "p": 4, "f": 3}, "residual": {"e": 1, "p": 1, "f": 1}},
    )
    assert resp.status_code == 422


def test_assessment_lifecycle(client):
    created = client.post("/api/bzr/risk/assessments", json=BASE)
    assert created.status_code == 201
    body = created.json()
    assert body["initial_value"] == 80
    assert body["residual_band"] == "acceptable"
    assert body["is_high_risk"] is True

    listed = client.get("/api/bzr/risk/assessments", params={"company_id": 5, "position_id": 50}).json()
    assert [a["id"] for a in listed] == [body["id"]]

    high = client.get("/api/bzr/risk/high-risk", params={"company_id": 5}).json()
    assert high[0]["hazard_summary"] == "Ri=80, R=12"

    redo = client.post(
        f"/api/bzr/risk/assessments/{body['id']}/reassess",
        json={k: BASE[k] for k in ("initial_e", "initial_p", "initial_f", "residual_e", "residual_p")}
        | {"residual_f": 1},
    )
    assert redo.status_code == 201
    assert redo.json()["supersedes_id"] == body["id"]

    again = client.post(
        f"/api/bzr/risk/assessments/{body['id']}/reassess",
        json={k: BASE[k] for k in ("initial_e", "initial_p", "initial_f", "residual_e", "residual_p", "residual_f")},
    )
    assert again.status_code == 409
    assert again.json()["error"] == "assessment_superseded"


def test_residual_not_reduced_returns_422(client):
    payload = dict(BASE, residual_e=5, residual_p=4, residual_f=4)
    resp = client.post("/api/bzr/risk/assessments", json=payload)
    assert resp.status_code == 422
    assert resp.json()["error"] == "residual_not_reduced"


def test_missing_assessment_is_404(client):
    resp = client.get("/api/bzr/risk/assessments/12345")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_document_lock_conflict(client):
    client.post("/api/bzr/risk/assessments", json=BASE)
    ok = client.post("/api/bzr/risk/documents", json={"company_id": 5, "position_id": 50, "version": "2025-01"})
    assert ok.status_code == 200
    assert ok.json()[0]["document_version"] == "2025-01"
    clash = client.post("/api/bzr/risk/documents", json={"company_id": 5, "position_id": 50, "version": "2025-02"})
    assert clash.status_code == 409
    assert clash.json()["error"] == "assessment_locked"


def test_export_pdf(client):
    missing = client.get("/api/bzr/risk/export", params={"company_id": 5, "position_id": 50})
    assert missing.status_code == 404
    client.post("/api/bzr/risk/assessments", json=BASE)
    resp = client.get("/api/bzr/risk/export", params={"company_id": 5, "position_id": 50})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
