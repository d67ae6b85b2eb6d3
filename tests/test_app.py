from __future__ import annotations

from fastapi.testclient import TestClient

import main


def test_create_app_registers_every_router():
    app = main.create_app()
    paths = app.openapi()["paths"]
    assert "/api/bzr/risk/classify" in paths
    assert "/api/bzr/obligations/upcoming" in paths
    assert "/api/bzr/injury/tables" in paths
    assert app.state.bzr_routers == {"risk", "obligations", "injury"}


def test_register_api_is_idempotent():
    from modules.bzr import register_api

    app = main.create_app()
    before = len(app.router.routes)
    register_api(app)
    register_api(app)
    assert len(app.router.routes) == before


def test_include_once_reports_repeat_registration():
    from fastapi import APIRouter, FastAPI

    from modules.bzr import include_once

    app = FastAPI()
    router = APIRouter(prefix="/api/bzr/extra")
    assert include_once(app, "extra", router) is True
    assert include_once(app, "extra", router) is False


def test_health_of_combined_app(monkeypatch):
    monkeypatch.setenv("BZR_DEV", "1")
    client = TestClient(main.create_app())
    assert client.get("/api/bzr/obligations/upcoming").json() == []
    assert client.get("/api/bzr/risk/high-risk", params={"company_id": 1}).json() == []
