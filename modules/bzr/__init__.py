"""BZR compliance modules: risk scoring, legal obligations and injury coding."""

from __future__ import annotations

from fastapi import APIRouter, FastAPI

__all__ = ["include_once", "register_api"]


def include_once(app: FastAPI, name: str, router: APIRouter) -> bool:
    """Include ``router`` unless ``name`` was already registered on ``app``."""
    registered = getattr(app.state, "bzr_routers", None)
    if registered is None:
        registered = app.state.bzr_routers = set()
    if name in registered:
        return False
    app.include_router(router)
    registered.add(name)
    return True


def register_api(app: FastAPI) -> None:
    from . import injury, obligations, risk

    risk.register_api(app)
    obligations.register_api(app)
    injury.register_api(app)
