"""Legal obligation detection, deadline reminders and queries."""

from __future__ import annotations

from fastapi import FastAPI

from modules.bzr import include_once

__all__ = ["register_api"]


def register_api(app: FastAPI) -> None:
    """Register FastAPI routes for the obligations module."""
    from .api import router as obligations_router

    include_once(app, "obligations", obligations_router)
