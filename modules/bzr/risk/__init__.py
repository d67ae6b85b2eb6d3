"""Hazard risk scoring (E x P x F) and assessment records."""

from __future__ import annotations

from fastapi import FastAPI

from modules.bzr import include_once

__all__ = ["register_api"]


def register_api(app: FastAPI) -> None:
    """Register FastAPI routes for the risk module."""
    from .api import router as risk_router

    include_once(app, "risk", risk_router)
