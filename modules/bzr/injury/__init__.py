"""ESAW classification lookups and coded injury reports."""

from __future__ import annotations

from fastapi import FastAPI

from modules.bzr import include_once

__all__ = ["register_api"]


def register_api(app: FastAPI) -> None:
    """Register FastAPI routes for the injury module."""
    from .api import router as injury_router

    include_once(app, "injury", injury_router)
