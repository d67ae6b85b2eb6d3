"""Entry point for the BZR risk and obligation service.

Usage:
    python main.py [--host 127.0.0.1] [--port 8000]
"""

from __future__ import annotations

import argparse
import logging

from fastapi import FastAPI

from modules.bzr import register_api
from utils.app_settings import load_settings

logger = logging.getLogger(__name__)


def configure_logging(dev_mode: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if dev_mode else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    settings = load_settings()
    app = FastAPI(title="BZR Savetnik", version="0.1.0")
    register_api(app)
    logger.info("BZR API ready (data dir %s, dev=%s)", settings.data_dir, settings.dev_mode)
    return app


if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser(description="Run the BZR API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    configure_logging(load_settings().dev_mode)
    uvicorn.run(create_app(), host=args.host, port=args.port)
