from __future__ import annotations

import pytest

_ENV_KEYS = (
    "BZR_DEV",
    "BZR_FRONTEND_URL",
    "BZR_SMTP_HOST",
    "BZR_SMTP_PORT",
    "BZR_SMTP_USER",
    "BZR_SMTP_PASSWORD",
    "BZR_SMTP_STARTTLS",
    "BZR_EMAIL_FROM",
    "BZR_PDF_FONT",
)


@pytest.fixture(autouse=True)
def bzr_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("BZR_DATA_DIR", str(tmp_path))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield tmp_path
    from modules.bzr.obligations.repository import dispose_engines

    dispose_engines()
