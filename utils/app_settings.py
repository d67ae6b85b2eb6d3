"""Application settings for the BZR backend.

Values come from environment variables first and fall back to an optional
INI file at ``<data dir>/app.ini``::

    [app]
    dev = true
    frontend_url = https://bzr-savetnik.com

    [smtp]
    host = smtp.example.com
    port = 587
    user = notifier
    password = secret
    starttls = true
    from = BZR Savetnik <noreply@bzr-savetnik.com>

Settings are re-read on every call to :func:`load_settings` so tests can
point ``BZR_DATA_DIR`` at a temporary directory.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_FRONTEND_URL = "https://bzr-savetnik.com"
DEFAULT_EMAIL_FROM = "BZR Savetnik <noreply@bzr-savetnik.com>"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    data_dir: Path
    dev_mode: bool
    frontend_url: str
    smtp_host: Optional[str]
    smtp_port: int
    smtp_user: Optional[str]
    smtp_password: Optional[str]
    smtp_starttls: bool
    email_from: str

    @property
    def database_path(self) -> Path:
        return self.data_dir / "bzr.db"


def data_dir() -> Path:
    return Path(os.environ.get("BZR_DATA_DIR", "data"))


def _read_ini(path: Path) -> configparser.ConfigParser:
    cp = configparser.ConfigParser()
    if path.exists():
        cp.read(path, encoding="utf-8")
    return cp


def _pick(env_key: str, ini: configparser.ConfigParser, section: str, option: str) -> Optional[str]:
    raw = os.environ.get(env_key)
    if raw is not None and raw.strip():
        return raw.strip()
    value = ini.get(section, option, fallback=None)
    if value is None or not value.strip():
        return None
    return value.strip()


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in _TRUTHY


def load_settings() -> Settings:
    base = data_dir()
    ini = _read_ini(base / "app.ini")
    port_raw = _pick("BZR_SMTP_PORT", ini, "smtp", "port")
    try:
        port = int(port_raw) if port_raw else 587
    except ValueError:
        raise ValueError(f"Invalid SMTP port: {port_raw!r}")
    return Settings(
        data_dir=base,
        dev_mode=_flag(_pick("BZR_DEV", ini, "app", "dev")),
        frontend_url=(_pick("BZR_FRONTEND_URL", ini, "app", "frontend_url") or DEFAULT_FRONTEND_URL).rstrip("/"),
        smtp_host=_pick("BZR_SMTP_HOST", ini, "smtp", "host"),
        smtp_port=port,
        smtp_user=_pick("BZR_SMTP_USER", ini, "smtp", "user"),
        smtp_password=_pick("BZR_SMTP_PASSWORD", ini, "smtp", "password"),
        smtp_starttls=_flag(_pick("BZR_SMTP_STARTTLS", ini, "smtp", "starttls"), default=True),
        email_from=_pick("BZR_EMAIL_FROM", ini, "smtp", "from") or DEFAULT_EMAIL_FROM,
    )


__all__ = ["Settings", "data_dir", "load_settings"]
