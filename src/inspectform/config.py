from __future__ import annotations

import os
import re
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

ELEMENT_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "on", "yes"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "json").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/app.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/jsonstore.json"))
        self.session_ttl_minutes = _env_int("SESSION_TTL_MINUTES", 60)
        self.session_cookie_name = os.getenv("SESSION_COOKIE_NAME", "session")
        self.cookie_secure = _env_bool("COOKIE_SECURE", False)
        self.bcrypt_rounds = _env_int("BCRYPT_ROUNDS", 10)
        self.rate_limit = os.getenv("RATE_LIMIT", "100/15 minutes")
        self.rate_limit_enabled = _env_bool("RATE_LIMIT_ENABLED", True)
        self.frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _env_int("PORT", 8000)


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
