"""Configuration loading for the form service.

Rules:
- Base values come from `form_service_config.json` at the project root.
- Text files under `config/` override the JSON; environment variables
  override both.
- Pydantic models validate every value; an invalid setting is logged and
  the `ValidationError` propagates.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from form_service.db.base import DEFAULT_DATABASE_URL

CONFIG_DIR = Path("config")
ROOT_CONFIG_FILE = Path("form_service_config.json")
logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


class DatabaseConfig(BaseModel):
    dsn: str = DEFAULT_DATABASE_URL
    auto_apply_migrations: bool = Field(default=True)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class StoreConfig(BaseModel):
    backend: Literal["sql", "memory"] = "sql"
    # Numeric ids for the in-memory store; respondent ids are always UUIDs
    id_strategy: Literal["sequence", "clock"] = "sequence"


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("logging.level must be a standard logging level name")
        return level


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) form_service_config.json at project root
    4) Development defaults (in-memory SQLite, SQL backend)
    """

    base = _read_json_file(ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DATABASE_URL
    )
    auto_apply_text = (
        _env("AUTO_APPLY_MIGRATIONS")
        or _read_config_file("database.auto_apply_migrations")
        or _base("database.auto_apply_migrations", "true")
    )
    backend = (
        _env("FORM_STORE_BACKEND")
        or _read_config_file("store.backend")
        or _base("store.backend", "sql")
    )
    id_strategy = (
        _env("FORM_ID_STRATEGY")
        or _read_config_file("store.id_strategy")
        or _base("store.id_strategy", "sequence")
    )
    level = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")

    try:
        return AppConfig(
            database=DatabaseConfig(
                dsn=dsn,
                auto_apply_migrations=str(auto_apply_text).strip().lower() in _TRUE_TOKENS,
            ),
            store=StoreConfig(
                backend=str(backend).strip().lower(),
                id_strategy=str(id_strategy).strip().lower(),
            ),
            logging=LoggingConfig(level=str(level)),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "StoreConfig",
    "LoggingConfig",
    "load_config",
]
