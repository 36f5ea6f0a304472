"""
Configuration Management.

Secrets come from config/.env (or the environment), everything else from
config/settings/*.yaml. Code reads values through get_settings() and
get_app_config(), never from literals.

Secrets (.env):
    DB_PASSWORD, REDIS_PASSWORD, JWT_SECRET

Settings (YAML):
    application.yaml   - App identity, server, cors, pagination, timeouts
    database.yaml      - Database and Redis connection settings
    logging.yaml       - Logging configuration
    features.yaml      - Feature flags
    security.yaml      - JWT and password policy
    events.yaml        - Note event streams
    notes.yaml         - Autosave, sync and share links
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notekeeper.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    EventsSchema,
    FeaturesSchema,
    LoggingSchema,
    NotesSchema,
    SecuritySchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Only passwords, tokens, and keys."""

    db_password: str
    redis_password: str = ""
    jwt_secret: str

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# attribute -> (schema, file under config/settings/)
_SECTIONS: dict[str, tuple[type[BaseModel], str]] = {
    "application": (ApplicationSchema, "application.yaml"),
    "database": (DatabaseSchema, "database.yaml"),
    "logging": (LoggingSchema, "logging.yaml"),
    "features": (FeaturesSchema, "features.yaml"),
    "security": (SecuritySchema, "security.yaml"),
    "events": (EventsSchema, "events.yaml"),
    "notes": (NotesSchema, "notes.yaml"),
}


def _load_validated(schema_cls: type[BaseModel], filename: str) -> BaseModel:
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    Every YAML settings file, validated.

    A file that is missing, has an unknown key, or lacks a required one
    fails here at startup rather than on first use.
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema
    events: EventsSchema
    notes: NotesSchema

    def __init__(self) -> None:
        for attr, (schema_cls, filename) in _SECTIONS.items():
            setattr(self, attr, _load_validated(schema_cls, filename))


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url(async_driver: bool = True) -> str:
    """PostgreSQL URL from database.yaml and DB_PASSWORD. asyncpg when async_driver."""
    db = get_app_config().database
    driver = "postgresql+asyncpg" if async_driver else "postgresql"
    return f"{driver}://{db.user}:{get_settings().db_password}@{db.host}:{db.port}/{db.name}"


def get_redis_url() -> str:
    redis = get_app_config().database.redis
    return f"redis://:{get_settings().redis_password}@{redis.host}:{redis.port}/{redis.db}"


def get_server_base_url() -> tuple[str, float]:
    """Where the client core finds the API, and its request timeout in seconds."""
    app = get_app_config().application
    return f"http://{app.server.host}:{app.server.port}", float(app.timeouts.external_api)
