"""
Configuration Schemas.

One model per file in config/settings/. AppConfig validates each file
against its model at startup, so a typo'd key, a missing value or a
nonsensical number stops the process with a message naming the file
instead of failing later inside a request.

    application.yaml  ApplicationSchema
    database.yaml     DatabaseSchema
    logging.yaml      LoggingSchema
    features.yaml     FeaturesSchema
    security.yaml     SecuritySchema
    events.yaml       EventsSchema
    notes.yaml        NotesSchema
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Port = Annotated[int, Field(ge=1, le=65535)]


class _StrictBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: Port


class CorsSchema(_StrictBase):
    origins: list[str]


class PaginationSchema(_StrictBase):
    default_limit: int = Field(gt=0)
    max_limit: int = Field(gt=0)

    @model_validator(mode="after")
    def _default_within_max(self) -> "PaginationSchema":
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self


class TimeoutsSchema(_StrictBase):
    """Seconds."""

    database: int = Field(gt=0)
    external_api: int = Field(gt=0)


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: Literal["development", "staging", "production", "test"]
    debug: bool
    api_prefix: str = Field(pattern=r"^/")
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema
    pagination: PaginationSchema
    timeouts: TimeoutsSchema


# =============================================================================
# database.yaml
# =============================================================================


class RedisSchema(_StrictBase):
    host: str
    port: Port
    db: int = Field(ge=0)


class DatabaseSchema(_StrictBase):
    host: str
    port: Port
    name: str
    user: str
    pool_size: int = Field(gt=0)
    max_overflow: int = Field(ge=0)
    pool_timeout: int = Field(gt=0)
    pool_recycle: int
    echo: bool
    echo_pool: bool
    redis: RedisSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int = Field(gt=0)
    backup_count: int = Field(ge=0)


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    format: Literal["json", "console"]
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    public_sharing_enabled: bool
    pdf_export_enabled: bool
    tasks_enabled: bool
    events_publish_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: Literal["HS256", "HS384", "HS512"]
    access_token_expire_minutes: int = Field(gt=0)
    audience: str


class PasswordsSchema(_StrictBase):
    min_length: int = Field(ge=1)


class CorsEnforcementSchema(_StrictBase):
    allow_methods: list[str]
    allow_headers: list[str]


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    passwords: PasswordsSchema
    cors: CorsEnforcementSchema


# =============================================================================
# events.yaml
# =============================================================================


class EventBrokerSchema(_StrictBase):
    type: Literal["redis"]


class EventStreamsSchema(_StrictBase):
    prefix: str
    default_maxlen: int = Field(gt=0)


class EventsSchema(_StrictBase):
    broker: EventBrokerSchema
    streams: EventStreamsSchema


# =============================================================================
# notes.yaml
# =============================================================================


class AutosaveSchema(_StrictBase):
    debounce_ms: int = Field(gt=0)


class SyncSchema(_StrictBase):
    poll_interval_seconds: float = Field(gt=0)


class NotesSchema(_StrictBase):
    autosave: AutosaveSchema
    sync: SyncSchema
    public_share_base_url: str
