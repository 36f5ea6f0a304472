"""
Logging.

One structlog pipeline for the server, the client core and the CLI.
Settings come from config/settings/logging.yaml; setup_logging() arguments
win over the file.

Each JSON record carries timestamp, level, logger, event, func_name and
lineno, plus whatever context is bound: request_id inside an HTTP request,
source wherever the caller states one. Credential fields are masked before
any renderer sees them.

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Note created", extra={"note_id": note.id})
    log_with_source(logger, "client", "info", "Autosave completed", note_id="abc")

All records go to one file (logs/system.jsonl by default). Filter on source.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

from notekeeper.backend.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({
    "web",
    "client",
    "cli",
    "api",
    "events",
    "internal",
    "unknown",
})
"""Values accepted for the source field. Callers always pass one explicitly."""

SENSITIVE_KEYS = frozenset({
    "password",
    "hashed_password",
    "access_token",
    "authorization",
    "jwt_secret",
})

REDACTED = "[REDACTED]"

# Third-party loggers that drown out application records at INFO
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "faststream")

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _get_logging_config() -> dict[str, Any]:
    return _load_logging_config()


def _resolve_log_path(configured_path: str) -> Path:
    """Log paths in logging.yaml are relative to the project root."""
    return find_project_root() / configured_path


def _mask(fields: dict[str, Any]) -> dict[str, Any]:
    for key in SENSITIVE_KEYS.intersection(fields):
        fields[key] = REDACTED
    return fields


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential fields, top-level or inside an ``extra`` dict."""
    _mask(event_dict)
    extra = event_dict.get("extra")
    if isinstance(extra, dict):
        event_dict["extra"] = _mask(dict(extra))
    return event_dict


def _processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _file_handler(file_config: dict[str, Any], formatter: logging.Formatter) -> logging.Handler:
    log_path = _resolve_log_path(file_config["path"])
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Replaces any handlers already on the root logger, so calling it twice
    is safe. The file handler always writes JSON; the console follows
    format_type ("json" or "console").

    Args:
        level: Root level name. Defaults to logging.yaml.
        format_type: Console renderer. Defaults to logging.yaml.
        enable_console: Attach a stdout handler. Defaults to logging.yaml.
        enable_file_logging: Attach the rotating JSONL handler. Defaults to logging.yaml.
    """
    config = _get_logging_config()
    handlers = config["handlers"]

    if level is None:
        level = config["level"]
    if format_type is None:
        format_type = config["format"]
    if enable_console is None:
        enable_console = handlers["console"]["enabled"]
    if enable_file_logging is None:
        enable_file_logging = handlers["file"]["enabled"]

    processors = _processors()
    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), processors)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for existing in list(root.handlers):
        root.removeHandler(existing)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        if format_type == "console":
            console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=True), processors))
        else:
            console.setFormatter(json_formatter)
        root.addHandler(console)

    if enable_file_logging:
        root.addHandler(_file_handler(handlers["file"], json_formatter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit source field.

    For code that runs outside a request: the client core, event
    publishers, the CLI. A source not in VALID_SOURCES is recorded as
    "unknown".

    Raises:
        AttributeError: If level is not a logger method name
    """
    log_method = getattr(logger, level.lower())
    if source not in VALID_SOURCES:
        source = "unknown"
    log_method(message, source=source, **kwargs)
