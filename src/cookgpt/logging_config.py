"""
Logging setup for the CookGPT API.

Log lines carry the current request, user and subscription ids, taken from
context variables that the request middleware, auth dependency and
subscription service set. Development output is one readable line per
record; production output is one JSON object per record.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar, Token
from datetime import datetime
from typing import Any

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)
subscription_id_ctx: ContextVar[str | None] = ContextVar("subscription_id", default=None)

# field name -> (context variable, short label, characters shown in text output)
_CONTEXT_FIELDS: dict[str, tuple[ContextVar[str | None], str, int | None]] = {
    "request_id": (request_id_ctx, "req", 8),
    "user_id": (user_id_ctx, "user", 8),
    "subscription_id": (subscription_id_ctx, "sub", None),
}

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite", "uvicorn.access")

SERVICE_NAME = "cookgpt-api"


def current_context() -> dict[str, str]:
    """Context ids that are set for the running task."""
    return {name: value for name, (var, _, _) in _CONTEXT_FIELDS.items() if (value := var.get())}


class StructuredJsonFormatter(logging.Formatter):
    """One JSON document per record, for log shipping in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
            "location": f"{record.filename}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Readable single-line records with the context ids in brackets."""

    def format(self, record: logging.LogRecord) -> str:
        labels = []
        for var, label, width in _CONTEXT_FIELDS.values():
            value = var.get()
            if value:
                labels.append(f"{label}={value[:width]}")

        context = f" [{', '.join(labels)}]" if labels else ""
        line = (
            f"{datetime.utcnow():%Y-%m-%d %H:%M:%S} | {record.levelname:<8} | "
            f"{record.name}{context} | {record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """Adapter that attaches the context ids to every record as extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **current_context()}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})


def _use_json(environment: str) -> bool:
    if os.getenv("LOG_FORMAT"):
        return os.getenv("LOG_FORMAT", "").lower() == "json"
    return environment == "production" and not sys.stdout.isatty()


def configure_logging(log_level: str = "INFO", environment: str | None = None) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        log_level: Minimum level; ``LOG_LEVEL`` in the environment wins.
        environment: Deployment environment. JSON output is used in
            production unless ``LOG_FORMAT`` says otherwise.
    """
    environment = environment or os.getenv("ENVIRONMENT", "development")
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    json_format = _use_json(environment)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter() if json_format else ContextualFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("cookgpt").setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info(
        f"Logging configured: level={level_name}, env={environment}, "
        f"format={'json' if json_format else 'text'}"
    )


def set_context(**values: str | None) -> None:
    """Set context ids for the rest of the running task."""
    for name, value in values.items():
        if value is not None:
            _CONTEXT_FIELDS[name][0].set(value)


class LoggingContext:
    """Set context ids for the duration of a ``with`` block."""

    def __init__(self, **values: str | None):
        self._values = {name: value for name, value in values.items() if value is not None}
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> "LoggingContext":
        for name, value in self._values.items():
            var = _CONTEXT_FIELDS[name][0]
            self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
