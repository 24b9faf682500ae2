"""Structured logging helpers for the Aura wardrobe app.

Every record is rendered as one JSON object carrying the event name, the
correlation id of the operation that produced it and any extra fields passed
through :func:`log_event`. Extra fields are scrubbed first: credentials and
image payloads never reach the log stream.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

SERVICE_NAME = "aura"
CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else on a record came in via ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# A key is sensitive when it contains one of these fragments (case-insensitive).
_SENSITIVE_KEY_PARTS = ("token", "secret", "password", "authorization", "image", "email", "user_id")
_MAX_PLAIN_STRING = 512
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record with correlation metadata."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        for key, value in redact_for_log(extras).items():
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _CorrelationFilter(logging.Filter):
    """Give plain-text records a ``correlation_id`` attribute to format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = CORRELATION_ID.get() or "-"
        return True


def configure_logging(level: int | str | None = None, fmt: str | None = None) -> None:
    """Install a single root handler.

    ``LOG_LEVEL`` sets the level and ``LOG_FORMAT=text`` swaps the JSON output
    for a one-line human readable format, which suits the CLI.
    """

    desired_level = level or os.getenv("LOG_LEVEL", "INFO")
    handler = logging.StreamHandler()
    if (fmt or os.getenv("LOG_FORMAT", "json")).lower() == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        handler.addFilter(_CorrelationFilter())
    else:
        handler.setFormatter(JsonFormatter())
    logging.root.handlers.clear()
    logging.basicConfig(level=desired_level, handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root logger on first use."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def _is_sensitive_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def _scrub_text(value: str) -> str:
    if len(value) > _MAX_PLAIN_STRING:
        return f"[redacted-payload:{len(value)} chars]"
    if value[:7].lower() == "bearer ":
        return "[redacted-token]"
    return _EMAIL_PATTERN.sub("[redacted-email]", value)


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub credentials, emails and inline image payloads."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if _is_sensitive_key(key) else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set)):
        return [redact_for_log(value) for value in payload]
    return _scrub_text(str(payload))


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Bind ``correlation_id`` (or keep the current one, or mint one) and return it."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Scope a correlation id to a block, restoring the previous one afterwards."""

    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed ``fields`` attached as record attributes."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Give one user-visible operation its own correlation id and log its bounds."""

    logger = get_logger("aura.operations")
    with correlation_context(attributes.pop("correlation_id", None) or uuid.uuid4().hex) as scoped_id:
        log_event(logger, logging.DEBUG, "operation_started", operation=name, **attributes)
        yield scoped_id
        log_event(logger, logging.DEBUG, "operation_finished", operation=name)


__all__ = [
    "SERVICE_NAME",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "redact_for_log",
    "operation_context",
]
