"""Structured logging for the buyer leads service.

Log calls use an event name as the message and pass context via ``extra``::

    logger.info("buyer.created", extra={"buyer_id": buyer.id})

``configure_logging`` installs one root handler that stamps the current
request id on each record, masks credentials and buyer contact details, and
renders records as JSON lines (or plain text) to stdout or a rotating file.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from buyer_leads.core.config import LogSettings, settings

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

# Credentials and buyer PII never written to logs
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "api_key",
        "x-api-key",
        "app_api_keys",
        "authorization",
        "token",
        "secret",
        "password",
        "cookie",
        "set-cookie",
        "email",
        "phone",
        "notes",
    }
)

# Attributes every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def set_request_id(request_id: str | None) -> None:
    _request_id.set(request_id)


def get_request_id() -> str | None:
    """Return the id of the request being served, if any."""
    return _request_id.get()


def clear_request_id() -> None:
    _request_id.set(None)


def hash_identifier(value: str) -> str:
    """Return a short, stable digest safe to log in place of a raw identifier.

    Args:
        value: Secret or personal identifier (API key, limiter key, ...).

    Returns:
        First 16 hex chars of the SHA-256 digest.
    """
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def redact(value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Mask sensitive keys inside nested mappings, lists and tuples."""
    if isinstance(value, Mapping):
        masked = {}
        for key, item in value.items():
            if str(key).lower() in sensitive_keys:
                masked[key] = REDACTED
            else:
                masked[key] = redact(item, sensitive_keys)
        return masked
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item, sensitive_keys) for item in value)
    return value


def record_extras(record: logging.LogRecord, sensitive_keys: frozenset[str]) -> dict[str, Any]:
    """Return the ``extra`` fields attached to ``record``, already masked."""
    extras = {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }
    return redact(extras, sensitive_keys)


class RequestIdFilter(logging.Filter):
    """Stamp the current request id on records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive ``extra`` fields in place, for any formatter downstream."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.update(record_extras(record, self.sensitive_keys))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, event, extras."""

    def __init__(self, *, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(record_extras(record, self.sensitive_keys))
        if payload.get("request_id") is None:
            payload.pop("request_id", None)
            if get_request_id():
                payload["request_id"] = get_request_id()
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handler(cfg: LogSettings) -> logging.Handler:
    if cfg.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    path = Path(cfg.file_path or "logs/buyer_leads.log")
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg.max_bytes:
        return logging.FileHandler(path, encoding="utf-8")
    return RotatingFileHandler(
        path,
        maxBytes=cfg.max_bytes,
        backupCount=cfg.backup_count,
        encoding="utf-8",
    )


def _build_formatter(cfg: LogSettings) -> logging.Formatter:
    if cfg.format.lower() == "plain":
        return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    return JsonFormatter()


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Replace the root handlers with the configured JSON/plain handler.

    Args:
        log_settings: Logging settings; the global ``settings.log`` when omitted.
    """
    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(_build_formatter(cfg))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))

    # uvicorn installs its own handlers; keep its records from printing twice
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).propagate = False
