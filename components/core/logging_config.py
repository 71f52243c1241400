"""Structured JSON logging for the scheduling service."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

_LOGGER_PREFIXES = ("components", "restapi", "scripts")


class LogContext:
    """Async-safe holder for event-scoped log fields."""

    _event_id: ContextVar[Optional[str]] = ContextVar("log_event_id", default=None)
    _obligation_id: ContextVar[Optional[str]] = ContextVar("log_obligation_id", default=None)
    _owner_id: ContextVar[Optional[str]] = ContextVar("log_owner_id", default=None)

    _FIELD_NAMES = ("event_id", "obligation_id", "owner_id")

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """Return all non-None context fields as a dict."""
        ctx = {}
        for name in cls._FIELD_NAMES:
            val = getattr(cls, f"_{name}").get()
            if val is not None:
                ctx[name] = val
        return ctx

    @classmethod
    def bind(cls, **kwargs: Optional[str]) -> "_LogContextManager":
        """Context manager that sets fields on entry and restores on exit."""
        return _LogContextManager(**kwargs)


class _LogContextManager:
    def __init__(self, **kwargs: Optional[str]):
        self._kwargs = kwargs
        self._tokens: Dict[str, Any] = {}

    def __enter__(self) -> type:
        for key, val in self._kwargs.items():
            var = getattr(LogContext, f"_{key}", None)
            if val is not None and var is not None:
                self._tokens[key] = var.set(val)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        for key, token in self._tokens.items():
            getattr(LogContext, f"_{key}").reset(token)


_STDLIB_KEYS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            if hasattr(exc, "code"):
                payload["exc_code"] = exc.code
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def configure_logging(level: str = "INFO", json_lines: bool = True) -> None:
    """Configure the service logger hierarchies; calling again replaces the handlers."""
    handler = logging.StreamHandler(sys.stderr)
    if json_lines:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    for prefix in _LOGGER_PREFIXES:
        logger = logging.getLogger(prefix)
        logger.setLevel(level.upper())
        logger.handlers.clear()
        logger.addHandler(handler)
