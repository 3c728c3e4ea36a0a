# wfdispatch/utils/logger.py
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from wfdispatch.utils.config import get_settings, LogLevel


__all__ = [
    "get_logger",
    "set_log_level",
    "bind",
    "unbind",
    "log_with_context",
]


# ------------- Internal state -------------

_config_lock = threading.Lock()
_configured = False
_global_extra: Dict[str, Any] = {}  # context attached to every record
_OWNED_FLAG = "_wfdispatch_handler"


# ------------- Formatters -------------

def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    ctx = getattr(record, "extra", None)
    return ctx if isinstance(ctx, dict) else {}


class ContextFormatter(logging.Formatter):
    """Console lines: the message followed by bound context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        ctx = _context_of(record)
        if not ctx:
            return message
        pairs = " ".join(f"{k}={v}" for k, v in ctx.items())
        return f"{message}  [{pairs}]"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; bound context (repo, workflow_id, ref) becomes top-level keys."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_context_of(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# ------------- Helpers -------------

_LEVEL_MAP = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


def _own(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED_FLAG, True)
    return handler


def _ensure_configured() -> None:
    """
    Configure root logging once based on settings.
    Subsequent calls are no-ops.
    """
    global _configured
    if _configured:
        return

    with _config_lock:
        if _configured:
            return

        settings = get_settings()
        level = _LEVEL_MAP.get(settings.LOG_LEVEL, logging.INFO)

        # Drop handlers from a previous configuration only; foreign ones stay
        root = logging.getLogger()
        root.setLevel(level)
        for h in list(root.handlers):
            if getattr(h, _OWNED_FLAG, False):
                root.removeHandler(h)

        console = Console(
            stderr=True,
            force_jupyter=False,
            color_system="auto",
            no_color=not settings.COLORIZED_OUTPUT,
        )
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
            omit_repeated_times=False,
        )
        rich_handler.setFormatter(ContextFormatter("%(message)s"))
        rich_handler.setLevel(level)
        root.addHandler(_own(rich_handler))

        if settings.LOG_TO_FILE:
            settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(settings.LOG_FILE),
                maxBytes=5 * 1024 * 1024,  # 5MB per file
                backupCount=5,
                encoding="utf-8",
                delay=True,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(_own(file_handler))

        # Reduce noise from the HTTP stack unless debugging
        for n in ("httpx", "httpcore", "urllib3"):
            logging.getLogger(n).setLevel(max(level, logging.WARNING))

        _configured = True


def get_logger(name: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a configured logger wrapped with a LoggerAdapter
    that injects `_global_extra` into every log record.
    """
    _ensure_configured()
    base = logging.getLogger(name if name else "wfdispatch")
    return logging.LoggerAdapter(base, extra={"extra": _global_extra})


def set_log_level(level: LogLevel | str) -> None:
    """
    Dynamically adjust log level at runtime.
    """
    _ensure_configured()
    lvl = level if isinstance(level, str) else level.value
    py_level = getattr(logging, lvl.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(py_level)
    for h in root.handlers:
        if getattr(h, _OWNED_FLAG, False):
            h.setLevel(py_level)


def bind(**kwargs: Any) -> None:
    """
    Bind global context (e.g., repo="expo/expo").
    Will be attached to every subsequent log line.
    """
    _global_extra.update(kwargs)


def unbind(*keys: str) -> None:
    """
    Remove keys from global context.
    """
    for k in keys:
        _global_extra.pop(k, None)


def log_with_context(logger: logging.LoggerAdapter, **kwargs: Any) -> logging.LoggerAdapter:
    """
    Return a new LoggerAdapter that merges additional context for a scoped section.
    Usage:
        log = get_logger(__name__)
        scoped = log_with_context(log, workflow_id=42)
        scoped.info("dispatching")
    """
    merged = dict(_global_extra)
    merged.update(kwargs)
    return logging.LoggerAdapter(logger.logger, extra={"extra": merged})
