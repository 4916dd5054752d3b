"""Logging helpers shared across the catalog pipeline.

Provides the root logging configuration, a helper producing ``extra``
payloads for structured debug events, a small timer, and URL redaction so
credentials embedded in repository URLs never reach the logs.
"""
from __future__ import annotations

import logging
import os
import time
import urllib.parse
from typing import Any, Dict, Optional

from registry_catalogs.constants import Constants

_CONTEXT_FIELDS = (
    "event",
    "component",
    "action",
    "outcome",
    "target",
    "status_code",
    "duration_ms",
    "attempt",
    "context",
    "coordinate",
    "path",
    "core_version",
)


class ContextFormatter(logging.Formatter):
    """Formatter appending structured context fields at DEBUG level."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if record.levelno > logging.DEBUG:
            return base
        pairs = []
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                pairs.append(f"{name}={value}")
        if not pairs:
            return base
        return f"{base} [{' '.join(pairs)}]"


def _level_from_env(default: str = "INFO") -> int:
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, default).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None, quiet: bool = False) -> None:
    """Configure the root logger.

    Args:
        level (str, optional): Level name; falls back to the environment, then INFO.
        log_file (str, optional): Additional file to log into.
        quiet (bool, optional): Drop console output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(getattr(logging, level.upper(), logging.INFO) if level else _level_from_env())

    if not quiet:
        console = logging.StreamHandler()
        console.setFormatter(ContextFormatter(Constants.LOG_FORMAT))
        root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {key: value for key, value in kwargs.items() if value is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of this logger would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def safe_url(url: str) -> str:
    """Strip user info, query and fragment from a URL before logging it."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc_info) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now when still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
