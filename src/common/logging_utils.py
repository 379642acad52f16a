"""Centralized logging helpers.

Provides a single ``configure_logging`` entry point plus small helpers used
by every module for structured DEBUG traces:

- ``extra_context`` builds the ``extra=`` mapping for a log call
- ``is_debug_enabled`` guards expensive DEBUG logging
- ``safe_url`` / ``redact`` strip credentials before anything is logged
- ``Timer`` measures call durations in milliseconds
"""
from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from constants import Constants

# Attributes present on every LogRecord; anything else came from ``extra=``.
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_SENSITIVE_KEYS = ("token", "access_token", "api_key", "apikey", "key", "secret", "password", "auth")
_TOKEN_PATTERN = re.compile(r"(gh[pousr]_[A-Za-z0-9]{16,}|glpat-[A-Za-z0-9\-_]{16,})")
REDACTED = "[REDACTED]"


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call, dropping None values."""
    return {k: v for k, v in kwargs.items() if v is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def redact(text: Optional[str]) -> Optional[str]:
    """Mask well-known token formats inside free text."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(REDACTED, text)


def safe_url(url: str) -> str:
    """Return ``url`` with credentials and sensitive query parameters masked."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url) or ""
    netloc = parts.netloc
    if "@" in netloc:
        netloc = f"{REDACTED}@{netloc.rsplit('@', 1)[1]}"
    query = parts.query
    if query:
        pairs = [
            (k, REDACTED if k.lower() in _SENSITIVE_KEYS else v)
            for k, v in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs, safe="[]")
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring wall time of a block."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds; usable both inside and after the block."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)


class HumanFormatter(logging.Formatter):
    """Default console format with structured fields appended at DEBUG."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if record.levelno > logging.DEBUG:
            return base
        fields = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        if not fields:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        return f"{base} [{rendered}]"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including every ``extra`` field."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging() -> None:
    """Configure the root logger from DEVLOCK_LOG_LEVEL and DEVLOCK_LOG_FORMAT.

    Safe to call more than once; previously installed handlers from this
    function are replaced.
    """
    level_name = os.environ.get("DEVLOCK_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = os.environ.get("DEVLOCK_LOG_FORMAT", "human").lower()

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(Constants.LOG_FORMAT))
    handler.set_name("devlock")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "devlock":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
