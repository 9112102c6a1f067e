"""Logging utilities for deprecation reporting.

Combines stdlib logging setup with structlog configuration so notices sent
through the structured sink end up in the same handlers (console, file,
JSON) as the rest of an application's logs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import structlog

__all__ = [
    "NOTICE",
    "NOTICE_FIELDS",
    "JSONFormatter",
    "NoticeBoundLogger",
    "filter_by_level",
    "get_structlog_logger",
    "setup_logging",
    "setup_structlog",
]

# Between INFO and WARNING, like syslog's "notice".
NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

# Context keys attached to every deprecation notice.
NOTICE_FIELDS = ("file", "line", "package", "link")

_METHOD_LEVELS: Mapping[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": NOTICE,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "exception": logging.ERROR,
    "critical": logging.CRITICAL,
}

_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON.

    Deprecation notices logged through ``LoggerSink`` carry their context as
    record attributes; those are lifted to top-level ``package``/``link`` keys
    and a ``caller`` object, separate from ``source`` (where the record was
    logged). Any other ``extra=`` attributes go under ``extra``.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "NOTICE",
         "logger": "deprecations", "message": "Use newFn instead",
         "package": "acme", "link": "ACME-1",
         "caller": {"file": "/srv/acme/api.py", "line": 10}, ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "package"):
            log_data["package"] = record.package
        if hasattr(record, "link"):
            log_data["link"] = record.link
        if hasattr(record, "file"):
            log_data["caller"] = {"file": record.file, "line": getattr(record, "line", 0)}

        if record.pathname:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_attrs = {
            k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS and k not in NOTICE_FIELDS
        }
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, default=str)


def filter_by_level(logger: logging.Logger, method_name: str, event_dict: Any) -> Any:
    """Drop events below the stdlib logger's effective level.

    Same check as ``structlog.stdlib.filter_by_level``, but aware of the
    ``notice`` method of ``NoticeBoundLogger``.
    """
    if logger.disabled or _METHOD_LEVELS.get(method_name, logging.NOTSET) < logger.getEffectiveLevel():
        raise structlog.DropEvent
    return event_dict


class NoticeBoundLogger(structlog.stdlib.BoundLogger):
    """stdlib-backed bound logger with a ``notice()`` method at the NOTICE level."""

    def notice(self, event: Optional[str] = None, *args: Any, **kw: Any) -> Any:
        if args:
            kw["positional_args"] = args
        try:
            event_args, event_kw = self._process_event("notice", event, kw)
        except structlog.DropEvent:
            return None
        return self._logger.log(NOTICE, *event_args, **event_kw)


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    level: Optional[int] = None,
) -> None:
    """Configure the root logger.

    Args:
        verbose: Enable debug-level logging
        json_format: Use JSON output format (for log aggregation)
        log_file: Optional file path to write logs to
        level: Explicit level; overrides ``verbose`` when given
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_structlog(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    level: Optional[int] = None,
) -> None:
    """Configure structlog to render through stdlib logging.

    The stdlib handlers are (re)built by ``setup_logging``; structlog only
    renders the event dict into the final message string.
    """
    setup_logging(verbose=verbose, json_format=False, log_file=log_file, level=level)
    for handler in logging.getLogger().handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))

    renderer: Any
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=NoticeBoundLogger,
        cache_logger_on_first_use=False,
    )


def get_structlog_logger(name: Optional[str] = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
