"""Structured sinks receiving deprecation notices.

A sink is any object with ``notice(message, context)``. Two adapters are
provided: one for structlog loggers and one for stdlib loggers.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, cast

import structlog

from deprecations.exceptions import ConfigurationError
from deprecations.observability import NOTICE, get_structlog_logger

__all__ = [
    "NoticeSink",
    "StructlogSink",
    "LoggerSink",
    "coerce_sink",
]


class NoticeSink(Protocol):
    def notice(self, message: str, context: Mapping[str, Any]) -> None:
        ...


class StructlogSink:
    """Sink writing notices to a structlog logger.

    Loggers built by ``setup_structlog`` log at the stdlib NOTICE level.
    Other structlog loggers have no such level; they get the notice at info.
    Either way the event carries ``severity="notice"`` and the context keys.

    Example:
        registry.enable_with_logger(StructlogSink())
        # event='Use newFn instead' severity='notice' file=... line=... package='acme' link='ACME-1'
    """

    def __init__(self, logger: Optional[Any] = None) -> None:
        self.logger = logger if logger is not None else get_structlog_logger("deprecations")

    def notice(self, message: str, context: Mapping[str, Any]) -> None:
        log = getattr(self.logger, "notice", None)
        if not callable(log):
            log = self.logger.info
        log(message, severity="notice", **context)


class LoggerSink:
    """Sink writing notices to a stdlib logger at the NOTICE level."""

    def __init__(self, logger: "logging.Logger | logging.LoggerAdapter[Any]") -> None:
        self.logger = logger

    def notice(self, message: str, context: Mapping[str, Any]) -> None:
        # The message is already formatted.
        self.logger.log(NOTICE, "%s", message, extra=dict(context))


def coerce_sink(target: Any) -> NoticeSink:
    """Build a sink from a sink, a stdlib logger, or a structlog logger.

    Raises:
        ConfigurationError: If ``target`` cannot receive notices
    """
    if isinstance(target, (logging.Logger, logging.LoggerAdapter)):
        return LoggerSink(target)
    # Checked before notice(): a NoticeBoundLogger has notice(event, **kw).
    if isinstance(target, structlog.BoundLoggerBase) or type(target).__module__.startswith("structlog."):
        return StructlogSink(target)
    if callable(getattr(target, "notice", None)):
        return cast(NoticeSink, target)
    if target is not None and callable(getattr(target, "info", None)):
        return StructlogSink(target)
    raise ConfigurationError(
        "Sink must provide notice(message, context) or be a logger",
        setting="sink",
        value=type(target).__name__,
    )
