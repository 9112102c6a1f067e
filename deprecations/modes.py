"""Reporting modes for the deprecation registry."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from deprecations.base import RichEnumMixin

__all__ = ["ReportingMode"]

_MODE_ALIASES: Dict[str, str] = {
    "none": "disabled",
    "off": "disabled",
    "track": "disabled",
    "trigger": "warn_emit",
    "warn": "warn_emit",
    "warning": "warn_emit",
    "warnings": "warn_emit",
    "suppressed": "warn_suppressed",
    "suppressed_warning": "warn_suppressed",
    "log": "structured_log",
    "logger": "structured_log",
    "structlog": "structured_log",
}

_MODE_DESCRIPTIONS: Dict[str, str] = {
    "disabled": "Count occurrences only, never report them",
    "warn_emit": "Report through a Python warning shown by default",
    "warn_suppressed": "Report through a Python warning hidden by the default filters",
    "structured_log": "Report to a structured logging sink at notice severity",
}


class ReportingMode(RichEnumMixin, str, Enum):
    """How triggered deprecations are surfaced.

    Exactly one mode is active per registry; ``DISABLED`` is the default.
    """

    DISABLED = "disabled"
    WARN_EMIT = "warn_emit"
    WARN_SUPPRESSED = "warn_suppressed"
    STRUCTURED_LOG = "structured_log"

    @classmethod
    def aliases(cls) -> Dict[str, str]:
        return _MODE_ALIASES

    @classmethod
    def descriptions(cls) -> Dict[str, str]:
        return _MODE_DESCRIPTIONS

    @classmethod
    def default_member(cls) -> Optional[str]:
        return "DISABLED"

    @property
    def emits(self) -> bool:
        """Whether this mode surfaces deprecations at all."""
        return self is not ReportingMode.DISABLED
