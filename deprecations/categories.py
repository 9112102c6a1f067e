"""Warning categories used when deprecations are reported as Python warnings.

Provides the two categories the registry emits and helpers that issue a
warning attributed to a given call site.
"""
from __future__ import annotations

import warnings
from typing import Type

from deprecations.frames import CallerFrame

__all__ = [
    "DeprecationNotice",
    "SuppressedDeprecationNotice",
    "emit_notice",
    "emit_suppressed_notice",
]


class DeprecationNotice(UserWarning):
    """Deprecation reported in visible mode; shown by the default filters."""


class SuppressedDeprecationNotice(DeprecationWarning):
    """Deprecation reported in suppressed mode; hidden unless a filter enables it."""


# Repetition is handled by the registry.
warnings.filterwarnings("always", category=DeprecationNotice)
warnings.filterwarnings("ignore", category=SuppressedDeprecationNotice)


def _warn_at(message: str, category: Type[Warning], frame: CallerFrame) -> None:
    warnings.warn_explicit(
        message,
        category,
        filename=frame.file or "<unknown>",
        lineno=frame.line,
        module=frame.module or None,
    )


def emit_notice(message: str, frame: CallerFrame) -> None:
    _warn_at(message, DeprecationNotice, frame)


def emit_suppressed_notice(message: str, frame: CallerFrame) -> None:
    _warn_at(message, SuppressedDeprecationNotice, frame)
