"""Process-wide deprecation notice registry.

Packages report deprecations with ``trigger()``; applications decide how
they are surfaced:

    import deprecations

    deprecations.trigger("acme", "https://github.com/acme/acme/issues/7", "Use %s instead", "load_v2()")

    deprecations.enable_with_warnings()              # visible DeprecationNotice warnings
    deprecations.enable_with_suppressed_warnings()   # hidden SuppressedDeprecationNotice warnings
    deprecations.enable_with_logger(StructlogSink())  # structured notices
    deprecations.disable()                           # count only (default)

The module-level functions operate on the registry returned by
``get_registry()``.
"""

from __future__ import annotations

from typing import Any, Mapping

from deprecations.categories import DeprecationNotice, SuppressedDeprecationNotice
from deprecations.decorators import deprecated
from deprecations.exceptions import ConfigurationError, DeprecationsError
from deprecations.frames import CallerFrame, StackFrameProvider, StaticFrameProvider
from deprecations.modes import ReportingMode
from deprecations.registry import DeprecationRegistry, get_registry, reset_registry, set_registry
from deprecations.sinks import LoggerSink, NoticeSink, StructlogSink
from deprecations.settings import DeprecationSettings, configure_from_env, load_settings

__version__ = "1.0.0"

__all__ = [
    # Registry
    "DeprecationRegistry",
    "get_registry",
    "set_registry",
    "reset_registry",
    "ReportingMode",
    # Reporting
    "trigger",
    "trigger_if_called_from_outside",
    "deprecated",
    # Mode selection
    "enable_with_warnings",
    "enable_with_suppressed_warnings",
    "enable_with_logger",
    "disable",
    # Filters
    "without_deduplication",
    "ignore_package",
    "ignore_deprecations",
    "ignore_deprecation_temporarily",
    # Queries
    "get_unique_triggered_deprecations_count",
    "get_triggered_deprecations",
    # Collaborators
    "CallerFrame",
    "StackFrameProvider",
    "StaticFrameProvider",
    "NoticeSink",
    "StructlogSink",
    "LoggerSink",
    "DeprecationNotice",
    "SuppressedDeprecationNotice",
    # Configuration
    "DeprecationSettings",
    "configure_from_env",
    "load_settings",
    "DeprecationsError",
    "ConfigurationError",
]


def trigger(package: str, link: str, message: str, *args: Any) -> None:
    get_registry().trigger(package, link, message, *args)


def trigger_if_called_from_outside(package: str, link: str, message: str, *args: Any) -> None:
    get_registry().trigger_if_called_from_outside(package, link, message, *args)


def enable_with_warnings() -> None:
    get_registry().enable_with_warnings()


def enable_with_suppressed_warnings() -> None:
    get_registry().enable_with_suppressed_warnings()


def enable_with_logger(sink: Any) -> None:
    get_registry().enable_with_logger(sink)


def disable() -> None:
    get_registry().disable()


def without_deduplication() -> None:
    get_registry().without_deduplication()


def ignore_package(package_name: str) -> None:
    get_registry().ignore_package(package_name)


def ignore_deprecations(*links: str) -> None:
    get_registry().ignore_deprecations(*links)


def ignore_deprecation_temporarily(link: str, times: int = 1) -> None:
    get_registry().ignore_deprecation_temporarily(link, times)


def get_unique_triggered_deprecations_count() -> int:
    return get_registry().get_unique_triggered_deprecations_count()


def get_triggered_deprecations() -> Mapping[str, int]:
    return get_registry().get_triggered_deprecations()
