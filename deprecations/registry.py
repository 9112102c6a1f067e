"""Process-wide registry of triggered deprecations.

Library code reports a deprecation with ``trigger()``; the registry counts
every occurrence per link and, depending on the active reporting mode,
surfaces the first one (or every one, without deduplication) as a Python
warning or as a notice on a structured sink.

By default nothing is reported, only counted:

    registry = get_registry()
    registry.trigger("acme", "https://github.com/acme/acme/issues/1", "Use %s instead", "new_fn")
    registry.get_unique_triggered_deprecations_count()  # 1

To surface deprecations:

    registry.enable_with_warnings()             # DeprecationNotice, shown by default
    registry.enable_with_suppressed_warnings()  # SuppressedDeprecationNotice, hidden by default
    registry.enable_with_logger(StructlogSink())
"""

from __future__ import annotations

import logging
import os
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Set, Tuple

from deprecations.categories import emit_notice, emit_suppressed_notice
from deprecations.frames import CallerFrame, FrameProvider, StackFrameProvider
from deprecations.modes import ReportingMode
from deprecations.sinks import NoticeSink, coerce_sink

logger = logging.getLogger(__name__)

__all__ = [
    "DeprecationRegistry",
    "get_registry",
    "set_registry",
    "reset_registry",
]

_Frames = Tuple[CallerFrame, CallerFrame]

_TRAILER = " ({}:{} called by {}:{}, {}, package {})"


class DeprecationRegistry:
    """Counts, filters and reports triggered deprecations.

    All state lives behind one lock so that the count-then-check sequence in
    ``trigger()`` is atomic across threads. Formatting and emission happen
    after the lock is released, so a slow sink never serializes other
    callers.

    Example:
        registry = DeprecationRegistry()
        registry.enable_with_logger(sink)
        registry.trigger("acme", "ACME-1", "Use %s instead", "newFn")
        registry.get_triggered_deprecations()  # {"ACME-1": 1}
    """

    def __init__(self, frame_provider: Optional[FrameProvider] = None) -> None:
        self.frame_provider: FrameProvider = frame_provider or StackFrameProvider()
        self._lock = threading.Lock()
        self._mode = ReportingMode.DISABLED
        self._sink: Optional[NoticeSink] = None
        self._ignored_packages: Set[str] = set()
        self._occurrences: Dict[str, int] = {}
        self._temporarily_ignored: Dict[str, int] = {}
        self._deduplication = True
        self._emitters: Dict[ReportingMode, Callable[..., None]] = {
            ReportingMode.WARN_EMIT: self._emit_warning,
            ReportingMode.WARN_SUPPRESSED: self._emit_suppressed_warning,
            ReportingMode.STRUCTURED_LOG: self._emit_notice,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(mode={self._mode.value!r}, "
            f"deduplication={self._deduplication}, links={len(self._occurrences)})"
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def trigger(self, package: str, link: str, message: str, *args: Any) -> None:
        """Report a deprecation of ``package``, identified by ``link``.

        The link should point to an issue or documentation entry describing
        the deprecation. It is also the key used to de-duplicate repeated
        reports of the same deprecation.

        ``message`` is a printf-style template, always formatted with ``args``
        (a literal percent sign is written ``%%``). A template that does not
        match its arguments is a caller error and the resulting ``TypeError``
        propagates.
        """
        decision = self._record(package, link)
        if decision is None:
            return
        self._emit(decision, package, link, message, args, self.frame_provider.caller_frames())

    def trigger_if_called_from_outside(self, package: str, link: str, message: str, *args: Any) -> None:
        """Like ``trigger()``, but ignore calls made from within ``package`` itself.

        The deprecation is only reported when the code calling the deprecated
        API lives outside ``package`` (by module name), so a library can keep
        using its own deprecated entry points internally.
        """
        frames = self.frame_provider.caller_frames()
        if frames[1].belongs_to(package):
            return
        decision = self._record(package, link)
        if decision is None:
            return
        self._emit(decision, package, link, message, args, frames)

    def _record(self, package: str, link: str) -> Optional[Tuple[ReportingMode, Optional[NoticeSink]]]:
        """Update the tables for one trigger; return what to emit, if anything."""
        with self._lock:
            # Temporarily ignored deprecations are expected; neither count nor report them.
            remaining = self._temporarily_ignored.get(link)
            if remaining is not None:
                if remaining > 0:
                    remaining -= 1
                    if remaining == 0:
                        del self._temporarily_ignored[link]
                    else:
                        self._temporarily_ignored[link] = remaining
                    return None
                # An allowance of zero or less never applies.
                del self._temporarily_ignored[link]

            count = self._occurrences.get(link, 0) + 1
            self._occurrences[link] = count

            if self._deduplication and count > 1:
                return None

            # Occurrences are counted even when nothing is reported.
            if not self._mode.emits:
                return None

            if package in self._ignored_packages:
                return None

            return self._mode, self._sink

    def _emit(
        self,
        decision: Tuple[ReportingMode, Optional[NoticeSink]],
        package: str,
        link: str,
        message: str,
        args: Tuple[Any, ...],
        frames: _Frames,
    ) -> None:
        mode, sink = decision
        text = message % args
        self._emitters[mode](text, package, link, frames, sink)

    @staticmethod
    def _with_trailer(text: str, package: str, link: str, frames: _Frames) -> str:
        caller, outer = frames
        return text + _TRAILER.format(
            os.path.basename(caller.file),
            caller.line,
            os.path.basename(outer.file),
            outer.line,
            link,
            package,
        )

    def _emit_warning(self, text: str, package: str, link: str, frames: _Frames, sink: Optional[NoticeSink]) -> None:
        emit_notice(self._with_trailer(text, package, link, frames), frames[0])

    def _emit_suppressed_warning(
        self, text: str, package: str, link: str, frames: _Frames, sink: Optional[NoticeSink]
    ) -> None:
        emit_suppressed_notice(self._with_trailer(text, package, link, frames), frames[0])

    def _emit_notice(self, text: str, package: str, link: str, frames: _Frames, sink: Optional[NoticeSink]) -> None:
        if sink is None:
            return
        caller = frames[0]
        sink.notice(
            text,
            {
                "file": caller.file,
                "line": caller.line,
                "package": package,
                "link": link,
            },
        )

    # ------------------------------------------------------------------
    # Mode selection
    # ------------------------------------------------------------------

    def enable_with_warnings(self) -> None:
        """Report deprecations as ``DeprecationNotice`` warnings."""
        with self._lock:
            self._mode = ReportingMode.WARN_EMIT
            self._sink = None
        logger.debug("Deprecation reporting mode set to %s", ReportingMode.WARN_EMIT.value)

    def enable_with_suppressed_warnings(self) -> None:
        """Report deprecations as ``SuppressedDeprecationNotice`` warnings."""
        with self._lock:
            self._mode = ReportingMode.WARN_SUPPRESSED
            self._sink = None
        logger.debug("Deprecation reporting mode set to %s", ReportingMode.WARN_SUPPRESSED.value)

    def enable_with_logger(self, sink: Any) -> None:
        """Report deprecations as notices on ``sink``.

        Args:
            sink: Object with ``notice(message, context)``, a stdlib logger,
                or a structlog logger
        """
        resolved = coerce_sink(sink)
        with self._lock:
            self._mode = ReportingMode.STRUCTURED_LOG
            self._sink = resolved
        logger.debug(
            "Deprecation reporting mode set to %s (sink=%s)",
            ReportingMode.STRUCTURED_LOG.value,
            type(resolved).__name__,
        )

    def enable(self, mode: Any, sink: Any = None) -> None:
        """Select a reporting mode by value or alias (e.g. from configuration)."""
        resolved = ReportingMode.normalize(mode)
        if resolved is ReportingMode.WARN_EMIT:
            self.enable_with_warnings()
        elif resolved is ReportingMode.WARN_SUPPRESSED:
            self.enable_with_suppressed_warnings()
        elif resolved is ReportingMode.STRUCTURED_LOG:
            self.enable_with_logger(sink)
        else:
            self.disable()

    def disable(self) -> None:
        """Stop reporting and reset counters.

        Counts go back to zero (links stay known), temporary ignores are
        dropped and deduplication is switched back on. Ignored packages are
        kept.
        """
        with self._lock:
            self._mode = ReportingMode.DISABLED
            self._sink = None
            self._deduplication = True
            for link in self._occurrences:
                self._occurrences[link] = 0
            self._temporarily_ignored.clear()
        logger.debug("Deprecation reporting disabled and counters reset")

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def without_deduplication(self) -> None:
        """Report every occurrence instead of only the first one per link."""
        with self._lock:
            self._deduplication = False

    def ignore_package(self, package_name: str) -> None:
        """Never report deprecations of ``package_name`` (they are still counted)."""
        with self._lock:
            self._ignored_packages.add(package_name)

    def ignore_deprecations(self, *links: str) -> None:
        """Mark links as known with a zero count.

        With deduplication on, a link seeded here is still reported on its
        first trigger; the count only restarts from zero.
        """
        with self._lock:
            for link in links:
                self._occurrences[link] = 0

    def ignore_deprecation_temporarily(self, link: str, times: int = 1) -> None:
        """Swallow the next ``times`` triggers of ``link`` without counting them."""
        with self._lock:
            self._temporarily_ignored[link] = times

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_unique_triggered_deprecations_count(self) -> int:
        """Total number of counted occurrences across all links."""
        with self._lock:
            return sum(self._occurrences.values())

    def get_triggered_deprecations(self) -> Mapping[str, int]:
        """Read-only snapshot of link -> occurrence count."""
        with self._lock:
            return MappingProxyType(dict(self._occurrences))

    @property
    def mode(self) -> ReportingMode:
        return self._mode

    @property
    def sink(self) -> Optional[NoticeSink]:
        return self._sink

    @property
    def deduplication(self) -> bool:
        return self._deduplication

    @property
    def ignored_packages(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._ignored_packages)


_registry: Optional[DeprecationRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> DeprecationRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = DeprecationRegistry()
    return _registry


def set_registry(registry: DeprecationRegistry) -> Optional[DeprecationRegistry]:
    """Install ``registry`` as the process-wide registry; return the previous one."""
    global _registry
    with _registry_lock:
        previous = _registry
        _registry = registry
    return previous


def reset_registry() -> DeprecationRegistry:
    """Replace the process-wide registry with a fresh one and return it."""
    registry = DeprecationRegistry()
    set_registry(registry)
    return registry
