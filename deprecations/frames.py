"""Caller-location lookup for triggered deprecations.

The registry asks a frame provider for two frames: the line that called
``trigger()`` and the line that called *that* function. The default
provider walks the live interpreter stack; tests can inject a
``StaticFrameProvider`` instead.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import FrameType
from typing import Iterable, List, Optional, Protocol, Tuple

__all__ = [
    "CallerFrame",
    "FrameProvider",
    "StackFrameProvider",
    "StaticFrameProvider",
]

_PACKAGE = __name__.split(".")[0]


@dataclass(frozen=True)
class CallerFrame:
    """Location of a single call site."""

    file: str
    line: int
    module: str = ""

    @classmethod
    def empty(cls) -> "CallerFrame":
        """Placeholder used when the stack is shallower than expected."""
        return cls(file="", line=0, module="")

    def belongs_to(self, package: str) -> bool:
        """Whether this frame's module is ``package`` or one of its submodules."""
        if not self.module or not package:
            return False
        return self.module == package or self.module.startswith(package + ".")


class FrameProvider(Protocol):
    def caller_frames(self) -> Tuple[CallerFrame, CallerFrame]:
        ...


class StackFrameProvider:
    """Frame provider backed by the interpreter call stack.

    Frames from this package (and any ``ignore_modules`` prefixes, e.g. a
    project's own deprecation wrappers) are skipped so the reported
    location is the code that reported the deprecation.
    """

    def __init__(self, ignore_modules: Iterable[str] = ()) -> None:
        self.ignore_modules: Tuple[str, ...] = (_PACKAGE, *ignore_modules)

    def _is_ignored(self, module: str) -> bool:
        return any(
            module == prefix or module.startswith(prefix + ".")
            for prefix in self.ignore_modules
        )

    def caller_frames(self) -> Tuple[CallerFrame, CallerFrame]:
        found: List[CallerFrame] = []
        try:
            frame: Optional[FrameType] = sys._getframe(1)
        except ValueError:
            frame = None

        while frame is not None and len(found) < 2:
            module = frame.f_globals.get("__name__") or ""
            if not self._is_ignored(module):
                found.append(
                    CallerFrame(
                        file=frame.f_code.co_filename,
                        line=frame.f_lineno,
                        module=module,
                    )
                )
            frame = frame.f_back

        while len(found) < 2:
            found.append(CallerFrame.empty())
        return found[0], found[1]


class StaticFrameProvider:
    """Frame provider returning fixed frames, for deterministic tests."""

    def __init__(
        self,
        caller: Optional[CallerFrame] = None,
        outer: Optional[CallerFrame] = None,
    ) -> None:
        self.caller = caller or CallerFrame.empty()
        self.outer = outer or CallerFrame.empty()

    def caller_frames(self) -> Tuple[CallerFrame, CallerFrame]:
        return self.caller, self.outer
