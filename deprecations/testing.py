"""Helpers for asserting on deprecations in test suites.

Example (pytest):
    def test_old_api_is_deprecated():
        with expect_deprecation("https://github.com/acme/acme/issues/7"):
            acme.load()
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Mapping, Optional, Tuple

from deprecations.registry import DeprecationRegistry, get_registry

__all__ = [
    "RecordingSink",
    "expect_deprecation",
    "expect_no_deprecation",
]


class RecordingSink:
    """Sink that keeps every notice it receives."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, Dict[str, Any]]] = []

    def notice(self, message: str, context: Mapping[str, Any]) -> None:
        self.records.append((message, dict(context)))

    @property
    def messages(self) -> List[str]:
        return [message for message, _ in self.records]

    def clear(self) -> None:
        self.records.clear()


def _count(registry: DeprecationRegistry, link: str) -> int:
    return registry.get_triggered_deprecations().get(link, 0)


@contextmanager
def expect_deprecation(link: str, registry: Optional[DeprecationRegistry] = None) -> Generator[None, None, None]:
    """Fail unless ``link`` is triggered inside the block."""
    target = registry if registry is not None else get_registry()
    before = _count(target, link)
    yield
    after = _count(target, link)
    if after <= before:
        raise AssertionError(f"Expected deprecation with link {link!r} was not triggered")


@contextmanager
def expect_no_deprecation(link: str, registry: Optional[DeprecationRegistry] = None) -> Generator[None, None, None]:
    """Fail if ``link`` is triggered inside the block."""
    target = registry if registry is not None else get_registry()
    before = _count(target, link)
    yield
    after = _count(target, link)
    if after != before:
        raise AssertionError(f"Unexpected deprecation with link {link!r} was triggered")
