"""Decorator marking callables as deprecated."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from deprecations.registry import get_registry

__all__ = ["deprecated"]

F = TypeVar("F", bound=Callable[..., Any])


def deprecated(package: str, link: str, message: str, *args: Any) -> Callable[[F], F]:
    """Decorator triggering a deprecation every time the function is called.

    The registry is looked up at call time, so replacing the process-wide
    registry (e.g. in tests) affects already-decorated functions. The
    reported location is the call site of the decorated function.

    Example:
        @deprecated("acme", "https://github.com/acme/acme/issues/7", "Use %s instead", "load_v2()")
        def load():
            ...
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*call_args: Any, **call_kwargs: Any) -> Any:
            get_registry().trigger(package, link, message, *args)
            return fn(*call_args, **call_kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
