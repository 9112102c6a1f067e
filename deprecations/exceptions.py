"""Custom exception classes for deprecations.

The registry operations themselves never raise; these types cover the
configuration layers around the registry (environment settings, sink
wiring).
"""

from typing import Any, Dict, Optional

__all__ = [
    "DeprecationsError",
    "ConfigurationError",
]


class DeprecationsError(Exception):
    """Base exception for all deprecations errors."""

    error_code: str = "ERR000"  # Override in subclasses

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        """
        Initialize deprecations exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
            error_code: Optional error code override
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def __str__(self) -> str:
        """Return string representation with error code and details."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


class ConfigurationError(DeprecationsError):
    """Raised when registry configuration is invalid.

    Examples:
        - Unknown reporting mode in DEPRECATIONS_MODE
        - Invalid log level or format for structured logging
        - An object passed as a sink that cannot receive notices
    """

    error_code = "CFG001"

    def __init__(self, message: str, setting: Optional[str] = None, value: Any = None):
        """
        Initialize configuration error.

        Args:
            message: Description of the failure
            setting: Name of the setting that caused the error
            value: Offending value
        """
        details: Dict[str, Any] = {}
        if setting:
            details["setting"] = setting
        if value is not None:
            details["value"] = value
        super().__init__(message, details)
        self.setting = setting
        self.value = value
