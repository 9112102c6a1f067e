"""Environment-based configuration for the deprecation registry.

Uses pydantic-settings so the registry can be configured without code
changes, from environment variables or a .env file:

    DEPRECATIONS_MODE=structured_log
    DEPRECATIONS_IGNORED_PACKAGES=legacy_pkg,other_pkg
    DEPRECATIONS_IGNORED_LINKS=https://github.com/acme/acme/issues/12
    DEPRECATIONS_DEDUPLICATION=false
    DEPRECATIONS_LOG_FORMAT=json
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deprecations.exceptions import ConfigurationError
from deprecations.modes import ReportingMode
from deprecations.observability import setup_structlog
from deprecations.registry import DeprecationRegistry, get_registry
from deprecations.sinks import StructlogSink

logger = logging.getLogger(__name__)

__all__ = [
    "DeprecationSettings",
    "configure_from_env",
    "load_settings",
]


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class DeprecationSettings(BaseSettings):
    """Registry settings loaded from ``DEPRECATIONS_*`` environment variables.

    Example:
        >>> # DEPRECATIONS_MODE=trigger
        >>> settings = DeprecationSettings()
        >>> settings.reporting_mode
        <ReportingMode.WARN_EMIT: 'warn_emit'>
    """

    mode: str = Field(default="disabled", description="Reporting mode or alias")
    ignored_packages: str = Field(default="", description="Comma-separated package names never reported")
    ignored_links: str = Field(default="", description="Comma-separated links seeded with a zero count")
    deduplication: bool = Field(default=True, description="Report only the first occurrence of each link")
    log_level: str = Field(default="INFO", description="Log level for structured_log mode")
    log_format: str = Field(default="console", description="Log format: 'json' or 'console'")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(
        env_prefix="DEPRECATIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Validate and canonicalize the reporting mode."""
        return str(ReportingMode.normalize(v).value)

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        valid_levels = ["DEBUG", "INFO", "NOTICE", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate format is a known value."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    @property
    def reporting_mode(self) -> ReportingMode:
        return ReportingMode(self.mode)

    @property
    def package_list(self) -> List[str]:
        return _split_csv(self.ignored_packages)

    @property
    def link_list(self) -> List[str]:
        return _split_csv(self.ignored_links)

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(env_file: Optional[str] = None, **overrides: Any) -> DeprecationSettings:
    """Load settings from the environment (and ``env_file`` when given).

    Raises:
        ConfigurationError: If any setting fails validation
    """
    kwargs: dict = dict(overrides)
    if env_file is not None:
        kwargs["_env_file"] = env_file
    try:
        return DeprecationSettings(**kwargs)
    except ValidationError as exc:
        first = exc.errors()[0]
        setting = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid deprecation settings: {first.get('msg', exc)}",
            setting=setting,
            value=first.get("input"),
        ) from exc


def configure_from_env(
    registry: Optional[DeprecationRegistry] = None,
    env_file: Optional[str] = None,
    **overrides: Any,
) -> DeprecationSettings:
    """Apply environment settings to ``registry`` (the default registry when None).

    Returns:
        The settings that were applied
    """
    settings = load_settings(env_file=env_file, **overrides)
    target = registry if registry is not None else get_registry()

    mode = settings.reporting_mode
    if mode is ReportingMode.STRUCTURED_LOG:
        setup_structlog(
            json_format=settings.log_format == "json",
            log_file=settings.log_file,
            level=settings.level_number,
        )
        target.enable_with_logger(StructlogSink())
    else:
        # disable() also resets deduplication, so the mode goes first.
        target.enable(mode)

    for package in settings.package_list:
        target.ignore_package(package)
    if settings.link_list:
        target.ignore_deprecations(*settings.link_list)
    if not settings.deduplication:
        target.without_deduplication()

    logger.debug(
        "Configured deprecation registry from environment: mode=%s ignored_packages=%d ignored_links=%d",
        mode.value,
        len(settings.package_list),
        len(settings.link_list),
    )
    return settings
