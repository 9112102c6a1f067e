"""Base mixins for deprecations enums.

Provides:
- RichEnumMixin: Mixin for enums with normalize(), describe(), choices() methods

Enums that are parsed from configuration (environment variables, .env files)
should use this mixin so that spelling variants resolve the same way
everywhere.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union, cast

RawEnumInput = Union[str, "RichEnumMixin", None]


class RichEnumMixin:
    """Mixin that adds utility methods to enums.

    Enums using this mixin should inherit from it AND (str, Enum) to
    ensure they provide:
    - choices(): List of valid string values
    - normalize(): Case-insensitive parsing with alias support and default
    - describe(): Human-readable description

    Customization hooks (classmethods, so Enum does not turn them into members):
        aliases(): Dict mapping alternative names to canonical values
        descriptions(): Dict mapping values to human-readable descriptions
        default_member(): Optional member name returned when raw is None

    Example:
        class MyEnum(RichEnumMixin, str, Enum):
            VALUE_A = "value_a"
            VALUE_B = "value_b"

            @classmethod
            def aliases(cls) -> Dict[str, str]:
                return {"a": "value_a"}
    """

    value: Any

    @classmethod
    def aliases(cls) -> Dict[str, str]:
        return {}

    @classmethod
    def descriptions(cls) -> Dict[str, str]:
        return {}

    @classmethod
    def default_member(cls) -> Optional[str]:
        return None

    @classmethod
    def _member_map(cls) -> Dict[str, "RichEnumMixin"]:
        return cast(Dict[str, "RichEnumMixin"], getattr(cls, "__members__", {}))

    @classmethod
    def choices(cls) -> List[str]:
        """Return list of valid enum values."""
        return [member.value for member in cls._member_map().values()]

    @classmethod
    def normalize(cls, raw: RawEnumInput) -> "RichEnumMixin":
        """Parse a string value into this enum, handling aliases and case.

        Args:
            raw: String value, enum instance, or None

        Returns:
            Enum member matching the input, or default if raw is None

        Raises:
            ValueError: If raw is None with no default, or doesn't match any member/alias
        """
        if isinstance(raw, cls):
            return raw

        if raw is None:
            default_name = cls.default_member()
            members = cls._member_map()
            if default_name is not None and default_name in members:
                return members[default_name]
            raise ValueError(f"{cls.__name__} value must be provided")

        candidate = str(raw).strip().lower().replace("-", "_")

        # Check aliases first
        canonical = cls.aliases().get(candidate, candidate)

        for member in cls._member_map().values():
            if member.value == canonical:
                return member

        raise ValueError(
            f"Invalid {cls.__name__} '{raw}'. Valid options: {', '.join(cls.choices())}"
        )

    def describe(self) -> str:
        """Return human-readable description of this enum value."""
        value_str = str(self.value)
        return self.descriptions().get(value_str, value_str)


__all__ = [
    "RawEnumInput",
    "RichEnumMixin",
]
