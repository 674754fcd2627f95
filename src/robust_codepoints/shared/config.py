"""Configuration classes for code point decoding.

DecoderConfig controls how whole streams are processed and rendered; the
byte-level decoder itself has no tunables.
"""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class GarbageHandling(Enum):
    """How undecodable bytes are rendered when converting to text."""

    REPLACE = auto()   # U+FFFD for every garbage byte
    ESCAPE = auto()    # lone surrogate U+DC00+byte (surrogateescape convention)
    SKIP = auto()      # drop garbage bytes


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class DecoderConfig:
    """Configuration for decoding a complete stream.

    Attributes:
        charset: Decode with this 8-bit charset from the first byte instead of
            auto-detecting UTF-8/UTF-16
        garbage_handling: Rendering of undecodable bytes in text output
        decode_overlong_nul: Render the overlong NUL pair (C0 80) as U+0000
        record_garbage_diagnostics: Add a diagnostic entry per garbage byte
        max_diagnostics: Upper bound on recorded diagnostic entries
        correlation_id: Correlation ID attached to log records
    """

    charset: Optional[str] = None
    garbage_handling: GarbageHandling = GarbageHandling.REPLACE
    decode_overlong_nul: bool = False
    record_garbage_diagnostics: bool = True
    max_diagnostics: int = 1000
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate decoder configuration."""
        from ..character.tables import make_8bit_table, supported_charsets

        if self.charset is not None:
            if not isinstance(self.charset, str):
                raise ConfigValidationError(
                    f"charset must be a string, got {type(self.charset).__name__}",
                    field_name="charset",
                    suggestions=supported_charsets(),
                )
            if make_8bit_table(self.charset) is None:
                raise ConfigValidationError(
                    f"Unsupported charset: {self.charset}",
                    field_name="charset",
                    suggestions=supported_charsets(),
                )
        if not isinstance(self.garbage_handling, GarbageHandling):
            raise ConfigValidationError(
                f"garbage_handling must be a GarbageHandling, got {self.garbage_handling!r}",
                field_name="garbage_handling",
                suggestions=[member.name for member in GarbageHandling],
            )
        for flag in ("decode_overlong_nul", "record_garbage_diagnostics"):
            if not isinstance(getattr(self, flag), bool):
                raise ConfigValidationError(
                    f"{flag} must be a boolean, got {getattr(self, flag)!r}",
                    field_name=flag,
                )
        if isinstance(self.max_diagnostics, bool) or not isinstance(self.max_diagnostics, int):
            raise ConfigValidationError(
                f"max_diagnostics must be an integer, got {self.max_diagnostics!r}",
                field_name="max_diagnostics",
            )
        if self.max_diagnostics < 0:
            raise ConfigValidationError(
                "max_diagnostics must be >= 0", field_name="max_diagnostics"
            )
        if self.correlation_id is not None and not isinstance(self.correlation_id, str):
            raise ConfigValidationError(
                f"correlation_id must be a string, got {self.correlation_id!r}",
                field_name="correlation_id",
            )

    def override(self, **kwargs: Any) -> "DecoderConfig":
        """Create a new configuration with specific overrides."""
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            result[config_field.name] = value.name if isinstance(value, Enum) else value
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecoderConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in config files surface.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        known = {config_field.name for config_field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )

        values = dict(data)
        handling = values.get("garbage_handling")
        if isinstance(handling, str):
            try:
                values["garbage_handling"] = GarbageHandling[handling.upper()]
            except KeyError as e:
                raise ConfigValidationError(
                    f"Unknown garbage handling: {handling}",
                    field_name="garbage_handling",
                    suggestions=[member.name for member in GarbageHandling],
                ) from e
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "DecoderConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def lenient(cls) -> "DecoderConfig":
        """Readable text: replacement characters, modified UTF-8 NULs accepted."""
        return cls(
            garbage_handling=GarbageHandling.REPLACE,
            decode_overlong_nul=True,
        )

    @classmethod
    def round_trip(cls) -> "DecoderConfig":
        """Text that can be encoded back to the original bytes."""
        return cls(garbage_handling=GarbageHandling.ESCAPE)

    @classmethod
    def latin1(cls) -> "DecoderConfig":
        """Treat the whole stream as ISO-8859-1."""
        return cls(charset="LATIN1")
