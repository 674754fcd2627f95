"""Shared utilities for code point decoding.

Configuration objects, result and diagnostic types, and logging helpers used
across the character layer and the command line tool.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DecoderConfig,
    GarbageHandling,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DecodeStatistics,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DecoderConfig",
    "GarbageHandling",
    "CorrelationLogger",
    "get_logger",
    "DecodeStatistics",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
