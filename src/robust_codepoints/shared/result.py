"""Result objects and diagnostic types for code point decoding."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    WARNING = auto()    # Recoverable problems such as garbage bytes
    ERROR = auto()      # Read failures that truncated the stream


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with the byte offset it refers to."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")
        if self.position is not None and self.position < 0:
            raise ValueError("Diagnostic position must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "position": self.position,
            "details": self.details or {},
        }


@dataclass
class DecodeStatistics:
    """Counters collected while decoding one stream."""

    bytes_consumed: int = 0
    code_points: int = 0
    garbage_bytes: int = 0
    overlong_nul_pairs: int = 0
    processing_time_ms: float = 0.0

    @property
    def garbage_rate(self) -> float:
        """Fraction of consumed bytes that could not be decoded."""
        if self.bytes_consumed == 0:
            return 0.0
        return self.garbage_bytes / self.bytes_consumed

    @property
    def bytes_per_second(self) -> float:
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_consumed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bytes_consumed": self.bytes_consumed,
            "code_points": self.code_points,
            "garbage_bytes": self.garbage_bytes,
            "overlong_nul_pairs": self.overlong_nul_pairs,
            "processing_time_ms": self.processing_time_ms,
            "garbage_rate": self.garbage_rate,
        }
