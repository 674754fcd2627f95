"""Structured logging utilities for code point decoding.

Wraps the standard library logger so every record carries the component name,
an optional correlation ID and any stream context bound to the logger.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Logger that attaches correlation and stream context to each record."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for tracking one stream
            component: Component name for structured logging
            context: Extra fields added to every record
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]
        self.context: Dict[str, Any] = dict(context or {})

    def bind(self, **context: Any) -> "CorrelationLogger":
        """Return a logger that adds ``context`` to every record."""
        merged = dict(self.context)
        merged.update(context)
        return CorrelationLogger(
            self.logger.name, self.correlation_id, self.component, merged
        )

    def is_enabled_for_debug(self) -> bool:
        """Cheap check used before building records on per-byte paths."""
        return self.logger.isEnabledFor(logging.DEBUG)

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        combined_extra.update(self.context)
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]],
        exc_info: bool,
    ) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._get_extra(extra), exc_info=exc_info)

    def debug(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        """Log debug message with correlation info."""
        self._log(logging.DEBUG, message, extra, exc_info)

    def info(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        """Log info message with correlation info."""
        self._log(logging.INFO, message, extra, exc_info)

    def warning(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        """Log warning message with correlation info."""
        self._log(logging.WARNING, message, extra, exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None,
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for tracking one stream
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
