"""Retained-byte buffer and deferred terminal condition shared by all engines.

Bytes read from the source are retained until an engine either folds them into
a code point or gives them up as garbage. A failed or finished read is latched
instead of being reported right away: retained bytes are drained first, then
the latched condition is returned exactly once, then EOF forever.
"""

from typing import Optional

from ..shared.logging import get_logger
from .constants import EOF, GARBAGE, UNSPECIFIC_IO_ERROR
from .source import ByteSource, SourceStatus

# Largest unit any engine has to look at: a 4-byte UTF-8 sequence or a
# UTF-16 surrogate pair.
MAX_RETAINED_BYTES = 4


class ByteChannel:
    """Byte-level plumbing between a ByteSource and the decoding engines."""

    def __init__(self, source: ByteSource, correlation_id: Optional[str] = None) -> None:
        self.source = source
        self._retained = bytearray()
        self._latched: Optional[int] = None
        self._terminated = False
        self._last_error: Optional[BaseException] = None
        self._bytes_consumed = 0
        self.logger = get_logger(__name__, correlation_id, "byte_channel")

    @property
    def retained(self) -> int:
        """Number of bytes read from the source but not yet delivered."""
        return len(self._retained)

    @property
    def latched(self) -> Optional[int]:
        """Terminal sentinel waiting behind the retained bytes, if any."""
        return self._latched

    @property
    def terminated(self) -> bool:
        """True once the terminal condition has been delivered."""
        return self._terminated

    @property
    def last_error(self) -> Optional[BaseException]:
        """Most recent read error, visible before its sentinel is delivered."""
        return self._last_error

    @property
    def bytes_consumed(self) -> int:
        """Bytes delivered so far, as code points or garbage."""
        return self._bytes_consumed

    def fill(self, need: int) -> bool:
        """Read until ``need`` bytes are retained or a terminal condition is latched.

        Never requests more than the missing number of bytes.

        Returns:
            True if at least ``need`` bytes are retained
        """
        if need > MAX_RETAINED_BYTES:
            raise ValueError(f"Cannot retain more than {MAX_RETAINED_BYTES} bytes")

        while len(self._retained) < need and self._latched is None:
            result = self.source.read(need - len(self._retained))
            self._retained.extend(result.data)

            if result.status is SourceStatus.END:
                self._latched = EOF
            elif result.status is SourceStatus.ERROR:
                self._latched = UNSPECIFIC_IO_ERROR
                self._last_error = result.error
                self.logger.warning(
                    "Read failure latched",
                    extra={
                        "error": repr(result.error),
                        "retained": len(self._retained),
                        "offset": self._bytes_consumed,
                    },
                )

        return len(self._retained) >= need

    def peek(self, index: int) -> int:
        return self._retained[index]

    def consume(self, count: int) -> None:
        del self._retained[:count]
        self._bytes_consumed += count

    def emit_garbage(self) -> int:
        """Give up the oldest retained byte as a garbage sentinel."""
        byte_value = self._retained[0]
        if self.logger.is_enabled_for_debug():
            self.logger.debug(
                "Undecodable byte",
                extra={"byte": byte_value, "offset": self._bytes_consumed},
            )
        self.consume(1)
        return GARBAGE + byte_value

    def drain(self) -> int:
        """Return the next value once no further bytes can be read.

        Retained bytes come out as garbage one at a time; after them the
        latched terminal condition is returned once, then EOF.
        """
        if self._retained:
            return self.emit_garbage()
        return self.finish()

    def finish(self) -> int:
        if self._terminated:
            return EOF
        self._terminated = True
        terminal = self._latched if self._latched is not None else EOF
        self._latched = EOF
        return terminal
