"""Byte sources feeding the code point decoder.

A byte source delivers up to ``size`` bytes per read together with a status
telling whether more may follow, the stream ended cleanly, or a read failed.
Short reads, including reads of zero bytes with status MORE, are legal and are
retried by the decoder.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional


class SourceStatus(Enum):
    """Condition reported alongside the bytes of a read."""

    MORE = "more"      # more bytes may follow
    END = "end"        # clean end of stream
    ERROR = "error"    # read failure other than end of stream


@dataclass
class ReadResult:
    """Outcome of a single ByteSource.read() call.

    Attributes:
        data: Bytes delivered by this read (possibly empty)
        status: Condition after delivering ``data``
        error: Exception describing an ERROR status, if any
    """
    data: bytes = b""
    status: SourceStatus = SourceStatus.MORE
    error: Optional[BaseException] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not SourceStatus.MORE


class ByteSource(ABC):
    """Interface the decoder expects from its input."""

    @abstractmethod
    def read(self, size: int) -> ReadResult:
        """Read up to ``size`` bytes without losing bytes already delivered."""


class SourceReadError(IOError):
    """Read failure raised into a BytesSource to simulate a broken stream."""


class BytesSource(ByteSource):
    """In-memory byte source.

    Args:
        data: Bytes to deliver
        max_chunk: Deliver at most this many bytes per read
        empty_reads: Return a zero-byte MORE result before every delivery
        error: Report this error instead of a clean end once data runs out
    """

    def __init__(
        self,
        data: bytes,
        max_chunk: Optional[int] = None,
        empty_reads: bool = False,
        error: Optional[BaseException] = None,
    ) -> None:
        if max_chunk is not None and max_chunk <= 0:
            raise ValueError("max_chunk must be > 0 or None")
        self._data = bytes(data)
        self._position = 0
        self._max_chunk = max_chunk
        self._empty_reads = empty_reads
        self._stalled = False
        self._error = error
        self.read_count = 0

    @property
    def position(self) -> int:
        return self._position

    def read(self, size: int) -> ReadResult:
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}")
        self.read_count += 1

        if self._empty_reads and not self._stalled:
            self._stalled = True
            return ReadResult(b"", SourceStatus.MORE)
        self._stalled = False

        if self._max_chunk is not None:
            size = min(size, self._max_chunk)
        chunk = self._data[self._position:self._position + size]
        self._position += len(chunk)

        if self._position < len(self._data):
            return ReadResult(chunk, SourceStatus.MORE)
        if self._error is not None:
            return ReadResult(chunk, SourceStatus.ERROR, self._error)
        return ReadResult(chunk, SourceStatus.END)


class StreamByteSource(ByteSource):
    """Adapt a binary file object to the ByteSource interface.

    ``read()`` returning ``b""`` means end of stream. ``None`` and
    ``BlockingIOError`` (non-blocking stream without data) are zero-byte reads.
    Any other ``OSError`` is reported as an ERROR result carrying the exception.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def read(self, size: int) -> ReadResult:
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}")
        try:
            chunk = self.stream.read(size)
        except BlockingIOError:
            return ReadResult(b"", SourceStatus.MORE)
        except OSError as e:
            return ReadResult(b"", SourceStatus.ERROR, e)

        if chunk is None:
            return ReadResult(b"", SourceStatus.MORE)
        if not chunk and size > 0:
            return ReadResult(b"", SourceStatus.END)
        return ReadResult(bytes(chunk), SourceStatus.MORE)
