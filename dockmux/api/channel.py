"""
Byte channel over a streamed response body
"""

import logging
import re
from typing import Optional, Tuple

from .exceptions import StreamTruncated

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192

LINE_BREAK = re.compile(rb'\r\n|\n|\r')


def find_line(data: bytes, final: bool = False) -> Optional[Tuple[bytes, int]]:
    """
    Locate the first line in a byte buffer

    Args:
        data: Buffered bytes
        final: No more bytes will follow; unterminated data counts as a line
            and a trailing '\\r' is a complete terminator

    Returns:
        (line without terminator, bytes consumed including terminator),
        or None if more data is needed
    """
    match = LINE_BREAK.search(data)
    if match:
        # '\r' at the very end may be the first half of '\r\n'
        if match.group() == b'\r' and match.end() == len(data) and not final:
            return None
        return data[:match.start()], match.end()
    if final and data:
        return data, len(data)
    return None


class ByteChannel:
    """
    Pull-based reader over a binary stream (HTTP response, socket file, BytesIO)

    Reads block until data arrives or the source reports end of data.
    """

    def __init__(self, source, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            source: Object with read1() or read()
            chunk_size: Maximum bytes pulled from source per read
        """
        self.source = source
        self.chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    def _fill(self) -> bool:
        """Pull next chunk into buffer, False at end of data"""
        if self._eof:
            return False

        reader = getattr(self.source, 'read1', None) or self.source.read
        data = reader(self.chunk_size)
        if not data:
            self._eof = True
            logger.debug("Byte channel reached end of data")
            return False

        self._buffer += data
        return True

    @property
    def available_for_read(self) -> int:
        """Number of bytes buffered and readable without blocking"""
        return len(self._buffer)

    def is_closed_for_read(self) -> bool:
        """True once the source is exhausted and nothing is buffered"""
        if self._buffer:
            return False
        return not self._fill()

    def read_byte(self) -> int:
        """Read a single byte"""
        if not self._buffer and not self._fill():
            raise StreamTruncated("Stream closed while reading a byte", expected=1, received=0)

        value = self._buffer[0]
        del self._buffer[0]
        return value

    def read_exact(self, n: int) -> bytes:
        """
        Read exactly n bytes

        Raises:
            StreamTruncated: If the source ends first
        """
        while len(self._buffer) < n:
            if not self._fill():
                received = len(self._buffer)
                raise StreamTruncated(
                    f"Stream closed after {received} of {n} bytes",
                    expected=n,
                    received=received
                )

        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    def read_available(self) -> bytes:
        """Read everything currently buffered, waiting for one chunk if the buffer is empty"""
        if not self._buffer:
            self._fill()

        data = bytes(self._buffer)
        self._buffer.clear()
        return data

    def read_line(self, max_bytes: Optional[int] = None) -> Optional[str]:
        """
        Read up to the next line terminator ('\\n', '\\r\\n' or '\\r')

        Args:
            max_bytes: Stop after this many bytes even without a terminator

        Returns:
            Decoded line without terminator, or None at end of data
        """
        if max_bytes == 0:
            return ''

        while True:
            limit_reached = max_bytes is not None and len(self._buffer) >= max_bytes
            window = bytes(self._buffer if max_bytes is None else self._buffer[:max_bytes])

            found = find_line(window, final=self._eof or limit_reached)
            if found is not None:
                line, consumed = found
                del self._buffer[:consumed]
                return line.decode('utf-8', errors='replace')

            if not self._fill() and not self._buffer:
                return None

    def close(self):
        """Close the underlying source"""
        close = getattr(self.source, 'close', None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
