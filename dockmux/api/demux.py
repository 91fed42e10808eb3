"""
Log/attach stream demultiplexer

The daemon multiplexes stdout and stderr over one connection by prefixing
every payload with an 8-byte header:

    [type:1][reserved:3][length:4, big-endian]

with type 0 (stdin), 1 (stdout) or 2 (stderr). Containers created with a
TTY get no header at all; their output is raw text. The first byte of the
session is the only way to tell the two apart, so a byte that is not a
type tag switches the session to raw mode and is kept as the first
character of the text.
"""

import logging
import struct
from typing import Iterator, Optional

from .channel import ByteChannel, find_line
from .exceptions import StreamError
from .frames import Frame, Stream

logger = logging.getLogger(__name__)

MODE_FRAMED = 'framed'
MODE_RAW = 'raw'

# Header after the type byte: 3 reserved bytes, big-endian payload length
_HEADER_REST = struct.Struct('>xxxI')


def strip_line_terminator(payload: bytes) -> bytes:
    """Remove one trailing '\\n', '\\r\\n' or '\\r'"""
    if payload.endswith(b'\r\n'):
        return payload[:-2]
    if payload.endswith((b'\n', b'\r')):
        return payload[:-1]
    return payload


class Demultiplexer:
    """
    Decode one logs/attach session into frames

    Iterating yields Frame objects lazily until the channel is closed.
    The iterator is single-use: it is bound to one open response.

    The decode mode is fixed by the first chunk of the session. Once raw,
    every later byte is text; once framed, a header with an unknown type
    byte raises StreamError.
    """

    def __init__(self, channel: ByteChannel, stdout: bool = True, stderr: bool = True,
                 tty: Optional[bool] = None):
        """
        Args:
            channel: Byte channel of the response body
            stdout: stdout was requested from the daemon
            stderr: stderr was requested from the daemon
            tty: True forces raw mode, False forces framed mode, None detects
        """
        self.channel = channel
        self.stdout = stdout
        self.stderr = stderr
        self.mode = None
        self._pending = bytearray()
        self._frames = self._iter_frames()

        if tty is not None:
            self._latch(MODE_RAW if tty else MODE_FRAMED)

    def __iter__(self) -> Iterator[Frame]:
        return self

    def __next__(self) -> Frame:
        return next(self._frames)

    def _latch(self, mode: str):
        self.mode = mode
        logger.debug(f"Stream demultiplexer using {mode} mode")

    def raw_stream(self) -> Stream:
        """Best guess for unframed output: only one requested stream can be the source"""
        if self.stdout and not self.stderr:
            return Stream.STDOUT
        if self.stderr and not self.stdout:
            return Stream.STDERR
        return Stream.UNKNOWN

    def _iter_frames(self) -> Iterator[Frame]:
        while True:
            frame = self.next_frame()
            if frame is None:
                return
            yield frame

    def next_frame(self) -> Optional[Frame]:
        """
        Decode the next frame

        Returns:
            Frame, or None once the channel is closed
        """
        if self.mode == MODE_RAW:
            return self._next_raw_frame()

        if self.channel.is_closed_for_read():
            return None

        first_byte = self.channel.read_byte()
        stream = Stream.from_type(first_byte)

        if stream is None:
            if self.mode == MODE_FRAMED:
                raise StreamError(f"Invalid stream type 0x{first_byte:02x} in multiplexed stream")

            self._latch(MODE_RAW)
            # The byte is text, not a type tag: put it back in front of the buffered data
            self._pending.append(first_byte)
            self._pending += self.channel.read_available()
            return self._next_raw_frame()

        if self.mode is None:
            self._latch(MODE_FRAMED)
        return self._read_framed(stream)

    def _read_framed(self, stream: Stream) -> Frame:
        payload_length, = _HEADER_REST.unpack(self.channel.read_exact(_HEADER_REST.size))
        payload = self.channel.read_exact(payload_length)
        text = strip_line_terminator(payload).decode('utf-8', errors='replace')
        return Frame(text, payload_length, stream)

    def _next_raw_frame(self) -> Optional[Frame]:
        while True:
            found = find_line(bytes(self._pending))
            if found is None:
                if not self.channel.is_closed_for_read():
                    self._pending += self.channel.read_available()
                    continue

                # Closed: whatever is left is the last line
                found = find_line(bytes(self._pending), final=True)
                if found is None:
                    return None

            line, consumed = found
            del self._pending[:consumed]
            return Frame(line.decode('utf-8', errors='replace'), consumed, self.raw_stream())


def demultiplex(source, stdout: bool = True, stderr: bool = True,
                tty: Optional[bool] = None) -> Demultiplexer:
    """
    Create a lazy frame iterator over a logs/attach response

    Args:
        source: ByteChannel or binary file-like object
        stdout: stdout was requested
        stderr: stderr was requested
        tty: Force raw (True) or framed (False) decoding, None to detect

    Returns:
        Demultiplexer yielding Frame objects
    """
    channel = source if isinstance(source, ByteChannel) else ByteChannel(source)
    return Demultiplexer(channel, stdout=stdout, stderr=stderr, tty=tty)
