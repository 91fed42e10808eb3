"""Byte stream builders for demultiplexer tests."""

import struct


def frame_bytes(stream_type: int, payload: bytes) -> bytes:
    """Encode one multiplexed frame: type, 3 reserved bytes, big-endian length, payload."""
    return struct.pack('>BxxxI', stream_type, len(payload)) + payload


class ChunkedSource:
    """Binary source returning one predefined chunk per read, like a socket."""

    def __init__(self, *chunks: bytes):
        self.chunks = list(chunks)
        self.closed = False

    def read1(self, amt: int = -1) -> bytes:
        if not self.chunks:
            return b''
        return self.chunks.pop(0)

    def close(self):
        self.closed = True
