"""Tests for ByteChannel and line splitting."""

import io

import pytest

from dockmux.api.channel import ByteChannel, find_line
from dockmux.api.exceptions import StreamTruncated

from streams import ChunkedSource


def test_empty_source_is_closed(channel_of):
    assert channel_of(b'').is_closed_for_read()


def test_buffered_data_keeps_channel_open():
    channel = ByteChannel(ChunkedSource(b'ab'))
    assert not channel.is_closed_for_read()
    assert channel.available_for_read == 2
    channel.read_exact(2)
    assert channel.is_closed_for_read()


def test_read_byte_and_exact(channel_of):
    channel = channel_of(b'\x07abc')
    assert channel.read_byte() == 7
    assert channel.read_exact(3) == b'abc'
    assert channel.read_exact(0) == b''


def test_read_exact_spans_chunks():
    channel = ByteChannel(ChunkedSource(b'ab', b'cd', b'ef'))
    assert channel.read_exact(5) == b'abcde'
    assert channel.read_available() == b'f'


def test_read_past_end_raises(channel_of):
    channel = channel_of(b'xy')
    with pytest.raises(StreamTruncated) as exc_info:
        channel.read_exact(4)
    assert (exc_info.value.expected, exc_info.value.received) == (4, 2)

    with pytest.raises(StreamTruncated):
        channel_of(b'').read_byte()


def test_read_available_returns_one_chunk_at_a_time():
    channel = ByteChannel(ChunkedSource(b'first', b'second'))
    assert channel.read_available() == b'first'
    assert channel.read_available() == b'second'
    assert channel.read_available() == b''


def test_read_line_terminators(channel_of):
    channel = channel_of(b'a\nb\r\nc\rd')
    assert channel.read_line() == 'a'
    assert channel.read_line() == 'b'
    assert channel.read_line() == 'c'
    assert channel.read_line() == 'd'
    assert channel.read_line() is None


def test_read_line_limit(channel_of):
    channel = channel_of(b'abcdef\nrest\n')
    assert channel.read_line(4) == 'abcd'
    assert channel.read_line(10) == 'ef'
    assert channel.read_line(0) == ''
    assert channel.read_line() == 'rest'


def test_read_line_crlf_across_chunks():
    channel = ByteChannel(ChunkedSource(b'one\r', b'\ntwo\n'))
    assert channel.read_line() == 'one'
    assert channel.read_line() == 'two'


def test_close_closes_source():
    source = ChunkedSource(b'x')
    with ByteChannel(source):
        pass
    assert source.closed


def test_plain_read_source_is_supported():
    class ReadOnly:
        def __init__(self, data):
            self._data = io.BytesIO(data)

        def read(self, amt=-1):
            return self._data.read(amt)

    channel = ByteChannel(ReadOnly(b'abc'), chunk_size=1)
    assert channel.read_exact(3) == b'abc'
    assert channel.is_closed_for_read()
    channel.close()


@pytest.mark.parametrize('data, final, expected', [
    (b'abc\ndef', False, (b'abc', 4)),
    (b'abc\r\n', False, (b'abc', 5)),
    (b'abc\r', False, None),
    (b'abc\r', True, (b'abc', 4)),
    (b'abc', False, None),
    (b'abc', True, (b'abc', 3)),
    (b'', True, None),
    (b'\n', False, (b'', 1)),
])
def test_find_line(data, final, expected):
    assert find_line(data, final=final) == expected
