"""Tests for the log/attach stream demultiplexer."""

import io

import pytest

from dockmux.api.channel import ByteChannel
from dockmux.api.demux import MODE_FRAMED, MODE_RAW, Demultiplexer, demultiplex, strip_line_terminator
from dockmux.api.exceptions import StreamError, StreamTruncated
from dockmux.api.frames import Frame, Stream

from streams import ChunkedSource, frame_bytes


def decode(data: bytes, **kwargs):
    return list(demultiplex(io.BytesIO(data), **kwargs))


# -- framed mode --


def test_single_stdout_frame():
    data = bytes([0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x05]) + b'hello'
    assert decode(data) == [Frame('hello', 5, Stream.STDOUT)]


def test_stdout_and_stderr_frames_in_arrival_order():
    data = frame_bytes(1, b'out line\n') + frame_bytes(2, b'err line\n')
    frames = decode(data)
    assert [f.stream for f in frames] == [Stream.STDOUT, Stream.STDERR]
    assert [f.text for f in frames] == ['out line', 'err line']
    assert [f.length for f in frames] == [9, 9]


@pytest.mark.parametrize('stream_type, stream', [(0, Stream.STDIN), (1, Stream.STDOUT), (2, Stream.STDERR)])
@pytest.mark.parametrize('length', [1, 7, 300])
def test_framed_payload_length_is_consumed_exactly(stream_type, stream, length):
    payload = b'a' * length
    data = frame_bytes(stream_type, payload) + frame_bytes(1, b'next')
    frames = decode(data)
    assert frames[0] == Frame(payload.decode(), length, stream)
    assert frames[1] == Frame('next', 4, Stream.STDOUT)


def test_zero_length_payload():
    assert decode(frame_bytes(2, b'')) == [Frame('', 0, Stream.STDERR)]


def test_payload_with_large_length_uses_big_endian():
    payload = b'x' * 0x0102
    frames = decode(frame_bytes(1, payload))
    assert frames[0].length == 258


def test_trailing_crlf_stripped_from_payload():
    assert decode(frame_bytes(1, b'windows\r\n'))[0].text == 'windows'


def test_inner_line_breaks_kept_in_payload():
    frame = decode(frame_bytes(1, b'a\nb\n'))[0]
    assert frame.text == 'a\nb'
    assert frame.length == 4


def test_invalid_utf8_is_replaced():
    frame = decode(frame_bytes(1, b'bad \xff byte'))[0]
    assert frame.text == 'bad \ufffd byte'


def test_frame_split_across_reads():
    data = frame_bytes(1, b'chunked payload\n')
    source = ChunkedSource(data[:3], data[3:10], data[10:])
    assert list(demultiplex(source)) == [Frame('chunked payload', 16, Stream.STDOUT)]


def test_truncated_header_raises():
    with pytest.raises(StreamTruncated):
        decode(b'\x01\x00\x00')


def test_truncated_payload_raises():
    with pytest.raises(StreamTruncated) as exc_info:
        decode(b'\x01\x00\x00\x00\x00\x00\x00\x05he')
    assert exc_info.value.expected == 5
    assert exc_info.value.received == 2


def test_framed_session_rejects_unknown_type_later():
    demux = demultiplex(io.BytesIO(frame_bytes(1, b'ok\n') + b'Xnot framed\n'))
    assert next(demux) == Frame('ok', 3, Stream.STDOUT)
    assert demux.mode == MODE_FRAMED
    with pytest.raises(StreamError):
        next(demux)


# -- raw (TTY) mode --


def test_raw_line_with_stdout_only():
    assert decode(b'X\n', stdout=True, stderr=False) == [Frame('X', 2, Stream.STDOUT)]


def test_raw_line_with_stderr_only():
    assert decode(b'X\n', stdout=False, stderr=True) == [Frame('X', 2, Stream.STDERR)]


def test_raw_line_with_both_streams_is_unknown():
    assert decode(b'X\n') == [Frame('X', 2, Stream.UNKNOWN)]


@pytest.mark.parametrize('text', ['$ prompt', '\x1b[31mred', 'Z', '\tindented'])
def test_raw_first_byte_is_kept(text):
    frames = decode(text.encode() + b'\n')
    assert frames[0].text == text


def test_raw_chunk_with_several_lines():
    frames = decode(b'one\ntwo\r\nthree\rfour\n')
    assert [f.text for f in frames] == ['one', 'two', 'three', 'four']
    assert [f.length for f in frames] == [4, 5, 6, 5]


def test_raw_mode_latches_for_whole_session():
    source = ChunkedSource(b'hello\n', b'\x01world\n', b'\x02\x00\x00\x00\x00\x00\x00\x01x')
    demux = demultiplex(source)
    frames = list(demux)
    assert demux.mode == MODE_RAW
    assert [f.text for f in frames] == ['hello', '\x01world', '\x02\x00\x00\x00\x00\x00\x00\x01x']
    assert all(f.stream is Stream.UNKNOWN for f in frames)


def test_raw_unterminated_tail_emitted_at_close():
    frames = decode(b'line1\npartial')
    assert frames == [Frame('line1', 6, Stream.UNKNOWN), Frame('partial', 7, Stream.UNKNOWN)]


def test_raw_waits_for_terminator_in_later_chunk():
    frames = list(demultiplex(ChunkedSource(b'par', b'tial', b' line\n')))
    assert frames == [Frame('partial line', 13, Stream.UNKNOWN)]


def test_raw_crlf_split_across_chunks():
    frames = list(demultiplex(ChunkedSource(b'ab\r', b'\ncd\n')))
    assert [f.text for f in frames] == ['ab', 'cd']
    assert frames[0].length == 4


def test_raw_multibyte_character_split_across_chunks():
    frames = list(demultiplex(ChunkedSource(b'h\xc3', b'\xa9\n')))
    assert frames == [Frame('hé', 4, Stream.UNKNOWN)]


def test_tty_hint_forces_raw_mode():
    frames = decode(b'\x01hi\n', tty=True)
    assert frames == [Frame('\x01hi', 4, Stream.UNKNOWN)]


def test_tty_false_forces_framed_mode():
    with pytest.raises(StreamError):
        decode(b'plain text\n', tty=False)


# -- session behavior --


def test_closed_channel_yields_nothing():
    assert decode(b'') == []


def test_same_bytes_decode_identically_in_two_sessions():
    data = frame_bytes(1, b'a\n') + frame_bytes(2, b'b\n') + frame_bytes(1, b'')
    assert decode(data) == decode(data)


def test_frames_are_produced_lazily():
    source = ChunkedSource(frame_bytes(1, b'first\n'), frame_bytes(1, b'second\n'))
    demux = demultiplex(source)
    assert next(demux).text == 'first'
    assert len(source.chunks) == 1


def test_demultiplex_accepts_existing_channel():
    channel = ByteChannel(io.BytesIO(frame_bytes(1, b'x')))
    demux = demultiplex(channel)
    assert isinstance(demux, Demultiplexer)
    assert demux.channel is channel


def test_iterator_is_single_use():
    demux = demultiplex(io.BytesIO(frame_bytes(1, b'x')))
    assert len(list(demux)) == 1
    assert list(demux) == []


@pytest.mark.parametrize('payload, expected', [
    (b'a\n', b'a'),
    (b'a\r\n', b'a'),
    (b'a\r', b'a'),
    (b'a', b'a'),
    (b'a\n\n', b'a\n'),
])
def test_strip_line_terminator(payload, expected):
    assert strip_line_terminator(payload) == expected
