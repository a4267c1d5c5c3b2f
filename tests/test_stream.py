from collections import deque

import pytest

from smcesim.stream import LookaheadMode, Stream


class BufferStream(Stream):
    def __init__(self, data=b"", capacity=None):
        super().__init__()
        self._incoming = deque(data)
        self.output = bytearray()
        self._capacity = capacity

    def read(self):
        return self._incoming.popleft() if self._incoming else -1

    def peek(self):
        return self._incoming[0] if self._incoming else -1

    def write_byte(self, byte):
        if self._capacity is not None and len(self.output) >= self._capacity:
            return 0
        self.output.append(byte)
        return 1

    def remaining(self):
        return bytes(self._incoming)


def test_write_all():
    stream = BufferStream()
    assert Stream.write(stream, b"hello") == len(b"hello")
    assert bytes(stream.output) == b"hello"


def test_write_stops_at_failure_counting_failed_byte():
    stream = BufferStream(capacity=2)
    assert Stream.write(stream, b"abcde") == 3
    assert bytes(stream.output) == b"ab"


def test_write_none():
    assert Stream.write(BufferStream(), None) == 0


def test_print_and_println():
    stream = BufferStream()
    assert Stream.print(stream, "hi") == 2
    assert Stream.println(stream, "yo") == len("yo\r\n")
    assert Stream.println(stream) == 2
    assert bytes(stream.output) == b"hiyo\r\n\r\n"


def test_write_error_cleared():
    stream = BufferStream()
    stream.write_error = 5
    Stream.clear_write_error(stream)
    assert stream.write_error == 0
    assert Stream.available_for_write(stream) == 0


def test_set_timeout():
    stream = BufferStream()
    Stream.set_timeout(stream, 250)
    assert stream.timeout == 250


def test_parse_int_skips_noise():
    stream = BufferStream(b"  -123x")
    assert Stream.parse_int(stream) == -123
    assert stream.remaining() == b"x"


def test_parse_int_skip_none_stops():
    stream = BufferStream(b" 5")
    assert Stream.parse_int(stream, LookaheadMode.SKIP_NONE) == 0
    assert stream.remaining() == b" 5"


def test_parse_int_whitespace_mode():
    assert Stream.parse_int(BufferStream(b"\t\n 77"), LookaheadMode.SKIP_WHITESPACE) == 77
    assert Stream.parse_int(BufferStream(b"a77"), LookaheadMode.SKIP_WHITESPACE) == 0


def test_parse_int_with_ignore_char():
    assert Stream.parse_int(BufferStream(b"1,234"), LookaheadMode.SKIP_ALL, ",") == 1234


def test_parse_float():
    assert Stream.parse_float(BufferStream(b"abc 3.25;")) == pytest.approx(3.25, rel=1e-6)
    assert Stream.parse_float(BufferStream(b"-0.5")) == pytest.approx(-0.5)
    assert Stream.parse_float(BufferStream(b"none")) == 0.0


def test_parse_float_integer():
    assert Stream.parse_float(BufferStream(b"12 ")) == 12.0


def test_peek_next_digit():
    assert Stream.peek_next_digit(BufferStream(b"ab7"), LookaheadMode.SKIP_ALL, False) == ord("7")
    assert Stream.peek_next_digit(BufferStream(b"  x"), LookaheadMode.SKIP_WHITESPACE, False) == -1
    assert Stream.peek_next_digit(BufferStream(b".5"), LookaheadMode.SKIP_NONE, True) == ord(".")
    assert Stream.peek_next_digit(BufferStream(b""), LookaheadMode.SKIP_ALL, False) == -1


def test_read_bytes_until():
    stream = BufferStream(b"abc,def")
    assert Stream.read_bytes_until(stream, ",", 10) == b"abc"
    assert stream.remaining() == b"def"


def test_read_bytes_until_length_limit():
    stream = BufferStream(b"abcdef")
    assert Stream.read_bytes_until(stream, ",", 2) == b"ab"
    assert stream.remaining() == b"cdef"


def test_read_string_until():
    stream = BufferStream(b"line one\nline two")
    assert Stream.read_string_until(stream, "\n") == "line one"
    assert Stream.read_string_until(stream, "\n") == "line two"
    assert Stream.read_string_until(stream, "\n") == ""


def test_find_until():
    assert Stream.find_until(BufferStream(b"xaaay"), "a", 2, "#") is True
    assert Stream.find_until(BufferStream(b"xaay"), "a", 2, "#") is False
    assert Stream.find_until(BufferStream(b"a#aaa"), "a", 2, "#") is False