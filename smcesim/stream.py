"""Byte output and parsing input streams with the Arduino interface."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from enum import Enum

from smcesim.wstring import String

NO_IGNORE_CHAR = "\x01"

_MINUS = ord("-")
_DOT = ord(".")
_WHITESPACE = frozenset(b" \t\r\n")


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_F32_TENTH = _f32(0.1)


def _is_digit(code: int) -> bool:
    return 0x30 <= code <= 0x39


def _char_code(char: str | bytes | int) -> int:
    if isinstance(char, int):
        return char
    if len(char) != 1:
        raise ValueError("expected a single character")
    return char[0] if isinstance(char, bytes) else ord(char)


def _to_bytes(data: bytes | bytearray | memoryview | str | String) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, (str, String)):
        return str(data).encode()
    raise TypeError(f"cannot write {type(data).__name__}")


class Print(ABC):
    """A byte sink; subclasses provide ``write_byte``."""

    def __init__(self) -> None:
        self.write_error = 0

    @abstractmethod
    def write_byte(self, byte: int) -> int:
        """Write one byte; return 1 on success and 0 on failure."""

    def _write_buffer(self, payload: bytes) -> int:
        count = 0
        for byte in payload:
            count += 1
            if not self.write_byte(byte):
                break
        return count

    def write(self, data: bytes | str | String | None) -> int:
        """Write bytes one by one until one fails; return the number attempted."""
        if data is None:
            return 0
        return self._write_buffer(_to_bytes(data))

    def print(self, value: bytes | str | String) -> int:
        """Write text; return the byte count."""
        return self.write(value)

    def println(self, value: bytes | str | String | None = None) -> int:
        """Write text followed by CR LF."""
        written = 0 if value is None else self.print(value)
        return written + self.write_byte(ord("\r")) + self.write_byte(ord("\n"))

    def available_for_write(self) -> int:
        """Bytes that can be written without blocking; 0 means a write may block."""
        return 0

    def clear_write_error(self) -> None:
        """Reset the write error."""
        self.write_error = 0

    def flush(self) -> None:
        """Wait for output to be sent; nothing is buffered here."""


class LookaheadMode(Enum):
    """What ``parse_int`` and ``parse_float`` skip before a number."""

    SKIP_ALL = 0
    SKIP_NONE = 1
    SKIP_WHITESPACE = 2


class Stream(Print):
    """A byte source with parsing helpers; subclasses provide ``read`` and ``peek``."""

    def __init__(self) -> None:
        super().__init__()
        self.timeout = 1000

    @abstractmethod
    def read(self) -> int:
        """Remove and return the next byte, or -1."""

    @abstractmethod
    def peek(self) -> int:
        """Return the next byte without removing it, or -1."""

    def set_timeout(self, timeout: int) -> None:
        """Set the read timeout in milliseconds."""
        self.timeout = timeout

    def find_until(self, target: str | bytes, length: int, terminal: str | bytes | int) -> bool:
        """Read until ``length + 1`` consecutive copies of the first target byte are seen.

        Stops with False at the end of input or at ``terminal``.
        """
        first = _char_code(target[:1])
        term = _char_code(terminal)
        count = -1
        while True:
            c = self.read()
            if c < 0 or c == term:
                return False
            count = count + 1 if c == first else -1
            if count == length:
                return True

    def peek_next_digit(self, lookahead: LookaheadMode, detect_decimal: bool) -> int:
        """Skip input per ``lookahead`` up to a digit, '-' or optionally '.'; -1 if none."""
        while True:
            c = self.peek()
            if c < 0 or c == _MINUS or _is_digit(c) or (detect_decimal and c == _DOT):
                return c
            if lookahead is LookaheadMode.SKIP_NONE:
                return -1
            if lookahead is LookaheadMode.SKIP_WHITESPACE and c not in _WHITESPACE:
                return -1
            self.read()

    def parse_float(
        self, lookahead: LookaheadMode = LookaheadMode.SKIP_ALL, ignore: str | int = NO_IGNORE_CHAR
    ) -> float:
        """Read a decimal number in single precision; 0.0 when none is found."""
        ignore_code = _char_code(ignore)
        c = self.peek_next_digit(lookahead, True)
        if c < 0:
            return 0.0
        negative = fraction_mode = False
        value = 0
        fraction = 1.0
        while True:
            if c == ignore_code:
                pass
            elif c == _MINUS:
                negative = True
            elif c == _DOT:
                fraction_mode = True
            elif _is_digit(c):
                value = value * 10 + c - 0x30
                if fraction_mode:
                    fraction = _f32(fraction * _F32_TENTH)
            self.read()
            c = self.peek()
            if not (_is_digit(c) or (c == _DOT and not fraction_mode) or c == ignore_code):
                break
        if negative:
            value = -value
        return _f32(_f32(value) * fraction) if fraction_mode else _f32(value)

    def parse_int(
        self, lookahead: LookaheadMode = LookaheadMode.SKIP_ALL, ignore: str | int = NO_IGNORE_CHAR
    ) -> int:
        """Read a decimal integer; 0 when none is found."""
        ignore_code = _char_code(ignore)
        c = self.peek_next_digit(lookahead, False)
        if c < 0:
            return 0
        negative = False
        value = 0
        while True:
            if c == ignore_code:
                pass
            elif c == _MINUS:
                negative = True
            elif _is_digit(c):
                value = value * 10 + c - 0x30
            self.read()
            c = self.peek()
            if not (_is_digit(c) or c == ignore_code):
                break
        return -value if negative else value

    def read_bytes_until(self, terminator: str | bytes | int, length: int) -> bytes:
        """Read up to ``length`` bytes, stopping before ``terminator`` or at the end."""
        term = _char_code(terminator)
        out = bytearray()
        while len(out) < length:
            c = self.read()
            if c < 0 or c == term:
                break
            out.append(c)
        return bytes(out)

    def read_string_until(self, terminator: str | bytes | int) -> String:
        """Read characters until ``terminator`` or the end."""
        term = _char_code(terminator)
        chars = []
        while True:
            c = self.read()
            if c < 0 or c == term:
                break
            chars.append(chr(c))
        return String("".join(chars))