"""A mutable character string with the Arduino ``String`` interface."""

from __future__ import annotations

import math
import re
import struct
from functools import total_ordering

_UINTMAX = (1 << 64) - 1
_INT_MIN = -(1 << 31)
_INT_MAX = (1 << 31) - 1
_SPACE = "[ \t\n\v\f\r]*"
_INT_RE = re.compile(_SPACE + r"([+-]?[0-9]+)", re.ASCII)
_FLOAT_RE = re.compile(
    _SPACE + r"([+-]?(?:inf(?:inity)?|nan|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:e[+-]?[0-9]+)?))",
    re.ASCII | re.IGNORECASE,
)
_TO_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")
_TO_UPPER = str.maketrans("abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def _text(value: String | str) -> str:
    if isinstance(value, String):
        return value._value
    if isinstance(value, str):
        return value
    raise TypeError(f"expected String or str, got {type(value).__name__}")


def _parse_double(text: str) -> float:
    match = _FLOAT_RE.match(text)
    if match is None:
        return 0.0
    token = match.group(1)
    value = float(token)
    if math.isinf(value) and "inf" not in token.lower():
        return 0.0  # out of range
    return value


@total_ordering
class String:
    """Mutable text; the in-place operations change the object itself."""

    __slots__ = ("_value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: String | str = "") -> None:
        self._value = _text(value)

    @classmethod
    def from_binary(cls, value: int) -> String:
        """Binary digits of an unsigned 64-bit value."""
        return cls(format(value & _UINTMAX, "b"))

    @classmethod
    def from_hex(cls, value: int) -> String:
        """Upper-case hexadecimal digits of an unsigned 64-bit value."""
        return cls(format(value & _UINTMAX, "X"))

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"String({self._value!r})"

    def __len__(self) -> int:
        return len(self._value)

    def __getitem__(self, index: int) -> str:
        return self._value[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (String, str)):
            return self._value == _text(other)
        return NotImplemented

    def __lt__(self, other: String | str) -> bool:
        if isinstance(other, (String, str)):
            return self._value < _text(other)
        return NotImplemented

    def __add__(self, other: String | str) -> String:
        if isinstance(other, (String, str)):
            return String(self._value + _text(other))
        return NotImplemented

    def __radd__(self, other: str) -> String:
        if isinstance(other, str):
            return String(other + self._value)
        return NotImplemented

    def __iadd__(self, other: String | str) -> String:
        self.concat(other)
        return self

    def char_at(self, index: int) -> str:
        """Character at ``index``; IndexError when out of range."""
        if not 0 <= index < len(self._value):
            raise IndexError(f"index {index} out of range for length {len(self._value)}")
        return self._value[index]

    def set_char_at(self, index: int, char: str) -> None:
        """Replace the character at ``index``."""
        if len(char) != 1:
            raise ValueError("expected a single character")
        if not 0 <= index < len(self._value):
            raise IndexError(f"index {index} out of range for length {len(self._value)}")
        self._value = self._value[:index] + char + self._value[index + 1 :]

    def compare_to(self, other: String | str) -> int:
        """Compare over the length of the shorter string: -1, 0 or 1."""
        other_text = _text(other)
        n = min(len(self._value), len(other_text))
        left, right = self._value[:n], other_text[:n]
        return (left > right) - (left < right)

    def starts_with(self, other: String | str) -> bool:
        """Whether this string begins with ``other``."""
        return self._value.startswith(_text(other))

    def ends_with(self, other: String | str) -> bool:
        """Whether this string ends with ``other``."""
        return self._value.endswith(_text(other))

    def get_bytes(self, length: int) -> bytes:
        """At most ``length`` leading bytes of the string."""
        return self._value.encode()[: max(length, 0)]

    def index_of(self, sub: String | str, start: int = 0) -> int:
        """Position of ``sub`` at or after ``start``, or -1."""
        return self._value.find(_text(sub), start)

    def remove(self, index: int, count: int | None = None) -> None:
        """Erase from ``index``; with ``count``, erase ``index + count - 1`` characters."""
        if not 0 <= index <= len(self._value):
            raise IndexError(f"index {index} out of range for length {len(self._value)}")
        erased = None if count is None else index + count - 1
        if erased is None or erased < 0:
            self._value = self._value[:index]
        else:
            self._value = self._value[:index] + self._value[index + erased :]

    def replace(self, old: String | str, new: String | str) -> None:
        """Replace the first ``old`` with ``new``, dropping everything after it."""
        old_text, new_text = _text(old), _text(new)
        if not old_text:
            return
        position = self._value.find(old_text)
        if position >= 0:
            self._value = self._value[:position] + new_text

    def substring(self, start: int, end: int | None = None) -> String:
        """Characters from ``start`` up to ``end`` (to the end if omitted or before ``start``)."""
        if not 0 <= start <= len(self._value):
            raise IndexError(f"index {start} out of range for length {len(self._value)}")
        if end is None or end < start:
            return String(self._value[start:])
        return String(self._value[start:end])

    def to_int(self) -> int:
        """Leading decimal integer, or 0 when there is none or it does not fit 32 bits."""
        match = _INT_RE.match(self._value)
        if match is None:
            return 0
        value = int(match.group(1))
        return value if _INT_MIN <= value <= _INT_MAX else 0

    def to_double(self) -> float:
        """Leading floating-point number, or 0.0."""
        return _parse_double(self._value)

    def to_float(self) -> float:
        """Leading number rounded to single precision, or 0.0 when out of range."""
        value = _parse_double(self._value)
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            return 0.0

    def to_lower_case(self) -> None:
        """Lower-case the ASCII letters in place."""
        self._value = self._value.translate(_TO_LOWER)

    def to_upper_case(self) -> None:
        """Upper-case the ASCII letters in place."""
        self._value = self._value.translate(_TO_UPPER)

    def trim(self) -> None:
        """Strip leading and trailing spaces; a string of only spaces is left alone."""
        stripped = self._value.lstrip(" ")
        if stripped:
            self._value = stripped.rstrip(" ")

    def equals(self, other: String | str) -> bool:
        """Exact equality."""
        return self._value == _text(other)

    def equals_ignore_case(self, other: String | str) -> bool:
        """Equality ignoring ASCII case."""
        return self._value.translate(_TO_LOWER) == _text(other).translate(_TO_LOWER)

    def concat(self, other: String | str) -> None:
        """Append ``other`` in place."""
        self._value += _text(other)