"""Byte-buffer and NUL-terminated string helpers.

Memory functions work on ``bytes``-like sources and ``bytearray``
destinations, changing them in place and returning the destination.
String functions take ``str`` values and honour an embedded ``"\\0"`` as
the end of the string, as the kernel's routines do.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import Union

Buffer = Union[bytes, bytearray, memoryview]

_NUL = "\0"


def _cstr(text: str) -> str:
    """The part of ``text`` before its first NUL character."""
    return text.split(_NUL, 1)[0]


def _check_span(what: str, available: int, offset: int, size: int) -> None:
    if offset < 0 or size < 0 or offset + size > available:
        raise ValueError(
            f"{what}: {size} bytes at offset {offset} do not fit in {available} bytes"
        )


def _check_count(n: int) -> None:
    if n < 0:
        raise ValueError(f"count must not be negative, got {n}")


def memcmp(a: Buffer, b: Buffer, size: int) -> int:
    """Compare the first ``size`` bytes; return -1, 0 or 1."""
    _check_span("first operand", len(a), 0, size)
    _check_span("second operand", len(b), 0, size)
    left, right = bytes(a[:size]), bytes(b[:size])
    return (left > right) - (left < right)


def memcpy(dst: bytearray, src: Buffer, size: int) -> bytearray:
    """Copy ``size`` bytes from the start of ``src`` to the start of ``dst``."""
    _check_span("source", len(src), 0, size)
    _check_span("destination", len(dst), 0, size)
    dst[:size] = bytes(src[:size])
    return dst


def memmove(buffer: bytearray, dst: int, src: int, size: int) -> bytearray:
    """Move ``size`` bytes inside ``buffer`` from offset ``src`` to offset ``dst``.

    Overlapping regions are handled correctly.
    """
    _check_span("source", len(buffer), src, size)
    _check_span("destination", len(buffer), dst, size)
    buffer[dst:dst + size] = bytes(buffer[src:src + size])
    return buffer


def memset(buffer: bytearray, value: int, size: int) -> bytearray:
    """Fill the first ``size`` bytes with the low byte of ``value``."""
    _check_span("buffer", len(buffer), 0, size)
    buffer[:size] = bytes([value & 0xFF]) * size
    return buffer


def bzero(buffer: bytearray, size: int) -> bytearray:
    """Zero the first ``size`` bytes."""
    return memset(buffer, 0, size)


def strlen(text: str) -> int:
    """Number of characters before the terminating NUL."""
    return len(_cstr(text))


def wcslen(text: str) -> int:
    """Number of wide characters before the terminating NUL."""
    return len(_cstr(text))


def strcmp(s1: str, s2: str) -> int:
    """Difference of the first differing character codes, or 0 if equal."""
    for x, y in zip_longest(_cstr(s1), _cstr(s2), fillvalue=_NUL):
        if x != y:
            return ord(x) - ord(y)
    return 0


def strcmpn(s1: str, s2: str) -> bool:
    """True when both strings are equal."""
    return strcmp(s1, s2) == 0


def strncmp(s1: str, s2: str, n: int) -> int:
    """Like :func:`strcmp`, looking at no more than ``n`` characters."""
    _check_count(n)
    for x, y in zip_longest(_cstr(s1)[:n], _cstr(s2)[:n], fillvalue=_NUL):
        if x != y:
            return ord(x) - ord(y)
    return 0


def strcpy(src: str) -> str:
    """The string held in ``src``, up to its terminator."""
    return _cstr(src)


def strncpy(src: str, n: int) -> str:
    """Exactly ``n`` characters: ``src`` truncated, or padded with NULs."""
    _check_count(n)
    copied = _cstr(src)[:n]
    return copied + _NUL * (n - len(copied))


def strcat(dest: str, src: str) -> str:
    """``src`` appended to ``dest``."""
    return _cstr(dest) + _cstr(src)


def strncat(dest: str, src: str, n: int) -> str:
    """At most ``n`` characters of ``src`` appended to ``dest``."""
    _check_count(n)
    return _cstr(dest) + _cstr(src)[:n]


def strchr(text: str, c: Union[int, str]) -> int | None:
    """Index of the first occurrence of ``c``, or None.

    Searching for the NUL character itself finds nothing.
    """
    code = ord(c) if isinstance(c, str) else int(c)
    if code == 0:
        return None
    index = _cstr(text).find(chr(code))
    return None if index < 0 else index


def substr(src: str, start: int, length: int) -> str:
    """``length`` characters of ``src`` from ``start``; empty if out of range."""
    if length < 0:
        raise ValueError(f"length must not be negative, got {length}")
    text = _cstr(src)
    if start < 0 or start + length > len(text):
        return ""
    return text[start:start + length]