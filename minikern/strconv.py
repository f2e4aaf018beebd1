"""Text to number conversions.

Each function returns ``(value, end)`` where ``end`` is the index in the
text at which parsing stopped.
"""

from __future__ import annotations

import math
import struct

from minikern.ctype import isdigit, isspace


def _at(text: str, pos: int) -> str:
    return text[pos] if pos < len(text) else ""


def _skip_space(text: str, pos: int = 0) -> int:
    while pos < len(text) and isspace(text[pos]):
        pos += 1
    return pos


def _is_decimal(ch: str) -> bool:
    return ch != "" and "0" <= ch <= "9"


def _hex_value(ch: str) -> int | None:
    if isdigit(ch):
        return ord(ch) - ord("0")
    if "a" <= ch <= "f":
        return ord(ch) - ord("a") + 10
    if "A" <= ch <= "F":
        return ord(ch) - ord("A") + 10
    return None


def _has_hex_prefix(text: str, pos: int) -> bool:
    return _at(text, pos) == "0" and _at(text, pos + 1) in ("x", "X")


def _parse_unsigned(text: str, base: int, bits: int) -> tuple[int, int]:
    limit = (1 << bits) - 1
    pos = _skip_space(text)
    if _at(text, pos) in ("+", "-"):
        pos += 1  # the sign is accepted and ignored

    if base == 0:
        if _has_hex_prefix(text, pos):
            base, pos = 16, pos + 2
        elif _at(text, pos) == "0":
            base, pos = 8, pos + 1
        else:
            base = 10
    elif base == 16 and _has_hex_prefix(text, pos):
        pos += 2

    result = 0
    while pos < len(text):
        digit = _hex_value(text[pos])
        if digit is None or digit >= base:
            break
        previous = result
        result = (result * base + digit) & limit
        if result < previous:
            result = limit
            break
        pos += 1
    return result, pos


def strtoul(text: str, base: int = 10) -> tuple[int, int]:
    """Parse a 32-bit unsigned integer; base 0 detects 0x and 0 prefixes.

    On overflow the value saturates at the maximum and parsing stops.
    """
    return _parse_unsigned(text, base, 32)


def strtoull(text: str, base: int = 10) -> tuple[int, int]:
    """Parse a 64-bit unsigned integer; see :func:`strtoul`."""
    return _parse_unsigned(text, base, 64)


def _sign(text: str, pos: int) -> tuple[int, int]:
    ch = _at(text, pos)
    if ch == "-":
        return -1, pos + 1
    if ch == "+":
        return 1, pos + 1
    return 1, pos


def _parse_signed(text: str, base: int, bits: int) -> tuple[int, int]:
    pos = _skip_space(text)
    sign, pos = _sign(text, pos)
    result = 0
    while _is_decimal(_at(text, pos)):
        result = result * base + (ord(text[pos]) - ord("0"))
        pos += 1
    value = (result * sign) & ((1 << bits) - 1)
    if value >> (bits - 1):
        value -= 1 << bits
    return value, pos


def strtol(text: str, base: int = 10) -> tuple[int, int]:
    """Parse a signed 32-bit integer from decimal digit characters.

    Only the characters 0-9 are read, each weighted by ``base``; the
    result wraps to 32 bits.
    """
    return _parse_signed(text, base, 32)


def strtoll(text: str, base: int = 10) -> tuple[int, int]:
    """Parse a signed 64-bit integer; see :func:`strtol`."""
    return _parse_signed(text, base, 64)


def strtod(text: str) -> tuple[float, int]:
    """Parse a decimal floating-point number with an optional exponent."""
    pos = _skip_space(text)
    sign, pos = _sign(text, pos)
    result = 0.0

    while _is_decimal(_at(text, pos)):
        result = result * 10.0 + (ord(text[pos]) - ord("0"))
        pos += 1

    if _at(text, pos) == ".":
        pos += 1
        factor = 0.1
        while _is_decimal(_at(text, pos)):
            result += (ord(text[pos]) - ord("0")) * factor
            factor *= 0.1
            pos += 1

    if _at(text, pos) in ("e", "E"):
        pos += 1
        exp_sign, pos = _sign(text, pos)
        exponent = 0
        while _is_decimal(_at(text, pos)):
            exponent = exponent * 10 + (ord(text[pos]) - ord("0"))
            pos += 1
        exp_factor = 1.0
        for _ in range(exponent):
            exp_factor *= 10.0
            if math.isinf(exp_factor):
                break
        if exp_sign < 0:
            result /= exp_factor
        else:
            result *= exp_factor

    return result * sign, pos


def _f32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def strtof(text: str) -> tuple[float, int]:
    """Parse a decimal number in single precision; no exponent is read."""
    pos = _skip_space(text)
    sign, pos = _sign(text, pos)
    result = 0.0
    factor = 1.0

    while _is_decimal(_at(text, pos)):
        result = _f32(_f32(result * 10.0) + (ord(text[pos]) - ord("0")))
        pos += 1

    if _at(text, pos) == ".":
        pos += 1
        while _is_decimal(_at(text, pos)):
            factor = _f32(factor / 10.0)
            result = _f32(result + _f32((ord(text[pos]) - ord("0")) * factor))
            pos += 1

    return _f32(result * sign), pos


def strtold(text: str) -> tuple[float, int]:
    """Parse a decimal number without exponent, in double precision."""
    pos = _skip_space(text)
    sign, pos = _sign(text, pos)
    result = 0.0
    factor = 1.0

    while _is_decimal(_at(text, pos)):
        result = result * 10.0 + (ord(text[pos]) - ord("0"))
        pos += 1

    if _at(text, pos) == ".":
        pos += 1
        while _is_decimal(_at(text, pos)):
            factor /= 10.0
            result += (ord(text[pos]) - ord("0")) * factor
            pos += 1

    return result * sign, pos