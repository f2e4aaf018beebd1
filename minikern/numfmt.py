"""Integer and floating-point to text conversions with C integer widths.

Integer arguments are first reduced to the width of the C type the
conversion works on (32-bit ``int``/``long``, 64-bit ``long long``), so
out-of-range values wrap exactly as they would in the kernel.
"""

from __future__ import annotations

import math

_DIGITS = "0123456789abcdef"


def _wrap_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def _wrap_unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def _check_base(base: int, upper: int | None = None) -> None:
    if base < 2 or (upper is not None and base > upper):
        limit = f"2..{upper}" if upper is not None else "at least 2"
        raise ValueError(f"base must be {limit}, got {base}")


def _trunc_divmod(value: int, base: int) -> tuple[int, int]:
    """Division that truncates toward zero, with the matching remainder."""
    quotient = value // base if value >= 0 else -(-value // base)
    return quotient, value - quotient * base


def _require_finite(value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")


def _loop_digits(value: int, base: int) -> str:
    """Digits of a non-zero value, least significant first, using a..z above 9."""
    chars = []
    while value:
        value, rem = _trunc_divmod(value, base)
        chars.append(chr(ord("a") + rem - 10) if rem > 9 else chr(ord("0") + rem))
    return "".join(chars)


def itoa(value: int, base: int = 10) -> str:
    """Format a 32-bit int; only base 10 gets a minus sign."""
    _check_base(base)
    value = _wrap_signed(value, 32)
    if value == 0:
        return "0"
    negative = value < 0 and base == 10
    if negative:
        value = -value
    text = _loop_digits(value, base)
    if negative:
        text += "-"
    return text[::-1]


def utoa(value: int, base: int = 10) -> str:
    """Format a 32-bit unsigned int."""
    _check_base(base)
    value = _wrap_unsigned(value, 32)
    if value == 0:
        return "0"
    return _loop_digits(value, base)[::-1]


def _table_digits(value: int, base: int) -> str:
    chars = []
    while True:
        value, rem = divmod(value, base)
        chars.append(_DIGITS[rem])
        if not value:
            break
    return "".join(reversed(chars))


def _signed_table(value: int, base: int, bits: int) -> str:
    _check_base(base, len(_DIGITS))
    value = _wrap_signed(value, bits)
    sign = "-" if value < 0 else ""
    return sign + _table_digits(abs(value), base)


def _unsigned_table(value: int, base: int, bits: int) -> str:
    _check_base(base, len(_DIGITS))
    return _table_digits(_wrap_unsigned(value, bits), base)


def ltoa(value: int, base: int = 10) -> str:
    """Format a 32-bit long in bases 2..16; negatives get a minus sign in any base."""
    return _signed_table(value, base, 32)


def lltoa(value: int, base: int = 10) -> str:
    """Format a 64-bit long long in bases 2..16."""
    return _signed_table(value, base, 64)


def lutoa(value: int, base: int = 10) -> str:
    """Format a 32-bit unsigned long in bases 2..16."""
    return _unsigned_table(value, base, 32)


def llutoa(value: int, base: int = 10) -> str:
    """Format a 64-bit unsigned long long in bases 2..16."""
    return _unsigned_table(value, base, 64)


def int_to_str(value: int, digits: int = 0) -> str:
    """Decimal digits of ``value``, zero-padded on the left to ``digits`` places."""
    value = _wrap_signed(value, 32)
    chars = ["0"] if value == 0 else []
    while value:
        value, rem = _trunc_divmod(value, 10)
        chars.append(chr(ord("0") + rem))
    chars.extend("0" * (digits - len(chars)))
    return "".join(reversed(chars))


def reverse(text: str, length: int) -> str:
    """Reverse the first ``length`` characters of ``text``."""
    if length > len(text):
        raise ValueError(f"length {length} exceeds text of {len(text)} characters")
    if length <= 0:
        return text
    return text[:length][::-1] + text[length:]


def reverse_string(text: str) -> str:
    """Return ``text`` reversed."""
    return text[::-1]


def _fraction_digits(fraction: float, precision: int) -> str:
    chars = []
    for _ in range(precision):
        fraction *= 10.0
        digit = int(fraction)
        chars.append(chr(ord("0") + digit))
        fraction -= digit
    return "".join(chars)


def _fixed(value: float, precision: int, integer_format) -> str:
    _require_finite(value)
    negative = value < 0
    if negative:
        value = -value
    int_part = int(value)
    text = ("-" if negative else "") + integer_format(int_part, 10)
    if precision > 0:
        text += "." + _fraction_digits(value - int_part, precision)
    return text


def ftoa(value: float, precision: int = 6) -> str:
    """Fixed-point text with ``precision`` truncated decimals; integer part is a 32-bit long."""
    return _fixed(value, precision, ltoa)


def lftoa(value: float, precision: int = 6) -> str:
    """Fixed-point text whose integer part is a 64-bit long long."""
    return _fixed(value, precision, lltoa)


def dtoa(value: float, precision: int = 6) -> str:
    """Fixed-point text; the decimal point is always written.

    The fraction is taken with the sign of ``value``, so negative values
    produce fraction characters below ``'0'``, just as the kernel does.
    """
    _require_finite(value)
    integer = int(value)
    return itoa(integer, 10) + "." + _fraction_digits(value - integer, precision)


def etoa(value: float, precision: int = 6) -> str:
    """Exponential text such as ``d.ddde+XX``; a negative precision means 6."""
    _require_finite(value)
    if precision < 0:
        precision = 6
    exponent = 0
    negative = value < 0
    if negative:
        value = -value
    if value != 0.0:
        while value >= 10.0:
            value /= 10.0
            exponent += 1
        while value < 1.0:
            value *= 10.0
            exponent -= 1
    exp_sign = "-" if exponent < 0 else "+"
    return (
        ("-" if negative else "")
        + ftoa(value, precision)
        + "e"
        + exp_sign
        + int_to_str(abs(exponent), 2)
    )


def gtoa(value: float, precision: int = 6) -> str:
    """The shorter of the fixed and exponential forms; fixed wins ties."""
    fixed = ftoa(value, precision)
    scientific = etoa(value, precision)
    return fixed if len(fixed) <= len(scientific) else scientific