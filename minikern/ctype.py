"""ASCII character classification and case mapping.

Every function accepts either an integer character code or a one-character
string.  Only the 7-bit ASCII range is classified; every other code is
reported as not belonging to any class.
"""

from __future__ import annotations

from typing import Union

CharLike = Union[int, str]

_CASE_OFFSET = ord("a") - ord("A")


def _code(c: CharLike) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        return ord(c)
    return int(c)


def isalpha(c: CharLike) -> bool:
    """True for ASCII letters."""
    code = _code(c)
    return ord("A") <= code <= ord("Z") or ord("a") <= code <= ord("z")


def isdigit(c: CharLike) -> bool:
    """True for the decimal digits 0-9."""
    return ord("0") <= _code(c) <= ord("9")


def isalnum(c: CharLike) -> bool:
    """True for ASCII letters and decimal digits."""
    return isalpha(c) or isdigit(c)


def iscntrl(c: CharLike) -> bool:
    """True for control characters (0-31 and DEL)."""
    code = _code(c)
    return 0 <= code < 32 or code == 127


def isgraph(c: CharLike) -> bool:
    """True for printable characters other than space."""
    return 33 <= _code(c) <= 126


def islower(c: CharLike) -> bool:
    """True for lowercase ASCII letters."""
    return ord("a") <= _code(c) <= ord("z")


def isupper(c: CharLike) -> bool:
    """True for uppercase ASCII letters."""
    return ord("A") <= _code(c) <= ord("Z")


def isprint(c: CharLike) -> bool:
    """True for printable characters, space included."""
    return 32 <= _code(c) <= 126


def ispunct(c: CharLike) -> bool:
    """True for printable characters that are neither alphanumeric nor space."""
    code = _code(c)
    return (
        33 <= code <= 47
        or 58 <= code <= 64
        or 91 <= code <= 96
        or 123 <= code <= 126
    )


_SPACE_CODES = frozenset(map(ord, " \t\n\v\f\r"))


def isspace(c: CharLike) -> bool:
    """True for space, tab, newline, vertical tab, form feed and carriage return."""
    return _code(c) in _SPACE_CODES


def isxdigit(c: CharLike) -> bool:
    """True for hexadecimal digits in either case."""
    code = _code(c)
    return (
        isdigit(code)
        or ord("a") <= code <= ord("f")
        or ord("A") <= code <= ord("F")
    )


def _same_kind(original: CharLike, code: int) -> CharLike:
    return chr(code) if isinstance(original, str) else code


def tolower(c: CharLike) -> CharLike:
    """Map an uppercase letter to lowercase; anything else is returned as is."""
    code = _code(c)
    return _same_kind(c, code + _CASE_OFFSET if isupper(code) else code)


def toupper(c: CharLike) -> CharLike:
    """Map a lowercase letter to uppercase; anything else is returned as is."""
    code = _code(c)
    return _same_kind(c, code - _CASE_OFFSET if islower(code) else code)