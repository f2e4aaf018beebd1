"""Formatted output with the kernel's printf conversions.

Supported conversions: ``%d %u %s %c %p %x %X %o %b %n %zu %f %e %g``,
``%ld %lu %lx %lf %lld %llu %llx %Lf`` and ``%%``.  A width is honoured
only by ``%llx`` (with ``0`` selecting zero padding) and a precision only
by the floating-point conversions.  Unknown conversions are written back
literally.  The count returned by :func:`printf` is in UTF-8 bytes.
"""

from __future__ import annotations

import operator
import re
from typing import Any, Callable, Iterable

from minikern.ctype import toupper
from minikern.numfmt import (
    etoa,
    ftoa,
    gtoa,
    itoa,
    lftoa,
    lltoa,
    llutoa,
    ltoa,
    lutoa,
    utoa,
)

Writer = Callable[[str], Any]

_SPEC = re.compile(
    r"%(?:(?P<percent>%)"
    r"|(?P<zero>0)?(?P<width>[0-9]*)(?:\.(?P<precision>[0-9]*))?"
    r"(?P<conv>ll.?|l.?|z.?|L.?|.)?)",
    re.DOTALL,
)

_INTEGER: dict[str, tuple[Callable[[int, int], str], int]] = {
    "d": (itoa, 10),
    "u": (utoa, 10),
    "p": (itoa, 16),
    "x": (itoa, 16),
    "X": (itoa, 16),
    "o": (utoa, 8),
    "b": (utoa, 2),
    "zu": (itoa, 10),
    "ld": (ltoa, 10),
    "lu": (lutoa, 10),
    "lx": (lutoa, 16),
    "lld": (lltoa, 10),
    "llu": (llutoa, 10),
}

_FLOAT: dict[str, Callable[[float, int], str]] = {
    "f": ftoa,
    "e": etoa,
    "g": gtoa,
    "lf": lftoa,
    "Lf": lftoa,
}

_DEFAULT_PRECISION = 6


class _Arguments:
    def __init__(self, args: Iterable[Any]) -> None:
        self._iterator = iter(args)

    def take(self, conv: str) -> Any:
        try:
            return next(self._iterator)
        except StopIteration:
            raise TypeError(f"not enough arguments for %{conv}") from None


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


def _integer(value: Any, conv: str) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(
            f"%{conv} expects an integer, got {type(value).__name__}"
        ) from None


def _real(value: Any, conv: str) -> float:
    if not isinstance(value, (int, float)):
        raise TypeError(f"%{conv} expects a number, got {type(value).__name__}")
    return float(value)


def _char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise ValueError(f"%c expects a single character, got {value!r}")
        return value
    return chr(_integer(value, "c") & 0xFF)


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"%s expects a string, got {type(value).__name__}")
    return value


def _convert(conv: str, match: re.Match, arguments: _Arguments) -> str:
    if conv in _INTEGER:
        func, base = _INTEGER[conv]
        text = func(_integer(arguments.take(conv), conv), base)
        return "".join(map(toupper, text)) if conv == "X" else text
    if conv in _FLOAT:
        precision = match["precision"]
        prec = _DEFAULT_PRECISION if precision is None else int(precision or "0")
        return _FLOAT[conv](_real(arguments.take(conv), conv), prec)
    if conv == "s":
        return _string(arguments.take(conv))
    if conv == "llx":
        text = llutoa(_integer(arguments.take(conv), conv), 16)
        pad = "0" if match["zero"] else " "
        return text.rjust(int(match["width"] or "0"), pad)
    return "%" + conv


def _render(fmt: str, args: Iterable[Any]) -> tuple[str, int]:
    arguments = _Arguments(args)
    pieces: list[str] = []
    count = 0
    pos = 0
    for match in _SPEC.finditer(fmt):
        literal = fmt[pos:match.start()]
        pieces.append(literal)
        count += _byte_len(literal)
        pos = match.end()

        if match["percent"]:
            piece = "%"
        else:
            conv = match["conv"] or ""
            if conv == "n":
                target = arguments.take(conv)
                if not callable(target):
                    raise TypeError("%n expects a callable that receives the count")
                target(count)
                continue
            if conv == "c":
                pieces.append(_char(arguments.take(conv)))
                count += 1
                continue
            piece = _convert(conv, match, arguments)
        pieces.append(piece)
        count += _byte_len(piece)

    tail = fmt[pos:]
    pieces.append(tail)
    count += _byte_len(tail)
    return "".join(pieces), count


def cformat(fmt: str, *args: Any) -> str:
    """Return ``fmt`` with its conversions filled in from ``args``."""
    return _render(fmt, args)[0]


def printf(write: Writer, fmt: str, *args: Any) -> int:
    """Format and pass the text to ``write``; return the number of bytes written."""
    text, count = _render(fmt, args)
    if text:
        write(text)
    return count


def puts(write: Writer, text: str) -> int:
    """Write ``text`` followed by a newline; return the number of bytes written."""
    return printf(write, "%s\n", text)