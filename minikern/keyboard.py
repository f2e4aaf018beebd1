"""Scan-code set 1 keymaps and line input from a stream of scan codes."""

from __future__ import annotations

from typing import Any, Callable, Iterable

LEFT_SHIFT = 0x2A
RIGHT_SHIFT = 0x36
RELEASE_BIT = 0x80
INPUT_BUFFER_SIZE = 256
TAB_SIZE = 4
PROMPT = "\n> "

_KEYMAP_SIZE = 128


def _pad(keys: str) -> str:
    return keys + "\0" * (_KEYMAP_SIZE - len(keys))


KEYMAP = _pad(
    "\0\x1b1234567890-=\b"
    "\tqwertyuiop[]\n"
    "\0asdfghjkl;'`"
    "\0\\zxcvbnm,./\0"
    "*\0 "
)

SHIFT_KEYMAP = _pad(
    "\0\x1b!@#$%^&*()_+\b"
    "\tQWERTYUIOP{}\n"
    "\0ASDFGHJKL:\"~"
    "\0|ZXCVBNM<>?\0"
    "*\0 "
)


def get_keymap(shift_pressed: bool) -> str:
    """The 128-entry keymap; ``"\\0"`` marks keys that produce no character."""
    return SHIFT_KEYMAP if shift_pressed else KEYMAP


class KeyboardReader:
    """Turns scan codes into a line of input, echoing what is typed."""

    def __init__(self, echo: Callable[[str], Any] | None = None) -> None:
        self._echo = echo

    def _show(self, text: str) -> None:
        if self._echo is not None:
            self._echo(text)

    def read_line(self, scancodes: Iterable[int]) -> str:
        """Read until Enter is pressed on a non-empty line.

        Raises EOFError when the scan codes run out first.
        """
        chars: list[str] = []
        shift = False
        limit = INPUT_BUFFER_SIZE - 1
        self._show(PROMPT)

        for scancode in scancodes:
            if not 0 <= scancode <= 0xFF:
                raise ValueError(f"scan code {scancode} is not a byte")
            if scancode & RELEASE_BIT:
                if scancode & ~RELEASE_BIT in (LEFT_SHIFT, RIGHT_SHIFT):
                    shift = False
                continue
            if scancode in (LEFT_SHIFT, RIGHT_SHIFT):
                shift = True
                continue

            key = get_keymap(shift)[scancode]
            if key == "\n":
                if chars:
                    self._show("\n")
                    return "".join(chars)
            elif key == "\b":
                if chars:
                    chars.pop()
                    self._show("\b \b")
            elif key == "\t":
                if len(chars) < limit:
                    stop = (len(chars) + TAB_SIZE) & ~(TAB_SIZE - 1)
                    for _ in range(stop - len(chars)):
                        if len(chars) < limit:
                            chars.append(" ")
                        self._show(" ")
            elif key != "\0" and len(chars) < limit:
                chars.append(key)
                self._show(key)

        raise EOFError("scan codes ended before a line was entered")