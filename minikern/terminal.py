"""A VGA text-mode console held in memory."""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from minikern.ioports import PortBus

VGA_WIDTH = 80
VGA_HEIGHT = 25
TAB_SIZE = 4

CURSOR_INDEX_PORT = 0x3D4
CURSOR_DATA_PORT = 0x3D5
_CURSOR_LOW = 0x0F
_CURSOR_HIGH = 0x0E

BANNER_LEFT = "MINIKERN."
BANNER_RIGHT = "Kernel console."

_NEWLINE = ord("\n")
_RETURN = ord("\r")
_TAB = ord("\t")
_BACKSPACE = ord("\b")
_SPACE = ord(" ")

CharLike = Union[int, str]


class VgaColor(IntEnum):
    BLACK = 0
    BLUE = 1
    GREEN = 2
    CYAN = 3
    RED = 4
    MAGENTA = 5
    BROWN = 6
    LIGHT_GREY = 7
    DARK_GREY = 8
    LIGHT_BLUE = 9
    LIGHT_GREEN = 10
    LIGHT_CYAN = 11
    LIGHT_RED = 12
    LIGHT_MAGENTA = 13
    LIGHT_BROWN = 14
    WHITE = 15


def _char_code(c: CharLike) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        code = ord(c)
        if code > 0xFF:
            raise ValueError(f"character {c!r} does not fit in one byte")
        return code
    return int(c) & 0xFF


def vga_entry_color(fg: int, bg: int) -> int:
    """Attribute byte for a foreground and background colour."""
    return (int(fg) | int(bg) << 4) & 0xFF


def vga_entry(ch: CharLike, color: int) -> int:
    """16-bit cell value: character in the low byte, attribute in the high."""
    return _char_code(ch) | (color & 0xFF) << 8


class Terminal:
    """An 80x25 text console with scrolling and a hardware cursor."""

    def __init__(self, bus: PortBus | None = None) -> None:
        self.bus = bus
        self.row = 0
        self.column = 0
        self.cursor = 0
        self.color = vga_entry_color(VgaColor.LIGHT_GREY, VgaColor.BLACK)
        self.buffer = [vga_entry(" ", self.color)] * (VGA_WIDTH * VGA_HEIGHT)

    def clear(self) -> None:
        """Blank the screen and move the write position to the top left."""
        blank = vga_entry(" ", self.color)
        self.buffer = [blank] * (VGA_WIDTH * VGA_HEIGHT)
        self.row = 0
        self.column = 0

    def set_color(self, color: int) -> None:
        """Set the attribute used for subsequent output."""
        self.color = color & 0xFF

    def put_entry_at(self, c: CharLike, color: int, x: int, y: int) -> None:
        """Store one character with its attribute at column ``x``, row ``y``."""
        if not (0 <= x < VGA_WIDTH and 0 <= y < VGA_HEIGHT):
            raise IndexError(f"position ({x}, {y}) is off the screen")
        self.buffer[y * VGA_WIDTH + x] = vga_entry(c, color)

    def scroll(self) -> None:
        """Move every line up by one and blank the bottom line."""
        blank = vga_entry(" ", self.color)
        self.buffer = self.buffer[VGA_WIDTH:] + [blank] * VGA_WIDTH
        self.row = VGA_HEIGHT - 1

    def _next_row(self) -> None:
        self.row += 1
        if self.row == VGA_HEIGHT:
            self.scroll()

    def _advance(self) -> bool:
        """Step one column; True when the line wrapped."""
        self.column += 1
        if self.column == VGA_WIDTH:
            self.column = 0
            self._next_row()
            return True
        return False

    def _update_cursor(self) -> None:
        self.cursor = self.row * VGA_WIDTH + self.column
        if self.bus is not None:
            self.bus.outb(CURSOR_INDEX_PORT, _CURSOR_LOW)
            self.bus.outb(CURSOR_DATA_PORT, self.cursor & 0xFF)
            self.bus.outb(CURSOR_INDEX_PORT, _CURSOR_HIGH)
            self.bus.outb(CURSOR_DATA_PORT, (self.cursor >> 8) & 0xFF)

    def putchar(self, c: CharLike) -> None:
        """Write one character, interpreting newline, return, tab and backspace."""
        code = _char_code(c)
        if code == _NEWLINE:
            self.column = 0
            self._next_row()
        elif code == _RETURN:
            self.column = 0
        elif code == _TAB:
            stop = (self.column + TAB_SIZE) & ~(TAB_SIZE - 1)
            while self.column < stop:
                self.put_entry_at(_SPACE, self.color, self.column, self.row)
                # A tab that reaches the end of the line ends there.
                if self._advance():
                    break
        elif code == _BACKSPACE:
            if self.column > 0:
                self.column -= 1
                self.put_entry_at(_SPACE, self.color, self.column, self.row)
            elif self.row > 0:
                self.row -= 1
                self.column = VGA_WIDTH - 1
                self.put_entry_at(_SPACE, self.color, self.column, self.row)
        else:
            self.put_entry_at(code, self.color, self.column, self.row)
            self._advance()
        self._update_cursor()

    def write(self, data: Union[str, bytes]) -> None:
        """Write text (encoded as UTF-8) or raw bytes."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        for byte in data:
            self.putchar(byte)

    def row_text(self, y: int) -> str:
        """The characters of row ``y``."""
        if not 0 <= y < VGA_HEIGHT:
            raise IndexError(f"row {y} is off the screen")
        cells = self.buffer[y * VGA_WIDTH:(y + 1) * VGA_WIDTH]
        return "".join(chr(cell & 0xFF) for cell in cells)

    def copyright_text(self) -> None:
        """Write the banner line: name on the left, tagline on the right, in green."""
        padding = max(0, VGA_WIDTH - len(BANNER_LEFT) - len(BANNER_RIGHT))
        original = self.color
        self.set_color(vga_entry_color(VgaColor.LIGHT_GREEN, VgaColor.BLACK))
        self.write(BANNER_LEFT)
        self.write(" " * padding)
        self.write(BANNER_RIGHT)
        self.set_color(original)
        self.write("\n")