import pytest

from minikern.ioports import PortBus, PortWrite
from minikern.terminal import (
    BANNER_LEFT,
    BANNER_RIGHT,
    VGA_HEIGHT,
    VGA_WIDTH,
    Terminal,
    VgaColor,
    vga_entry,
    vga_entry_color,
)


def test_entry_color_values():
    assert vga_entry_color(VgaColor.LIGHT_GREY, VgaColor.BLACK) == VgaColor.LIGHT_GREY
    assert vga_entry_color(VgaColor.WHITE, VgaColor.BLUE) == 0x1F


def test_entry_holds_char_and_color():
    color = vga_entry_color(VgaColor.RED, VgaColor.BLACK)
    entry = vga_entry("A", color)
    assert entry & 0xFF == ord("A")
    assert entry >> 8 == color


def test_new_terminal_is_blank():
    term = Terminal()
    assert all(term.row_text(y) == " " * VGA_WIDTH for y in range(VGA_HEIGHT))
    assert (term.row, term.column) == (0, 0)


def test_write_text_and_newline():
    term = Terminal()
    term.write("hi\nab")
    assert term.row_text(0).startswith("hi ")
    assert term.row_text(1).startswith("ab ")
    assert (term.row, term.column) == (1, len("ab"))


def test_line_wraps_at_width():
    term = Terminal()
    term.write("x" * VGA_WIDTH)
    assert (term.row, term.column) == (1, 0)
    assert term.row_text(0) == "x" * VGA_WIDTH


def test_scrolls_at_bottom():
    term = Terminal()
    for i in range(VGA_HEIGHT):
        term.write(f"line{i}\n")
    assert term.row == VGA_HEIGHT - 1
    assert term.row_text(0).startswith("line1 ")
    assert term.row_text(VGA_HEIGHT - 2).startswith(f"line{VGA_HEIGHT - 1}")
    assert term.row_text(VGA_HEIGHT - 1).strip() == ""


def test_backspace_moves_to_previous_line():
    term = Terminal()
    term.write("\n\b")
    assert (term.row, term.column) == (0, VGA_WIDTH - 1)
    other = Terminal()
    other.write("\b")
    assert (other.row, other.column) == (0, 0)


def test_backspace_erases_character():
    term = Terminal()
    term.write("ab\b")
    assert term.row_text(0).startswith("a ")
    assert term.column == 1


def test_tab_stops():
    term = Terminal()
    term.write("ab\t")
    assert term.column == 4
    term.write("\t")
    assert term.column == 8


def test_tab_at_line_end_wraps_once():
    term = Terminal()
    term.write("x" * (VGA_WIDTH - 2) + "\t")
    assert (term.row, term.column) == (1, 0)
    assert term.row_text(0).endswith("  ")


def test_clear_resets():
    term = Terminal()
    term.write("hello\nworld")
    term.clear()
    assert (term.row, term.column) == (0, 0)
    assert term.row_text(0).strip() == ""


def test_cursor_port_writes():
    bus = PortBus()
    term = Terminal(bus=bus)
    term.putchar("x")
    assert bus.writes[-4:] == [
        PortWrite(0x3D4, 0x0F, 1),
        PortWrite(0x3D5, 1, 1),
        PortWrite(0x3D4, 0x0E, 1),
        PortWrite(0x3D5, 0, 1),
    ]


def test_cursor_matches_position():
    bus = PortBus()
    term = Terminal(bus=bus)
    term.write("ab\ncd")
    low, high = bus.writes[-3].value, bus.writes[-1].value
    assert low | high << 8 == term.cursor == term.row * VGA_WIDTH + term.column


def test_copyright_text_layout():
    term = Terminal()
    original = term.color
    term.copyright_text()
    row = term.row_text(0)
    assert row.startswith(BANNER_LEFT)
    assert row.endswith(BANNER_RIGHT)
    assert term.color == original
    assert term.buffer[0] >> 8 == vga_entry_color(VgaColor.LIGHT_GREEN, VgaColor.BLACK)
    assert (term.row, term.column) == (2, 0)


def test_put_entry_off_screen():
    term = Terminal()
    with pytest.raises(IndexError):
        term.put_entry_at("a", term.color, VGA_WIDTH, 0)


def test_putchar_rejects_wide_char():
    term = Terminal()
    with pytest.raises(ValueError):
        term.putchar("\u0416")