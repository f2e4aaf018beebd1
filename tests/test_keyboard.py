import pytest

from minikern.keyboard import (
    INPUT_BUFFER_SIZE,
    LEFT_SHIFT,
    RELEASE_BIT,
    RIGHT_SHIFT,
    KeyboardReader,
    get_keymap,
)
from minikern.terminal import Terminal

KEYMAP = get_keymap(False)
ENTER = KEYMAP.index("\n")
BACKSPACE = KEYMAP.index("\b")
TAB = KEYMAP.index("\t")


def codes(text):
    return [KEYMAP.index(ch) for ch in text]


def test_keymaps_align():
    plain, shifted = get_keymap(False), get_keymap(True)
    assert len(plain) == len(shifted) == 128
    assert plain.index("q") == shifted.index("Q")
    assert plain.index("1") == shifted.index("!")
    assert plain[ENTER] == shifted[ENTER] == "\n"


def test_read_simple_line():
    reader = KeyboardReader()
    assert reader.read_line(codes("help") + [ENTER]) == "help"


def test_echo_output():
    out = []
    reader = KeyboardReader(echo=out.append)
    line = reader.read_line(codes("ab") + [BACKSPACE] + codes("c") + [ENTER])
    assert line == "ac"
    assert "".join(out) == "\n> ab\b \bc\n"


def test_shift_press_and_release():
    reader = KeyboardReader()
    scancodes = [LEFT_SHIFT] + codes("q") + [LEFT_SHIFT | RELEASE_BIT] + codes("q")
    assert reader.read_line(scancodes + [ENTER]) == "Qq"
    right = [RIGHT_SHIFT] + codes("1") + [RIGHT_SHIFT | RELEASE_BIT]
    assert reader.read_line(right + [ENTER]) == "!"


def test_release_codes_ignored():
    reader = KeyboardReader()
    scancodes = codes("a") + [codes("a")[0] | RELEASE_BIT] + codes("b") + [ENTER]
    assert reader.read_line(scancodes) == "ab"


def test_empty_enter_ignored_then_eof():
    reader = KeyboardReader()
    assert reader.read_line([ENTER, ENTER] + codes("x") + [ENTER]) == "x"
    with pytest.raises(EOFError):
        reader.read_line([ENTER])


def test_backspace_on_empty_line():
    reader = KeyboardReader()
    assert reader.read_line([BACKSPACE] + codes("z") + [ENTER]) == "z"


def test_tab_pads_to_stop():
    reader = KeyboardReader()
    line = reader.read_line(codes("ab") + [TAB] + codes("c") + [ENTER])
    assert line == "ab  c"


def test_buffer_limit():
    reader = KeyboardReader()
    line = reader.read_line(codes("a") * 300 + [ENTER])
    assert line == "a" * (INPUT_BUFFER_SIZE - 1)


def test_tab_at_limit():
    reader = KeyboardReader()
    line = reader.read_line(codes("a") * (INPUT_BUFFER_SIZE - 2) + [TAB, ENTER])
    assert len(line) == INPUT_BUFFER_SIZE - 1
    assert line.endswith("a ")


def test_echo_to_terminal():
    term = Terminal()
    reader = KeyboardReader(echo=term.write)
    assert reader.read_line(codes("hi") + [ENTER]) == "hi"
    assert term.row_text(1).startswith("> hi ")
    assert term.column == 0


def test_invalid_scancode():
    reader = KeyboardReader()
    with pytest.raises(ValueError):
        reader.read_line([0x100])