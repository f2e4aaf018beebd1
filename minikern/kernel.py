"""Bringing the simulated machine up and running the console loop."""

from __future__ import annotations

import argparse
import sys
from itertools import chain
from typing import Iterable, Iterator

from minikern.descriptors import (
    EXCEPTION_VECTORS,
    GDT_CODE_SEL_1,
    IRQ_VECTORS,
    InterruptDescriptorTable,
    gdt_entries,
)
from minikern.heap import (
    HEAP_START_ADDRESS,
    KernelHeap,
    MultibootInfo,
    calculate_heap_size,
)
from minikern.interrupts import PIC1_IRQ_OFFSET, InterruptController, Registers
from minikern.ioports import PortBus
from minikern.keyboard import (
    KEYMAP,
    LEFT_SHIFT,
    RELEASE_BIT,
    SHIFT_KEYMAP,
    KeyboardReader,
)
from minikern.printf import printf
from minikern.shell import Shell
from minikern.terminal import VGA_HEIGHT, Terminal
from minikern.timer import TIMER_IRQ, Timer

BOOT_DELAY_MS = 200
DEFAULT_MEM_LOWER = 640
DEFAULT_MEM_UPPER = 7168

# Entry points of the interrupt stubs in the simulated kernel image.
_HANDLER_BASE = 0x00100000
_HANDLER_STRIDE = 16


def _build_key_codes() -> dict[str, tuple[int, bool]]:
    codes: dict[str, tuple[int, bool]] = {}
    for shifted, keymap in ((False, KEYMAP), (True, SHIFT_KEYMAP)):
        for scancode, key in enumerate(keymap):
            if key != "\0":
                codes.setdefault(key, (scancode, shifted))
    return codes


_KEY_CODES = _build_key_codes()
_ENTER = KEYMAP.index("\n")


def _line_scancodes(line: str) -> Iterator[int]:
    """Key presses and releases that type ``line`` followed by Enter."""
    for ch in line:
        try:
            code, shifted = _KEY_CODES[ch]
        except KeyError:
            raise ValueError(f"cannot type {ch!r} on the keyboard") from None
        if shifted:
            yield LEFT_SHIFT
        yield code
        yield code | RELEASE_BIT
        if shifted:
            yield LEFT_SHIFT | RELEASE_BIT
    yield _ENTER
    yield _ENTER | RELEASE_BIT


class Kernel:
    """The whole machine: console, heap, descriptor tables, interrupts and shell."""

    def __init__(self, info: MultibootInfo | None = None, bus: PortBus | None = None) -> None:
        self.info = info if info is not None else MultibootInfo(
            mem_lower=DEFAULT_MEM_LOWER, mem_upper=DEFAULT_MEM_UPPER
        )
        self.bus = bus if bus is not None else PortBus()
        self.terminal = Terminal(self.bus)
        self.heap: KernelHeap | None = None
        self.gdt: list[int] = []
        self.idt = InterruptDescriptorTable()
        self.interrupts = InterruptController(self.bus)
        self.timer: Timer | None = None
        self.keyboard = KeyboardReader(self.terminal.write)
        self.shell: Shell | None = None

    def _print(self, fmt: str, *args: object) -> None:
        printf(self.terminal.write, fmt, *args)

    def _timer_interrupt(self) -> None:
        self.interrupts.irq_server(Registers(int_no=PIC1_IRQ_OFFSET + TIMER_IRQ))

    def boot(self) -> None:
        """Initialise every subsystem and show the banner."""
        self.terminal = Terminal(self.bus)
        self.keyboard = KeyboardReader(self.terminal.write)
        self.heap = KernelHeap(calculate_heap_size(self.info), HEAP_START_ADDRESS)
        self.terminal.copyright_text()

        self.bus.irq_disable()

        self.gdt = gdt_entries()
        self._print("GDT initialization completed successfully!\n")

        self.idt = InterruptDescriptorTable()
        handlers = [
            _HANDLER_BASE + index * _HANDLER_STRIDE
            for index in range(EXCEPTION_VECTORS + IRQ_VECTORS)
        ]
        self.idt.set_isrs(GDT_CODE_SEL_1, handlers)
        self._print("IDT initialization completed successfully!\n")

        self.interrupts = InterruptController(self.bus)
        self.interrupts.init()
        self._print("PIC initialization completed successfully!\n")

        self.timer = Timer(self.bus, self.interrupts, idle=self._timer_interrupt)
        self._print("PIT initialization completed successfully!\n")

        self.bus.irq_enable()
        self.timer.sleep(BOOT_DELAY_MS)
        self.terminal.clear()
        self.terminal.copyright_text()

        self.shell = Shell(self.terminal, self.heap, self.timer, self.bus)

    def run(self, lines: Iterable[str]) -> list[str]:
        """Type each line at the prompt and run it; return the commands run.

        Stops when the input ends or the shell shuts down or reboots.
        """
        if self.shell is None:
            raise RuntimeError("the kernel has not been booted")
        scancodes = chain.from_iterable(_line_scancodes(line) for line in lines)
        executed: list[str] = []
        while not self.shell.halted:
            try:
                command = self.keyboard.read_line(scancodes)
            except EOFError:
                break
            self.shell.handle_command(command)
            executed.append(command)
        return executed


def _screen_text(terminal: Terminal) -> str:
    rows = [terminal.row_text(y).rstrip() for y in range(VGA_HEIGHT)]
    while rows and not rows[-1]:
        rows.pop()
    return "\n".join(rows)


def main(argv: list[str] | None = None) -> int:
    """Boot the kernel, run commands read from standard input, print the screen."""
    parser = argparse.ArgumentParser(
        prog="minikern", description="Run console commands on a simulated kernel."
    )
    parser.add_argument("--mem-lower", type=int, default=DEFAULT_MEM_LOWER,
                        help="lower memory in KiB")
    parser.add_argument("--mem-upper", type=int, default=DEFAULT_MEM_UPPER,
                        help="upper memory in KiB")
    args = parser.parse_args(argv)

    kernel = Kernel(MultibootInfo(mem_lower=args.mem_lower, mem_upper=args.mem_upper))
    try:
        kernel.boot()
        kernel.run(line.rstrip("\n") for line in sys.stdin)
    except (ValueError, MemoryError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(_screen_text(kernel.terminal))
    return 0


if __name__ == "__main__":
    sys.exit(main())