"""The kernel's command shell."""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable

from minikern.heap import KernelHeap
from minikern.ioports import PortBus
from minikern.printf import printf
from minikern.terminal import Terminal
from minikern.timer import Timer

ACPI_SHUTDOWN_PORT = 0x604
ACPI_SHUTDOWN_VALUE = 0x2000
KEYBOARD_CONTROLLER_PORT = 0x64
KEYBOARD_RESET_VALUE = 0xFE
POWER_DELAY_MS = 1000

HELP_TEXT = (
    "Available commands:\n"
    "  help     - Show this help message\n"
    "  meminfo  - Displaying RAM information\n"
    "  clean    - Clear the terminal screen\n"
    "  reboot   - Rebooting PC\n"
    "  exit     - Exit the system\n"
)

_WHITESPACE = re.compile(r"[ \t\n\v\f\r]+")


def trim_spaces(text: str) -> str:
    """Drop leading and trailing whitespace and collapse inner runs to one space."""
    return " ".join(part for part in _WHITESPACE.split(text) if part)


class PowerState(Enum):
    """What the shell has asked the machine to do."""

    RUNNING = "running"
    SHUTDOWN = "shutdown"
    REBOOT = "reboot"


class Shell:
    """Interprets the commands typed at the console prompt."""

    def __init__(
        self,
        terminal: Terminal,
        heap: KernelHeap,
        timer: Timer,
        bus: PortBus | None = None,
    ) -> None:
        self.terminal = terminal
        self.heap = heap
        self.timer = timer
        self.bus = bus if bus is not None else timer.bus
        self.power_state = PowerState.RUNNING
        self._commands: dict[str, Callable[[], None]] = {
            "help": self._help,
            "clean": self.terminal.clear,
            "reboot": self.reboot,
            "exit": self.shutdown,
            "meminfo": self.meminfo,
        }

    @property
    def halted(self) -> bool:
        """True once a shutdown or reboot has been requested."""
        return self.power_state is not PowerState.RUNNING

    def _write(self, text: str) -> None:
        self.terminal.write(text)

    def _help(self) -> None:
        self._write(HELP_TEXT)

    def handle_command(self, command: str | None) -> None:
        """Run one command line."""
        if not command:
            self._write("No command entered.\n")
            return
        action = self._commands.get(trim_spaces(command))
        if action is None:
            self._write("Unknown command.\n")
        else:
            action()

    def meminfo(self) -> None:
        """Show heap usage in bytes, kibibytes and mebibytes."""
        used = self.heap.heap_used
        size = self.heap.heap_size
        write = self._write
        printf(write, "\nRAM:\n")
        printf(write, "Used %ld B / %ld B\n", used, size)
        printf(write, "Used %ld KB / %ld KB\n", used // 1024, size // 1024)
        printf(write, "Used %ld MB / %ld MB\n", used // 1024 // 1024, size // 1024 // 1024)
        printf(write, "\n")

    def shutdown(self) -> None:
        """Power the machine off through ACPI."""
        self._write("Shutting down...\n")
        self.timer.sleep(POWER_DELAY_MS)
        self.bus.outw(ACPI_SHUTDOWN_PORT, ACPI_SHUTDOWN_VALUE)
        self.power_state = PowerState.SHUTDOWN

    def reboot(self) -> None:
        """Reset the machine through the keyboard controller."""
        self._write("Rebooting...\n")
        self.timer.sleep(POWER_DELAY_MS)
        self.bus.outb(KEYBOARD_CONTROLLER_PORT, KEYBOARD_RESET_VALUE)
        self.power_state = PowerState.REBOOT