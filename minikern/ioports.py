"""A simulated x86 I/O port bus.

Writes are recorded in order; reads are served from values queued per
port.  A read from a port with nothing queued returns all ones, as an
undriven bus does.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Iterable

_PORT_MAX = 0xFFFF


@dataclass(frozen=True)
class PortWrite:
    """One recorded write: port, value and width in bytes."""

    port: int
    value: int
    width: int


def _check_port(port: int) -> None:
    if not 0 <= port <= _PORT_MAX:
        raise ValueError(f"port {port:#x} is outside 0..0xffff")


def _check_value(value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"value {value:#x} does not fit in {bits} bits")


class PortBus:
    """Port input/output and the interrupt-enable flag."""

    def __init__(self) -> None:
        self.writes: list[PortWrite] = []
        self.interrupts_enabled = False
        self._inputs: defaultdict[int, deque[int]] = defaultdict(deque)

    def _read(self, port: int, bits: int) -> int:
        _check_port(port)
        mask = (1 << bits) - 1
        queue = self._inputs[port]
        return queue.popleft() & mask if queue else mask

    def inb(self, port: int) -> int:
        """Read a byte from ``port``."""
        return self._read(port, 8)

    def inw(self, port: int) -> int:
        """Read a 16-bit word from ``port``."""
        return self._read(port, 16)

    def outb(self, port: int, value: int) -> None:
        """Write a byte to ``port``."""
        _check_port(port)
        _check_value(value, 8)
        self.writes.append(PortWrite(port, value, 1))

    def outw(self, port: int, value: int) -> None:
        """Write a 16-bit word to ``port``."""
        _check_port(port)
        _check_value(value, 16)
        self.writes.append(PortWrite(port, value, 2))

    def feed(self, port: int, values: Iterable[int]) -> None:
        """Queue values to be returned by later reads of ``port``."""
        _check_port(port)
        values = list(values)
        for value in values:
            _check_value(value, 16)
        self._inputs[port].extend(values)

    def irq_disable(self) -> None:
        """Clear the interrupt flag."""
        self.interrupts_enabled = False

    def irq_enable(self) -> None:
        """Set the interrupt flag."""
        self.interrupts_enabled = True