"""The programmable interval timer and tick-based sleeping."""

from __future__ import annotations

from typing import Any, Callable

from minikern.ioports import PortBus

PIT_FREQ = 1193180
PIT_WRITE_LSB_MSB = 0x30
PIT_WRITE_COUNTER_0 = 0x00
PIT_BINARY_MODE = 0x00
PIT_SQUARE_WAVE_MODE = 0x06

PIT_REG_COUNTER_0 = 0x40
PIT_REG_COMMAND = 0x43
TIMER_FREQUENCY = 100
TIMER_IRQ = 0

_U32 = 0xFFFFFFFF


class Timer:
    """Counts timer interrupts and waits on them.

    Waiting repeatedly calls ``idle``; by default that delivers one timer
    interrupt, so the simulated clock advances while a sleep is in progress.
    """

    def __init__(
        self,
        bus: PortBus | None = None,
        interrupts: Any = None,
        idle: Callable[[], Any] | None = None,
    ) -> None:
        self.bus = bus if bus is not None else PortBus()
        self.ticks = 0
        self._idle = idle if idle is not None else (lambda: self.tick(None))
        self.set_phase(TIMER_FREQUENCY)
        if interrupts is not None:
            interrupts.install_irq_handler(TIMER_IRQ, self.tick)

    def set_phase(self, hz: int) -> None:
        """Program counter 0 to fire ``hz`` times a second."""
        if hz <= 0:
            raise ValueError(f"frequency must be positive, got {hz}")
        divisor = PIT_FREQ // hz
        command = (
            PIT_WRITE_LSB_MSB | PIT_WRITE_COUNTER_0
            | PIT_BINARY_MODE | PIT_SQUARE_WAVE_MODE
        )
        self.bus.outb(PIT_REG_COMMAND, command)
        self.bus.outb(PIT_REG_COUNTER_0, divisor & 0xFF)
        self.bus.outb(PIT_REG_COUNTER_0, (divisor >> 8) & 0xFF)

    def tick(self, registers: Any) -> None:
        """Timer interrupt handler."""
        self.ticks = (self.ticks + 1) & _U32

    def uptime(self) -> int:
        """Ticks since start-up."""
        return self.ticks

    def sleep_ticks(self, delay: int) -> None:
        """Wait until ``delay`` ticks have passed."""
        delay &= _U32
        start = self.ticks
        while (self.ticks - start) & _U32 < delay:
            self._idle()

    def sleep(self, milliseconds: int) -> None:
        """Wait roughly ``milliseconds``, rounded down to whole ticks."""
        needed = (milliseconds * TIMER_FREQUENCY) & _U32
        self.sleep_ticks(needed // 1000)

    def usleep(self, microseconds: int) -> None:
        """Wait roughly ``microseconds``, rounded down to whole ticks."""
        needed = (microseconds * TIMER_FREQUENCY) & _U32
        self.sleep_ticks(needed // 1000000)