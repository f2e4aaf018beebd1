"""The 8259 interrupt controllers and hardware interrupt dispatch."""

from __future__ import annotations

import inspect
import os
from dataclasses import dataclass, replace
from typing import Any, Callable

from minikern.ioports import PortBus
from minikern.panic import panic

PIC1 = 0x20
PIC2 = 0xA0
PIC1_COMMAND = PIC1
PIC1_DATA = PIC1 + 1
PIC2_COMMAND = PIC2
PIC2_DATA = PIC2 + 1

ICW1_ICW4_EXPECT = 0x01
ICW1_INIT = 0x10
ICW4_8086 = 0x01

PIC1_IRQ_OFFSET = 0x20
PIC2_IRQ_OFFSET = 0x28
PIC_EOI = 0x20
PIC_NUM_INTERRUPTS = 16

Handler = Callable[["Registers"], Any]


@dataclass
class Registers:
    """Processor state saved on entry to an interrupt handler."""

    gs: int = 0
    fs: int = 0
    es: int = 0
    ds: int = 0
    edi: int = 0
    esi: int = 0
    ebp: int = 0
    esp: int = 0
    ebx: int = 0
    edx: int = 0
    ecx: int = 0
    eax: int = 0
    int_no: int = 0
    err_code: int = 0
    eip: int = 0
    cs: int = 0
    eflags: int = 0
    useresp: int = 0
    ss: int = 0


def _check_irq(index: int) -> None:
    if not 0 <= index < PIC_NUM_INTERRUPTS:
        raise IndexError(f"IRQ {index} is outside 0..{PIC_NUM_INTERRUPTS - 1}")


class InterruptController:
    """The master/slave PIC pair and the table of IRQ handlers."""

    def __init__(self, bus: PortBus | None = None) -> None:
        self.bus = bus if bus is not None else PortBus()
        self.handlers: list[Handler | None] = [None] * PIC_NUM_INTERRUPTS

    def init(self) -> None:
        """Remap IRQs 0-15 to vectors 0x20-0x2F."""
        icw = ICW1_INIT | ICW1_ICW4_EXPECT
        self.bus.outb(PIC1_COMMAND, icw)
        self.bus.outb(PIC2_COMMAND, icw)
        self.bus.outb(PIC1_DATA, PIC1_IRQ_OFFSET)
        self.bus.outb(PIC2_DATA, PIC2_IRQ_OFFSET)
        self.bus.outb(PIC1_DATA, 4)
        self.bus.outb(PIC2_DATA, 2)
        self.bus.outb(PIC1_DATA, ICW4_8086)
        self.bus.outb(PIC2_DATA, ICW4_8086)

    def eoi(self, int_no: int) -> None:
        """Acknowledge interrupt vector ``int_no``."""
        if int_no >= 40:
            self.bus.outb(PIC2, PIC_EOI)
        self.bus.outb(PIC1, PIC_EOI)

    def install_irq_handler(self, index: int, handler: Handler) -> None:
        """Route IRQ ``index`` to ``handler``."""
        _check_irq(index)
        self.handlers[index] = handler

    def uninstall_irq_handler(self, index: int) -> None:
        """Remove the handler of IRQ ``index``."""
        _check_irq(index)
        self.handlers[index] = None

    def irq_server(self, registers: Registers) -> None:
        """Dispatch a hardware interrupt and acknowledge it."""
        index = registers.int_no - PIC1_IRQ_OFFSET
        _check_irq(index)
        handler = self.handlers[index]
        if handler is not None:
            handler(replace(registers))
        self.eoi(registers.int_no)

    def isr_handler(self, registers: Registers) -> None:
        """Processor exceptions are not recovered from."""
        frame = inspect.currentframe()
        line = frame.f_lineno if frame is not None else 0
        panic("exception received, don't recover yet",
              os.path.basename(__file__), line)