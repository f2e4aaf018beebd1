"""Global and interrupt descriptor table entries for 32-bit protected mode."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Sequence


def SEG_DESCTYPE(x: int) -> int:
    return x << 0x04


def SEG_PRES(x: int) -> int:
    return x << 0x07


def SEG_SAVL(x: int) -> int:
    return x << 0x0C


def SEG_LONG(x: int) -> int:
    return x << 0x0D


def SEG_SIZE(x: int) -> int:
    return x << 0x0E


def SEG_GRAN(x: int) -> int:
    return x << 0x0F


def SEG_PRIV(x: int) -> int:
    return (x & 0x03) << 0x05


SEG_DATA_RDWR = 0x02
SEG_CODE_EXRD = 0x0A

_SEGMENT_BASE = (
    SEG_DESCTYPE(1) | SEG_PRES(1) | SEG_SAVL(0)
    | SEG_LONG(0) | SEG_SIZE(1) | SEG_GRAN(1)
)
GDT_CODE_PL0 = _SEGMENT_BASE | SEG_PRIV(0) | SEG_CODE_EXRD
GDT_DATA_PL0 = _SEGMENT_BASE | SEG_PRIV(0) | SEG_DATA_RDWR
GDT_CODE_PL3 = _SEGMENT_BASE | SEG_PRIV(3) | SEG_CODE_EXRD
GDT_DATA_PL3 = _SEGMENT_BASE | SEG_PRIV(3) | SEG_DATA_RDWR

MAX_DESCRIPTORS = 5
GDT_NULL_SEL = 0x0
GDT_CODE_SEL_1 = 0x8
GDT_LIMIT = 8 * MAX_DESCRIPTORS - 1
COARSE_LIMIT = 0x000FFFFF

MAX_INTERRUPTS = 256
IDT_DESC_BIT16 = 0x06
IDT_DESC_BIT32 = 0x0E
IDT_DESC_RING1 = 0x40
IDT_DESC_RING2 = 0x20
IDT_DESC_RING3 = 0x60
IDT_DESC_PRESENT = 0x80

EXCEPTION_VECTORS = 32
IRQ_VECTORS = 16

_U32 = 0xFFFFFFFF


def create_descriptor(base: int, limit: int, flag: int) -> int:
    """Encode a 64-bit segment descriptor."""
    base &= _U32
    limit &= _U32
    flag &= 0xFFFF
    descriptor = limit & 0x000F0000
    descriptor |= (flag << 8) & 0x00F0FF00
    descriptor |= (base >> 16) & 0x000000FF
    descriptor |= base & 0xFF000000
    descriptor <<= 32
    descriptor |= (base << 16) & _U32
    descriptor |= limit & 0x0000FFFF
    return descriptor


def gdt_entries() -> list[int]:
    """The five flat-model descriptors: null, kernel code/data, user code/data."""
    return [
        create_descriptor(0, 0, 0),
        create_descriptor(0, COARSE_LIMIT, GDT_CODE_PL0),
        create_descriptor(0, COARSE_LIMIT, GDT_DATA_PL0),
        create_descriptor(0, COARSE_LIMIT, GDT_CODE_PL3),
        create_descriptor(0, COARSE_LIMIT, GDT_DATA_PL3),
    ]


_IDT_ENTRY = struct.Struct("<HHBBH")


@dataclass
class IdtEntry:
    """One interrupt gate."""

    offset_low: int = 0
    sel: int = 0
    reserved: int = 0
    flags: int = 0
    offset_high: int = 0

    @property
    def offset(self) -> int:
        return (self.offset_high << 16) | self.offset_low

    def pack(self) -> bytes:
        """The 8-byte in-memory form of the gate."""
        return _IDT_ENTRY.pack(
            self.offset_low, self.sel, self.reserved, self.flags, self.offset_high
        )


@dataclass
class InterruptDescriptorTable:
    """The 256-entry interrupt descriptor table."""

    entries: list[IdtEntry] = field(
        default_factory=lambda: [IdtEntry() for _ in range(MAX_INTERRUPTS)]
    )

    @property
    def limit(self) -> int:
        return _IDT_ENTRY.size * MAX_INTERRUPTS - 1

    def set_entry(
        self, index: int, flags: int, selector: int, handler_address: int
    ) -> None:
        """Point gate ``index`` at ``handler_address``."""
        if not 0 <= index < MAX_INTERRUPTS:
            raise IndexError(f"interrupt {index} is outside 0..{MAX_INTERRUPTS - 1}")
        address = handler_address & _U32
        self.entries[index] = IdtEntry(
            offset_low=address & 0xFFFF,
            sel=selector & 0xFFFF,
            reserved=0,
            flags=flags & 0xFF,
            offset_high=(address >> 16) & 0xFFFF,
        )

    def set_isrs(self, code_selector: int, handler_addresses: Sequence[int]) -> None:
        """Install the 32 exception handlers followed by the 16 IRQ handlers."""
        expected = EXCEPTION_VECTORS + IRQ_VECTORS
        if len(handler_addresses) != expected:
            raise ValueError(
                f"expected {expected} handler addresses, got {len(handler_addresses)}"
            )
        flags = IDT_DESC_PRESENT | IDT_DESC_BIT32
        for index, address in enumerate(handler_addresses):
            self.set_entry(index, flags, code_selector, address)