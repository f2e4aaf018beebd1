"""Two-level i386 page tables with tables allocated from the kernel heap."""

from __future__ import annotations

from dataclasses import dataclass, field

from minikern.heap import HEAP_MIN_SIZE, KernelHeap

PAGE_DIRECTORY_SIZE = 1024
PAGE_TABLE_SIZE = 1024
PAGE_SIZE = 4096
PAGE_TABLE_BYTES = 4 * PAGE_TABLE_SIZE
PAGE_DIRECTORY_BYTES = 4 * PAGE_DIRECTORY_SIZE * 2 + 4
TABLE_FLAGS = 0x07

_U32 = 0xFFFFFFFF

_ENTRY_FIELDS = (
    ("present", 0, 1),
    ("rw", 1, 1),
    ("user", 2, 1),
    ("accessed", 3, 1),
    ("dirty", 4, 1),
    ("unused", 5, 7),
    ("frame", 12, 20),
)


def _check_address(address: int) -> None:
    if not 0 <= address <= _U32:
        raise ValueError(f"address {address:#x} is not a 32-bit address")


@dataclass
class PageTableEntry:
    """One page-table entry, field by field."""

    present: int = 0
    rw: int = 0
    user: int = 0
    accessed: int = 0
    dirty: int = 0
    unused: int = 0
    frame: int = 0

    def __post_init__(self) -> None:
        for name, _, bits in _ENTRY_FIELDS:
            value = getattr(self, name)
            if not 0 <= value < (1 << bits):
                raise ValueError(f"{name}={value} does not fit in {bits} bits")

    def to_int(self) -> int:
        """The 32-bit form the processor reads."""
        result = 0
        for name, shift, bits in _ENTRY_FIELDS:
            result |= (getattr(self, name) & ((1 << bits) - 1)) << shift
        return result


@dataclass
class PageTable:
    """1024 entries, each mapping one 4 KiB page."""

    address: int
    pages: list[PageTableEntry] = field(
        default_factory=lambda: [PageTableEntry() for _ in range(PAGE_TABLE_SIZE)]
    )


class PageDirectory:
    """A page directory whose tables are created on first use."""

    def __init__(self, heap: KernelHeap | None = None) -> None:
        self.heap = heap if heap is not None else KernelHeap(HEAP_MIN_SIZE)
        self.address = self.heap.malloc(PAGE_DIRECTORY_BYTES)
        self.tables: list[PageTable | None] = [None] * PAGE_DIRECTORY_SIZE
        self.tables_physical = [0] * PAGE_DIRECTORY_SIZE
        # The physical entries follow the table pointers in the directory.
        self.physical_addr = self.address + 4 * PAGE_DIRECTORY_SIZE

    def map_page(
        self,
        virtual_addr: int,
        physical_addr: int,
        is_user: bool,
        is_writable: bool,
    ) -> None:
        """Map the page holding ``virtual_addr`` to the frame of ``physical_addr``."""
        _check_address(virtual_addr)
        _check_address(physical_addr)
        directory_index = virtual_addr >> 22
        table_index = (virtual_addr >> 12) & 0x3FF

        table = self.tables[directory_index]
        if table is None:
            table = PageTable(address=self.heap.malloc(PAGE_TABLE_BYTES))
            self.tables[directory_index] = table
            self.tables_physical[directory_index] = (table.address | TABLE_FLAGS) & _U32

        entry = table.pages[table_index]
        entry.frame = physical_addr >> 12
        entry.present = 1
        entry.rw = 1 if is_writable else 0
        entry.user = 1 if is_user else 0

    def lookup(self, virtual_addr: int) -> int | None:
        """The physical address ``virtual_addr`` maps to, or None if unmapped."""
        _check_address(virtual_addr)
        table = self.tables[virtual_addr >> 22]
        if table is None:
            return None
        entry = table.pages[(virtual_addr >> 12) & 0x3FF]
        if not entry.present:
            return None
        return (entry.frame << 12) | (virtual_addr & (PAGE_SIZE - 1))