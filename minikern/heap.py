"""A first-fit kernel heap laid out in a simulated block of memory.

Every block carries a 12-byte header (size, magic, next) in front of its
payload and the heap ends with an 8-byte footer (size, magic), all stored
little-endian as on i386.  Addresses are plain integers; ``None`` stands
for the null pointer.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

HEAP_MAGIC = 0x12345678
HEAP_START_ADDRESS = 0x1000000
HEAP_MIN_SIZE = 0x400000
HEAP_SIZE_PERCENTAGE = 75

MULTIBOOT_HEADER_MAGIC = 0x1BADB002
MULTIBOOT_BOOTLOADER_MAGIC = 0x2BADB002

_HEADER = struct.Struct("<III")
_FOOTER = struct.Struct("<II")
HEADER_SIZE = _HEADER.size
FOOTER_SIZE = _FOOTER.size

_U32 = 0xFFFFFFFF


class HeapCorruptionError(RuntimeError):
    """A heap header or footer no longer holds the heap's magic number."""


@dataclass
class MultibootInfo:
    """The memory-related part of the boot loader's information block."""

    flags: int = 0
    mem_lower: int = 0
    mem_upper: int = 0
    boot_device: int = 0
    cmdline: int = 0
    mods_count: int = 0
    mods_addr: int = 0
    mmap_length: int = 0
    mmap_addr: int = 0
    drives_length: int = 0
    drives_addr: int = 0
    config_table: int = 0
    boot_loader_name: int = 0
    apm_table: int = 0
    vbe_control_info: int = 0
    vbe_mode_info: int = 0
    vbe_mode: int = 0


def calculate_heap_size(info: MultibootInfo) -> int:
    """Heap size in bytes: 75% of lower plus upper memory (given in KiB)."""
    lower = (info.mem_lower << 10) & _U32
    upper = (info.mem_upper << 10) & _U32
    total = (lower + upper) & _U32
    return (total // 100) * HEAP_SIZE_PERCENTAGE


class KernelHeap:
    """A heap with a singly linked free list and no coalescing.

    ``heap_used`` grows with every allocation and is never reduced;
    freeing a block subtracts its size from ``heap_size``, which is how
    the kernel's accounting behaves.
    """

    def __init__(self, size: int, start: int = HEAP_START_ADDRESS) -> None:
        if size < HEADER_SIZE + FOOTER_SIZE:
            raise ValueError(
                f"heap of {size} bytes cannot hold a header and a footer"
            )
        if start <= 0 or start + size > _U32 + 1:
            raise ValueError(f"heap start {start:#x} is not a usable address")
        self.start = start
        self.heap_size = size
        self.heap_used = 0
        self._memory = bytearray(size)
        self._free_list = start

        block = size - HEADER_SIZE - FOOTER_SIZE
        self._put_header(start, block, HEAP_MAGIC, 0)
        self._put_footer(start + size - FOOTER_SIZE, block, HEAP_MAGIC)

    # raw memory -----------------------------------------------------------

    def _offset(self, address: int, length: int) -> int:
        offset = address - self.start
        if offset < 0 or length < 0 or offset + length > len(self._memory):
            raise ValueError(
                f"{length} bytes at {address:#x} lie outside the heap"
            )
        return offset

    def _header(self, address: int) -> tuple[int, int, int]:
        offset = self._offset(address, HEADER_SIZE)
        return _HEADER.unpack_from(self._memory, offset)

    def _footer(self, address: int) -> tuple[int, int]:
        offset = self._offset(address, FOOTER_SIZE)
        return _FOOTER.unpack_from(self._memory, offset)

    def _put_header(self, address: int, size: int, magic: int, nxt: int) -> None:
        _HEADER.pack_into(self._memory, self._offset(address, HEADER_SIZE),
                          size, magic, nxt)

    def _put_footer(self, address: int, size: int, magic: int) -> None:
        _FOOTER.pack_into(self._memory, self._offset(address, FOOTER_SIZE),
                          size, magic)

    def _list_header(self, address: int) -> tuple[int, int, int]:
        try:
            return self._header(address)
        except ValueError as exc:
            raise HeapCorruptionError(f"free list points outside the heap: {exc}") from None

    def _walk(self) -> Iterator[tuple[int, int, int, int]]:
        seen: set[int] = set()
        current = self._free_list
        while current:
            if current in seen:
                raise HeapCorruptionError("free list loops back on itself")
            seen.add(current)
            size, magic, nxt = self._list_header(current)
            yield current, size, magic, nxt
            current = nxt

    def _unlink(self, block: int, nxt: int) -> None:
        if block == self._free_list:
            self._free_list = nxt
            return
        for address, size, magic, following in self._walk():
            if following == block:
                self._put_header(address, size, magic, nxt)
                return
        raise HeapCorruptionError(f"block {block:#x} is not on the free list")

    # allocation -----------------------------------------------------------

    def malloc(self, size: int) -> int | None:
        """Allocate ``size`` bytes; ``None`` for a zero size.

        Raises MemoryError when no free block is large enough.
        """
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        if size == 0:
            return None
        for current, block_size, magic, nxt in self._walk():
            if magic != HEAP_MAGIC:
                raise HeapCorruptionError("Heap corruption detected!")
            if block_size < size:
                continue
            if block_size > size + HEADER_SIZE + FOOTER_SIZE:
                new_block = current + HEADER_SIZE + size
                new_size = block_size - size - HEADER_SIZE - FOOTER_SIZE
                self._put_header(new_block, new_size, HEAP_MAGIC, nxt)
                self._put_footer(new_block + new_size + HEADER_SIZE,
                                 new_size, HEAP_MAGIC)
                self._put_header(current, size, magic, new_block)
                nxt = new_block
            self._unlink(current, nxt)
            self.heap_used += size
            return current + HEADER_SIZE
        raise MemoryError(f"no free block of {size} bytes")

    def free(self, ptr: int | None) -> None:
        """Return a block to the front of the free list."""
        if ptr is None:
            return
        header = ptr - HEADER_SIZE
        size, magic, _ = self._header(header)
        try:
            _, footer_magic = self._footer(ptr + size)
        except ValueError:
            raise HeapCorruptionError("Heap corruption detected!") from None
        if magic != HEAP_MAGIC or footer_magic != HEAP_MAGIC:
            raise HeapCorruptionError("Heap corruption detected!")
        self.heap_size -= size
        self._put_header(header, size, magic, self._free_list)
        self._free_list = header

    def calloc(self, num: int, size: int) -> int | None:
        """Allocate ``num * size`` bytes and fill them with zeros."""
        total = num * size
        ptr = self.malloc(total)
        if ptr is not None:
            self.write(ptr, bytes(total))
        return ptr

    def realloc(self, ptr: int | None, new_size: int) -> int | None:
        """Move a block to a new allocation of ``new_size`` bytes."""
        if new_size == 0:
            self.free(ptr)
            return None
        if ptr is None:
            return self.malloc(new_size)
        old_size = self._header(ptr - HEADER_SIZE)[0]
        new_ptr = self.malloc(new_size)
        self.write(new_ptr, self.read(ptr, min(old_size, new_size)))
        self.free(ptr)
        return new_ptr

    def read(self, ptr: int, size: int) -> bytes:
        """The ``size`` bytes stored at ``ptr``."""
        offset = self._offset(ptr, size)
        return bytes(self._memory[offset:offset + size])

    def write(self, ptr: int, data: bytes) -> None:
        """Store ``data`` at ``ptr``."""
        offset = self._offset(ptr, len(data))
        self._memory[offset:offset + len(data)] = data

    def free_blocks(self) -> Iterator[tuple[int, int]]:
        """Yield ``(header address, payload size)`` along the free list."""
        for address, size, _, _ in self._walk():
            yield address, size