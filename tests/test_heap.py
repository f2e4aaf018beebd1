import pytest

from minikern.heap import (
    FOOTER_SIZE,
    HEADER_SIZE,
    HEAP_START_ADDRESS,
    HeapCorruptionError,
    KernelHeap,
    MultibootInfo,
    calculate_heap_size,
)

SIZE = 4096


@pytest.fixture
def heap():
    return KernelHeap(SIZE)


def test_calculate_heap_size_small():
    assert calculate_heap_size(MultibootInfo(mem_lower=0, mem_upper=100)) == 76800


def test_calculate_heap_size_is_at_most_three_quarters():
    info = MultibootInfo(mem_lower=640, mem_upper=130048)
    total = (640 + 130048) * 1024
    assert calculate_heap_size(info) <= total * 3 // 4
    assert calculate_heap_size(info) > total * 3 // 4 - 100


def test_initial_free_list(heap):
    assert list(heap.free_blocks()) == [
        (HEAP_START_ADDRESS, SIZE - HEADER_SIZE - FOOTER_SIZE)
    ]


def test_malloc_zero_returns_none(heap):
    assert heap.malloc(0) is None
    assert heap.heap_used == 0


def test_malloc_too_large_raises(heap):
    with pytest.raises(MemoryError):
        heap.malloc(SIZE)


def test_exact_fit_consumes_block():
    small = KernelHeap(HEADER_SIZE + FOOTER_SIZE + 32)
    assert small.malloc(32) == small.start + HEADER_SIZE
    assert list(small.free_blocks()) == []
    with pytest.raises(MemoryError):
        small.malloc(1)


def test_write_read_round_trip(heap):
    ptr = heap.malloc(8)
    heap.write(ptr, b"abcdefgh")
    assert heap.read(ptr, 8) == b"abcdefgh"


def test_free_pushes_block_and_reuses_it(heap):
    ptr = heap.malloc(16)
    heap.malloc(32)
    heap.free(ptr)
    assert next(iter(heap.free_blocks())) == (ptr - HEADER_SIZE, 16)
    assert heap.malloc(16) == ptr


def test_free_accounting(heap):
    ptr = heap.malloc(64)
    heap.free(ptr)
    assert heap.heap_size == SIZE - 64
    assert heap.heap_used == 64


def test_free_none_is_ignored(heap):
    heap.free(None)
    assert heap.heap_size == SIZE


def test_calloc_zeroes_reused_memory(heap):
    ptr = heap.malloc(12)
    heap.malloc(4)
    heap.write(ptr, b"\xff" * 12)
    heap.free(ptr)
    again = heap.calloc(3, 4)
    assert again == ptr
    assert heap.read(again, 12) == bytes(12)


def test_realloc_copies_contents(heap):
    ptr = heap.malloc(8)
    heap.write(ptr, b"abcdefgh")
    moved = heap.realloc(ptr, 32)
    assert moved != ptr
    assert heap.read(moved, 8) == b"abcdefgh"
    assert next(iter(heap.free_blocks()))[0] == ptr - HEADER_SIZE


def test_realloc_shrinks_copy(heap):
    ptr = heap.malloc(8)
    heap.write(ptr, b"abcdefgh")
    moved = heap.realloc(ptr, 4)
    assert heap.read(moved, 4) == b"abcd"


def test_realloc_none_allocates(heap):
    assert heap.realloc(None, 8) == HEAP_START_ADDRESS + HEADER_SIZE


def test_realloc_zero_frees(heap):
    ptr = heap.malloc(8)
    assert heap.realloc(ptr, 0) is None
    assert next(iter(heap.free_blocks())) == (ptr - HEADER_SIZE, 8)


def test_free_detects_bad_header(heap):
    ptr = heap.malloc(16)
    heap.write(ptr - HEADER_SIZE + 4, bytes(4))
    with pytest.raises(HeapCorruptionError):
        heap.free(ptr)


def test_malloc_detects_bad_free_block(heap):
    address, _ = next(iter(heap.free_blocks()))
    heap.write(address + 4, bytes(4))
    with pytest.raises(HeapCorruptionError):
        heap.malloc(8)


def test_double_free_loops_free_list(heap):
    ptr = heap.malloc(16)
    heap.free(ptr)
    heap.free(ptr)
    with pytest.raises(HeapCorruptionError):
        list(heap.free_blocks())


def test_too_small_heap_rejected():
    with pytest.raises(ValueError):
        KernelHeap(HEADER_SIZE + FOOTER_SIZE - 1)


def test_free_outside_heap_rejected(heap):
    with pytest.raises(ValueError):
        heap.free(HEAP_START_ADDRESS + SIZE * 2)