import pytest

from minikern.descriptors import (
    COARSE_LIMIT,
    GDT_CODE_PL0,
    GDT_CODE_PL3,
    GDT_CODE_SEL_1,
    GDT_DATA_PL0,
    GDT_DATA_PL3,
    IDT_DESC_BIT32,
    IDT_DESC_PRESENT,
    MAX_DESCRIPTORS,
    MAX_INTERRUPTS,
    IdtEntry,
    InterruptDescriptorTable,
    create_descriptor,
    gdt_entries,
)


def test_flat_kernel_code_descriptor():
    assert create_descriptor(0, COARSE_LIMIT, GDT_CODE_PL0) == 0x00CF9A000000FFFF


def test_null_descriptor():
    assert create_descriptor(0, 0, 0) == 0


def test_base_fields_are_spread():
    base = 0x12345678
    d = create_descriptor(base, 0, 0)
    assert (d >> 16) & 0xFFFF == base & 0xFFFF
    assert (d >> 32) & 0xFF == (base >> 16) & 0xFF
    assert d >> 56 == base >> 24


def test_gdt_entries_layout():
    entries = gdt_entries()
    assert len(entries) == MAX_DESCRIPTORS
    assert entries[0] == 0
    flags = [GDT_CODE_PL0, GDT_DATA_PL0, GDT_CODE_PL3, GDT_DATA_PL3]
    for entry, flag in zip(entries[1:], flags):
        assert entry & 0xFFFF == COARSE_LIMIT & 0xFFFF
        assert (entry >> 40) & 0xFF == flag & 0xFF
        assert (entry >> 48) & 0xF == (COARSE_LIMIT >> 16) & 0xF


def test_idt_entry_pack():
    entry = IdtEntry(offset_low=0x5678, sel=8, reserved=0, flags=0x8E, offset_high=0x1234)
    assert entry.pack() == b"\x78\x56\x08\x00\x00\x8e\x34\x12"


def test_set_entry_splits_address():
    idt = InterruptDescriptorTable()
    idt.set_entry(3, 0x18E, GDT_CODE_SEL_1, 0x12345678)
    entry = idt.entries[3]
    assert entry.offset_low == 0x5678
    assert entry.offset_high == 0x1234
    assert entry.sel == GDT_CODE_SEL_1
    assert entry.flags == 0x8E


def test_set_isrs_installs_48_gates():
    idt = InterruptDescriptorTable()
    addresses = [0x100000 + 16 * i for i in range(48)]
    idt.set_isrs(GDT_CODE_SEL_1, addresses)
    assert [e.offset for e in idt.entries[:48]] == addresses
    assert all(e.flags == IDT_DESC_PRESENT | IDT_DESC_BIT32 for e in idt.entries[:48])
    assert idt.entries[48] == IdtEntry()


def test_set_isrs_wrong_count():
    idt = InterruptDescriptorTable()
    with pytest.raises(ValueError):
        idt.set_isrs(GDT_CODE_SEL_1, [0] * 47)


def test_set_entry_out_of_range():
    idt = InterruptDescriptorTable()
    with pytest.raises(IndexError):
        idt.set_entry(MAX_INTERRUPTS, 0, 0, 0)


def test_idt_limit_matches_table_size():
    idt = InterruptDescriptorTable()
    assert idt.limit + 1 == len(b"".join(e.pack() for e in idt.entries))