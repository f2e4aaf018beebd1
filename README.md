# minikern

`minikern` is a small simulated i386 hobby kernel written in plain Python.
It models these parts in memory, so no hardware is needed:

- the VGA text terminal
- the scan-code keyboard
- the 8259 interrupt controllers
- the programmable interval timer
- a first-fit kernel heap
- two-level page tables
- the GDT and IDT descriptors
- an I/O port bus

It also provides the kernel's freestanding C library routines as Python
functions:

- character classes: `minikern.ctype`
- number formatting: `minikern.numfmt`
- text-to-number parsing: `minikern.strconv`
- string and byte-buffer helpers: `minikern.cstring`
- a `printf` work-alike: `minikern.printf`

## Installing

```
pip install .
```

To run the test suite, install the `test` extra:

```
pip install .[test]
pytest
```

## Running the kernel

The `minikern` command boots the simulated kernel and reads shell commands
from standard input, one per line. Each line is typed on the simulated
keyboard and run by the shell. When the input ends, the command prints the
final contents of the 80x25 screen. It also stops early after `exit` or
`reboot`.

```
printf 'help\nmeminfo\n' | minikern
```

The shell understands these commands:

- `help`: list the available commands
- `meminfo`: show heap usage in bytes, KB and MB
- `clean`: clear the terminal screen
- `reboot`: reset the machine through the keyboard controller
- `exit`: power the machine off through ACPI

Any other input prints `Unknown command.`

The memory reported to the kernel can be set with `--mem-lower` and
`--mem-upper`, both in KiB. They default to 640 and 7168. The heap size is
75% of their sum.

If a line holds a character that cannot be typed on the keymap, the command
exits with status 1. The same happens when the heap cannot be set up.

## Using the pieces

```python
from minikern.printf import cformat
from minikern.numfmt import itoa, ftoa
from minikern.strconv import strtoul
from minikern.terminal import Terminal

cformat("%d items, %08llx", 42, 0xBEEF)   # "42 items, 0000beef"
itoa(-255, 10)                            # "-255"
ftoa(3.25, 2)                             # "3.25"
strtoul("0x1f", 0)                        # (31, 4): value and stop index

terminal = Terminal()
terminal.write("hello\n")
terminal.row_text(0)                      # "hello" padded with spaces to 80
```

### `minikern.printf`

- `cformat(fmt, *args)` returns the formatted text.
- `printf(write, fmt, *args)` passes the text to `write` and returns the
  number of UTF-8 bytes.
- `puts(write, text)` writes `text` followed by a newline.
- `%n` takes a callable, which is given the count so far.

### `minikern.numfmt`

- Integers: `itoa`, `utoa`, `ltoa`, `lltoa`, `lutoa`, `llutoa`,
  `int_to_str`. These wrap their input to the width of the matching C type.
- Floating point: `ftoa`, `lftoa`, `dtoa`, `etoa`, `gtoa`. These truncate
  to the precision rather than round.

### `minikern.strconv`

`strtoul`, `strtoull`, `strtol`, `strtoll`, `strtod`, `strtof` and `strtold`
all return a `(value, end)` pair.

### `minikern.cstring`

The string functions take `str` values and treat `"\0"` as the end of the
string. The memory functions work on `bytearray` in place.

### `minikern.heap`

`KernelHeap(size)` is a first-fit allocator with `malloc`, `free`, `calloc`,
`realloc`, `read`, `write` and `free_blocks`.

- `malloc(0)` returns `None`.
- It raises `MemoryError` when no free block is large enough.
- It raises `HeapCorruptionError` when a block's magic number is damaged.

`calculate_heap_size` works out a heap size from a `MultibootInfo` record.

### Other modules

- `minikern.rand`: the `LinearCongruential` generator.
- `minikern.ioports`: `PortBus`, which records writes and serves queued
  reads.
- `minikern.descriptors`: `create_descriptor`, `gdt_entries` and
  `InterruptDescriptorTable`.
- `minikern.panic`: `KernelPanic`, `AssertionFailure` and `kassert`.
- `minikern.terminal`: `Terminal` and `VgaColor`.
- `minikern.keyboard`: `KeyboardReader` and `get_keymap`.
- `minikern.paging`: `PageDirectory`, which maps pages and looks them up.
- `minikern.timer`: `Timer`.
- `minikern.interrupts`: `InterruptController` and `Registers`.
- `minikern.shell`: `Shell` and `trim_spaces`.
- `minikern.kernel`: `Kernel`, with `boot` and `run`.

## What it does not do

Everything is simulated. Nothing here drives real hardware or boots on a
machine.

The `minikern` command does not show a live screen or read keys as they are
pressed. It reads all of its input first and then prints the screen once.
`reboot` and `exit` only record the port write and stop the command loop.

Exceptions raised by the processor end in a `KernelPanic` rather than being
handled.