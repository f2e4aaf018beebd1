"""Kernel panics and assertion failures, raised as exceptions."""

from __future__ import annotations

from typing import NoReturn


class KernelPanic(RuntimeError):
    """An unrecoverable kernel error, reported with its source location."""

    def __init__(self, message: str, file: str, line: int) -> None:
        self.message = message
        self.file = file
        self.line = line
        super().__init__(f"{message} at {file}:{line}")

    @property
    def report(self) -> str:
        """The text the kernel prints on the console."""
        return f"\nPANIC({self.message}) at {self.file}:{self.line}\n"


class AssertionFailure(KernelPanic):
    """A kernel assertion that did not hold."""

    def __init__(self, desc: str, file: str, line: int) -> None:
        super().__init__(desc, file, line)

    @property
    def desc(self) -> str:
        return self.message

    @property
    def report(self) -> str:
        return f"\nASSERTION-FAILED({self.desc}) at {self.file}:{self.line}\n"


def panic(message: str, file: str, line: int) -> NoReturn:
    """Stop with a kernel panic."""
    raise KernelPanic(message, file, line)


def panic_assert(file: str, line: int, desc: str) -> NoReturn:
    """Stop with a failed assertion described by ``desc``."""
    raise AssertionFailure(desc, file, line)


def kassert(condition: object, file: str, line: int, desc: str) -> None:
    """Raise :class:`AssertionFailure` unless ``condition`` is true."""
    if not condition:
        panic_assert(file, line, desc)