"""The kernel's linear congruential pseudo-random generator."""

from __future__ import annotations

RAND_MAX = 32767

_A = 1103515245
_C = 12345
_M = 1 << 31
_U32 = 0xFFFFFFFF


class LinearCongruential:
    """X(n+1) = (a * X(n) + c) mod 2**31, computed in 32-bit arithmetic."""

    def __init__(self, seed: int = 1) -> None:
        self._seed = seed & _U32

    def srand(self, seed: int) -> None:
        """Set the generator's state."""
        self._seed = seed & _U32

    def rand(self) -> int:
        """The next value in the range 0..32767."""
        self._seed = ((_A * self._seed + _C) & _U32) % _M
        return (self._seed // 65536) % (RAND_MAX + 1)