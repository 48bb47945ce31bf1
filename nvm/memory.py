"""Flat byte-addressed memory with little-endian words."""

from __future__ import annotations

from dataclasses import dataclass, field

MEMORY_SIZE = 16 * 1024


@dataclass
class LinearMemory:
    """A fixed-size block of zero-initialised memory."""

    data: bytearray = field(default_factory=lambda: bytearray(MEMORY_SIZE))

    def _check(self, ptr: int, width: int) -> None:
        if ptr < 0 or ptr + width > len(self.data):
            raise IndexError(f"Memory access out of bounds: {ptr:#x}")

    def read_byte(self, ptr: int) -> int:
        """Return the byte at ``ptr``."""
        self._check(ptr, 1)
        return self.data[ptr]

    def read_word(self, ptr: int) -> int:
        """Return the little-endian 16-bit word at ``ptr``."""
        self._check(ptr, 2)
        return int.from_bytes(self.data[ptr:ptr + 2], "little")

    def write_byte(self, ptr: int, value: int) -> None:
        """Store the low 8 bits of ``value`` at ``ptr``."""
        self._check(ptr, 1)
        self.data[ptr] = value & 0xFF

    def write_word(self, ptr: int, value: int) -> None:
        """Store the low 16 bits of ``value`` at ``ptr`` in little-endian order."""
        self._check(ptr, 2)
        self.data[ptr:ptr + 2] = (value & 0xFFFF).to_bytes(2, "little")