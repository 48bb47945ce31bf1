"""CPU registers of the 16-bit machine."""

from __future__ import annotations

from enum import IntEnum


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded into a register, operand or instruction."""


_EIGHT_BIT_OFFSET = 0x80


class Register(IntEnum):
    """A machine register.

    The general-purpose 16-bit registers come first, in encoding order,
    followed by the segment registers, IP and the flags register. The 8-bit
    halves start at 0x80, again in encoding order.
    """

    AX = 0
    CX = 1
    DX = 2
    BX = 3
    SP = 4
    BP = 5
    SI = 6
    DI = 7

    CS = 8
    DS = 9
    SS = 10
    ES = 11
    IP = 12
    F = 13

    AL = 0x80
    CL = 0x81
    DL = 0x82
    BL = 0x83
    AH = 0x84
    CH = 0x85
    DH = 0x86
    BH = 0x87

    def is_8bit(self) -> bool:
        """Return True for the 8-bit halves (AL..BH)."""
        return self.value >= _EIGHT_BIT_OFFSET

    @classmethod
    def from_register_code(cls, code: int, bits_8: bool) -> "Register":
        """Decode a register field, selecting the 8-bit bank when ``bits_8`` is set."""
        full_code = code + _EIGHT_BIT_OFFSET if bits_8 else code
        try:
            return cls(full_code)
        except ValueError:
            raise DecodeError(f"Invalid register code: {full_code}") from None