"""Decoding of ModR/M operand bytes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from nvm.register import DecodeError, Register


@dataclass(frozen=True)
class MemAddress:
    """An effective address: base + index + displacement."""

    base: Optional[Register] = None
    index: Optional[Register] = None
    displacement: int = 0
    displacement_size: int = 0


Operand = Union[Register, MemAddress]

_RM_TABLE = {
    0b000: (Register.BX, Register.SI),
    0b001: (Register.BX, Register.DI),
    0b010: (Register.BP, Register.SI),
    0b011: (Register.BP, Register.DI),
    0b100: (None, Register.SI),
    0b101: (None, Register.DI),
    0b111: (Register.BX, None),
}


def _byte(data: Sequence[int], position: int) -> int:
    try:
        return data[position]
    except IndexError:
        raise DecodeError("Truncated ModR/M operand bytes") from None


def decode_operands(opcode_byte: int, data: Sequence[int]) -> Tuple[Operand, Operand]:
    """Decode ``(destination, source)`` from an opcode and the bytes after it.

    Bit 1 of the opcode clear means the r/m operand is the destination;
    bit 0 clear selects 8-bit registers.
    """
    is_rm_target = opcode_byte & 0b10 == 0
    is_8_bit = opcode_byte & 0b01 == 0

    modrm = _byte(data, 0)
    mod_bits = modrm >> 6
    reg_bits = (modrm >> 3) & 0b111
    rm_bits = modrm & 0b111

    reg = Register.from_register_code(reg_bits, is_8_bit)

    if mod_bits == 0b11:
        rm_reg = Register.from_register_code(rm_bits, is_8_bit)
        return (rm_reg, reg) if is_rm_target else (reg, rm_reg)

    displacement_size = mod_bits
    if rm_bits == 0b110:
        if mod_bits != 0:
            raise DecodeError(f"Unsupported addressing mode in ModR/M byte {modrm:#010b}")
        displacement_size = 2
        base, index = None, None
    else:
        base, index = _RM_TABLE[rm_bits]

    if displacement_size == 0:
        displacement = 0
    elif displacement_size == 1:
        displacement = _byte(data, 1)
    else:
        displacement = _byte(data, 1) | (_byte(data, 2) << 8)

    rm_operand = MemAddress(base, index, displacement, displacement_size)
    return (rm_operand, reg) if is_rm_target else (reg, rm_operand)