"""Opcodes and decoded instructions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Sequence, Union

from nvm.modrm import MemAddress, Operand, decode_operands
from nvm.register import DecodeError, Register


class Opcode(IntEnum):
    """Instruction families; each value is the first byte of its opcode range."""

    NOOP = 0x90
    PUSH = 0x91
    POP = 0x92
    MOV_IMM = 0xB0
    MOV_REG_MEM = 0x88
    MOV_ACC_MEM = 0xA0
    ADD = 0x00
    ADD_ACC_8 = 0x04
    ADD_ACC_16 = 0x05
    SUB = 0x28
    SUB_ACC_8 = 0x2C
    SUB_ACC_16 = 0x2D
    INC = 0x40
    DEC = 0x48
    AND = 0x20
    AND_ACC_8 = 0x24
    AND_ACC_16 = 0x25
    OR = 0x08
    OR_ACC_8 = 0x0C
    OR_ACC_16 = 0x0D

    @classmethod
    def from_byte(cls, value: int) -> "Opcode":
        """Classify an opcode byte, raising DecodeError if it is not supported."""
        for low, high, opcode in _OPCODE_RANGES:
            if low <= value <= high:
                return opcode
        raise DecodeError(f"Invalid opcode: {value:#x}")


_OPCODE_RANGES = (
    (0x90, 0x90, Opcode.NOOP),
    (0x50, 0x57, Opcode.PUSH),
    (0x58, 0x5F, Opcode.POP),
    (0xB0, 0xBF, Opcode.MOV_IMM),
    (0x88, 0x8B, Opcode.MOV_REG_MEM),
    (0xA0, 0xA3, Opcode.MOV_ACC_MEM),
    (0x00, 0x03, Opcode.ADD),
    (0x04, 0x04, Opcode.ADD_ACC_8),
    (0x05, 0x05, Opcode.ADD_ACC_16),
    (0x28, 0x2B, Opcode.SUB),
    (0x2C, 0x2C, Opcode.SUB_ACC_8),
    (0x2D, 0x2D, Opcode.SUB_ACC_16),
    (0x40, 0x47, Opcode.INC),
    (0x48, 0x4F, Opcode.DEC),
    (0x20, 0x23, Opcode.AND),
    (0x24, 0x24, Opcode.AND_ACC_8),
    (0x25, 0x25, Opcode.AND_ACC_16),
    (0x08, 0x0B, Opcode.OR),
    (0x0C, 0x0C, Opcode.OR_ACC_8),
    (0x0D, 0x0D, Opcode.OR_ACC_16),
)


@dataclass(frozen=True)
class MemoryPtr:
    """A direct 16-bit memory address used by the accumulator MOV forms."""

    address: int


MovMemOperand = Union[Register, MemoryPtr]


def _byte(data: Sequence[int], position: int) -> int:
    try:
        return data[position]
    except IndexError:
        raise DecodeError("Truncated instruction bytes") from None


def _word(data: Sequence[int]) -> int:
    return _byte(data, 0) | (_byte(data, 1) << 8)


class Instruction:
    """Base class of all decoded instructions."""

    _size: ClassVar[int] = 1

    def size(self) -> int:
        """Return the encoded length of the instruction in bytes."""
        return self._size

    @classmethod
    def from_bytes(cls, opcode_byte: int, data: Sequence[int]) -> "Instruction":
        """Decode an instruction from its opcode byte and the bytes following it."""
        opcode = Opcode.from_byte(opcode_byte)

        match opcode:
            case Opcode.NOOP:
                return Noop()
            case Opcode.MOV_IMM:
                bits_8 = opcode_byte & 0b1000 == 0
                reg = Register.from_register_code(opcode_byte & 0b111, bits_8)
                if bits_8:
                    return MovImm8(reg, _byte(data, 0))
                return MovImm16(reg, _word(data))
            case Opcode.MOV_REG_MEM:
                return Mov(*decode_operands(opcode_byte, data))
            case Opcode.MOV_ACC_MEM:
                is_reg_target = opcode_byte & 0b10 == 0
                register = Register.AL if opcode_byte & 0b01 == 0 else Register.AX
                ptr = MemoryPtr(_word(data))
                if is_reg_target:
                    return MovAccMem(register, ptr)
                return MovAccMem(ptr, register)
            case Opcode.PUSH:
                return Push(Register.from_register_code(opcode_byte & 0b111, False))
            case Opcode.POP:
                return Pop(Register.from_register_code(opcode_byte & 0b111, False))
            case Opcode.ADD:
                return Add(*decode_operands(opcode_byte, data))
            case Opcode.ADD_ACC_8:
                return AddAcc8(_byte(data, 0))
            case Opcode.ADD_ACC_16:
                return AddAcc16(_word(data))
            case Opcode.SUB:
                return Sub(*decode_operands(opcode_byte, data))
            case Opcode.SUB_ACC_8:
                return SubAcc8(_byte(data, 0))
            case Opcode.SUB_ACC_16:
                return SubAcc16(_word(data))
            case Opcode.INC:
                return Inc(Register.from_register_code(opcode_byte & 0b111, False))
            case Opcode.DEC:
                return Dec(Register.from_register_code(opcode_byte & 0b111, False))
            case Opcode.AND:
                return And(*decode_operands(opcode_byte, data))
            case Opcode.AND_ACC_8:
                return AndAcc8(_byte(data, 0))
            case Opcode.AND_ACC_16:
                return AndAcc16(_word(data))
            case Opcode.OR:
                return Or(*decode_operands(opcode_byte, data))
            case Opcode.OR_ACC_8:
                return OrAcc8(_byte(data, 0))
            case Opcode.OR_ACC_16:
                return OrAcc16(_word(data))
        raise DecodeError(f"Invalid opcode: {opcode_byte:#x}")


@dataclass(frozen=True)
class _ModRMInstruction(Instruction):
    """An instruction with two operands encoded through a ModR/M byte."""

    dest: Operand
    src: Operand

    def size(self) -> int:
        return 2 + sum(
            operand.displacement_size
            for operand in (self.dest, self.src)
            if isinstance(operand, MemAddress)
        )


@dataclass(frozen=True)
class Noop(Instruction):
    """Do nothing."""

    _size = 1


@dataclass(frozen=True)
class MovImm8(Instruction):
    """MOV r8, imm8."""

    register: Register
    value: int
    _size = 2


@dataclass(frozen=True)
class MovImm16(Instruction):
    """MOV r16, imm16."""

    register: Register
    value: int
    _size = 3


@dataclass(frozen=True)
class Mov(_ModRMInstruction):
    """MOV between registers or between a register and memory."""


@dataclass(frozen=True)
class MovAccMem(Instruction):
    """MOV AL/AX to or from a direct memory address."""

    dest: MovMemOperand
    src: MovMemOperand
    _size = 3


@dataclass(frozen=True)
class Push(Instruction):
    """PUSH r16."""

    register: Register
    _size = 1


@dataclass(frozen=True)
class Pop(Instruction):
    """POP r16."""

    register: Register
    _size = 1


@dataclass(frozen=True)
class Add(_ModRMInstruction):
    """ADD r/m, r or ADD r, r/m."""


@dataclass(frozen=True)
class AddAcc8(Instruction):
    """ADD AL, imm8."""

    value: int
    _size = 2


@dataclass(frozen=True)
class AddAcc16(Instruction):
    """ADD AX, imm16."""

    value: int
    _size = 3


@dataclass(frozen=True)
class Sub(_ModRMInstruction):
    """SUB r/m, r or SUB r, r/m."""


@dataclass(frozen=True)
class SubAcc8(Instruction):
    """SUB AL, imm8."""

    value: int
    _size = 2


@dataclass(frozen=True)
class SubAcc16(Instruction):
    """SUB AX, imm16."""

    value: int
    _size = 3


@dataclass(frozen=True)
class Inc(Instruction):
    """INC r16."""

    register: Register
    _size = 1


@dataclass(frozen=True)
class Dec(Instruction):
    """DEC r16."""

    register: Register
    _size = 1


@dataclass(frozen=True)
class And(_ModRMInstruction):
    """AND r/m, r or AND r, r/m."""


@dataclass(frozen=True)
class AndAcc8(Instruction):
    """AND AL, imm8."""

    value: int
    _size = 2


@dataclass(frozen=True)
class AndAcc16(Instruction):
    """AND AX, imm16."""

    value: int
    _size = 3


@dataclass(frozen=True)
class Or(_ModRMInstruction):
    """OR r/m, r or OR r, r/m."""


@dataclass(frozen=True)
class OrAcc8(Instruction):
    """OR AL, imm8."""

    value: int
    _size = 2


@dataclass(frozen=True)
class OrAcc16(Instruction):
    """OR AX, imm16."""

    value: int
    _size = 3