"""The virtual machine: registers, memory and instruction execution."""

from __future__ import annotations

import operator
from typing import BinaryIO, Callable, Tuple

from nvm.instruction import (
    Add,
    AddAcc8,
    AddAcc16,
    And,
    AndAcc8,
    AndAcc16,
    Dec,
    Inc,
    Instruction,
    MemoryPtr,
    Mov,
    MovAccMem,
    MovImm8,
    MovImm16,
    Noop,
    Or,
    OrAcc8,
    OrAcc16,
    Pop,
    Push,
    Sub,
    SubAcc8,
    SubAcc16,
)
from nvm.memory import LinearMemory
from nvm.modrm import MemAddress, Operand
from nvm.register import Register

DEFAULT_STACK_POINTER = 1024
_REGISTER_COUNT = 14
_WORD_MASK = 0xFFFF
_BYTE_MASK = 0xFF

BinaryOp = Callable[[int, int], int]

_BINARY_OPS: dict[type, BinaryOp] = {
    Mov: lambda _, rhs: rhs,
    Add: operator.add,
    Sub: operator.sub,
    And: operator.and_,
    Or: operator.or_,
}

_ACCUMULATOR_OPS: dict[type, Tuple[Register, BinaryOp]] = {
    AddAcc8: (Register.AL, operator.add),
    AddAcc16: (Register.AX, operator.add),
    SubAcc8: (Register.AL, operator.sub),
    SubAcc16: (Register.AX, operator.sub),
    AndAcc8: (Register.AL, operator.and_),
    AndAcc16: (Register.AX, operator.and_),
    OrAcc8: (Register.AL, operator.or_),
    OrAcc16: (Register.AX, operator.or_),
}


def _register_slot(register: Register) -> Tuple[int, int, int]:
    """Return (storage index, bit shift, mask) for a register."""
    if not register.is_8bit():
        return register.value, 0, _WORD_MASK
    code = register.value - 0x80
    if code < 4:
        return code, 0, _BYTE_MASK
    return code - 4, 8, _BYTE_MASK


class Machine:
    """A 16-bit machine with linear memory and an x86-like register file."""

    def __init__(self) -> None:
        self.memory = LinearMemory()
        self._registers = [0] * _REGISTER_COUNT
        self.set_register(Register.SP, DEFAULT_STACK_POINTER)

    def load_program(self, stream: BinaryIO) -> None:
        """Copy the contents of a binary stream to the start of memory."""
        self.load_program_bytes(stream.read())

    def load_program_bytes(self, program: bytes) -> None:
        """Copy ``program`` to the start of memory."""
        if len(program) > len(self.memory.data):
            raise ValueError("Program cannot be larger than memory")
        self.memory.data[: len(program)] = program

    def step(self) -> Instruction:
        """Decode and run the instruction at IP, advance IP and return the instruction."""
        ip = self.get_register(Register.IP)
        opcode_byte = self.memory.read_byte(ip)
        instruction = Instruction.from_bytes(opcode_byte, memoryview(self.memory.data)[ip + 1:])
        self.run_instruction(instruction)
        self.set_register(Register.IP, self.get_register(Register.IP) + instruction.size())
        return instruction

    def ptr_from_mem_address(self, address: MemAddress) -> int:
        """Compute the effective address base + index + displacement."""
        ptr = address.displacement
        if address.base is not None:
            ptr += self.get_register(address.base)
        if address.index is not None:
            ptr += self.get_register(address.index)
        return ptr & _WORD_MASK

    def get_register(self, register: Register) -> int:
        """Return the value of a 16-bit register or an 8-bit half."""
        index, shift, mask = _register_slot(register)
        return (self._registers[index] >> shift) & mask

    def set_register(self, register: Register, value: int) -> None:
        """Store ``value``, truncated to the register's width."""
        index, shift, mask = _register_slot(register)
        kept = self._registers[index] & ~(mask << shift) & _WORD_MASK
        self._registers[index] = kept | ((value & mask) << shift)

    def run_instruction(self, instruction: Instruction) -> None:
        """Execute a decoded instruction without touching IP."""
        kind = type(instruction)
        if kind in _BINARY_OPS:
            self._apply_binary_op(instruction.dest, instruction.src, _BINARY_OPS[kind])
            return
        if kind in _ACCUMULATOR_OPS:
            register, op = _ACCUMULATOR_OPS[kind]
            self.set_register(register, op(self.get_register(register), instruction.value))
            return

        match instruction:
            case Noop():
                pass
            case MovImm8(register=register, value=value) | MovImm16(register=register, value=value):
                self.set_register(register, value)
            case MovAccMem(dest=Register() as register, src=MemoryPtr(address=ptr)):
                if register.is_8bit():
                    self.set_register(register, self.memory.read_byte(ptr))
                else:
                    self.set_register(register, self.memory.read_word(ptr))
            case MovAccMem(dest=MemoryPtr(address=ptr), src=Register() as register):
                if register.is_8bit():
                    self.memory.write_byte(ptr, self.get_register(register))
                else:
                    self.memory.write_word(ptr, self.get_register(register))
            case Push(register=register):
                self.set_register(Register.SP, self.get_register(Register.SP) - 2)
                self.memory.write_word(self.get_register(Register.SP), self.get_register(register))
            case Pop(register=register):
                self.set_register(register, self.memory.read_word(self.get_register(Register.SP)))
                self.set_register(Register.SP, self.get_register(Register.SP) + 2)
            case Inc(register=register):
                self.set_register(register, self.get_register(register) + 1)
            case Dec(register=register):
                self.set_register(register, self.get_register(register) - 1)
            case _:
                raise TypeError(f"Cannot execute {instruction!r}")

    def _read_sized(self, ptr: int, register: Register) -> int:
        if register.is_8bit():
            return self.memory.read_byte(ptr)
        return self.memory.read_word(ptr)

    def _apply_binary_op(self, dest: Operand, src: Operand, op: BinaryOp) -> None:
        if isinstance(dest, Register) and isinstance(src, Register):
            self.set_register(dest, op(self.get_register(dest), self.get_register(src)))
        elif isinstance(dest, Register) and isinstance(src, MemAddress):
            ptr = self.ptr_from_mem_address(src)
            self.set_register(dest, op(self.get_register(dest), self._read_sized(ptr, dest)))
        elif isinstance(dest, MemAddress) and isinstance(src, Register):
            ptr = self.ptr_from_mem_address(dest)
            result = op(self._read_sized(ptr, src), self.get_register(src))
            if src.is_8bit():
                self.memory.write_byte(ptr, result)
            else:
                self.memory.write_word(ptr, result)
        else:
            raise ValueError("An instruction cannot have two memory operands")