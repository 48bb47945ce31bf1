import pytest

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
    Opcode,
    Or,
    OrAcc8,
    OrAcc16,
    Pop,
    Push,
    Sub,
    SubAcc8,
    SubAcc16,
)
from nvm.modrm import MemAddress
from nvm.register import DecodeError, Register

R = Register

OPCODE_CASES = (
    [(0x90, Opcode.NOOP)]
    + [(x, Opcode.MOV_IMM) for x in range(0xB0, 0xC0)]
    + [(x, Opcode.MOV_REG_MEM) for x in range(0x88, 0x8C)]
    + [(x, Opcode.MOV_ACC_MEM) for x in range(0xA0, 0xA4)]
    + [(x, Opcode.PUSH) for x in range(0x50, 0x58)]
    + [(x, Opcode.POP) for x in range(0x58, 0x60)]
    + [(x, Opcode.ADD) for x in range(0x00, 0x04)]
    + [(0x04, Opcode.ADD_ACC_8), (0x05, Opcode.ADD_ACC_16)]
    + [(x, Opcode.SUB) for x in range(0x28, 0x2C)]
    + [(0x2C, Opcode.SUB_ACC_8), (0x2D, Opcode.SUB_ACC_16)]
    + [(x, Opcode.INC) for x in range(0x40, 0x48)]
    + [(x, Opcode.DEC) for x in range(0x48, 0x50)]
    + [(x, Opcode.AND) for x in range(0x20, 0x24)]
    + [(0x24, Opcode.AND_ACC_8), (0x25, Opcode.AND_ACC_16)]
    + [(x, Opcode.OR) for x in range(0x08, 0x0C)]
    + [(0x0C, Opcode.OR_ACC_8), (0x0D, Opcode.OR_ACC_16)]
)

SUPPORTED = {byte for byte, _ in OPCODE_CASES}


@pytest.mark.parametrize("byte,expected", OPCODE_CASES)
def test_opcode_from_byte(byte, expected):
    assert Opcode.from_byte(byte) == expected


@pytest.mark.parametrize("byte", [x for x in range(0x100) if x not in SUPPORTED])
def test_opcode_from_unsupported_byte(byte):
    with pytest.raises(DecodeError):
        Opcode.from_byte(byte)


def test_opcode_from_invalid_byte():
    with pytest.raises(DecodeError, match="0xff"):
        Opcode.from_byte(0xFF)


BINARY_CLASSES = [Mov, Add, Sub, And, Or]


@pytest.mark.parametrize("cls", BINARY_CLASSES)
def test_binary_instruction_size(cls):
    assert cls(R.AX, MemAddress()).size() == 2
    assert cls(R.AX, MemAddress(displacement_size=2)).size() == 4
    assert cls(MemAddress(displacement_size=3), R.AX).size() == 5
    assert cls(MemAddress(displacement_size=2), MemAddress(displacement_size=3)).size() == 7


@pytest.mark.parametrize(
    "instr,size",
    [
        (Noop(), 1),
        (MovImm8(R.AH, 0xFF), 2),
        (MovImm16(R.AX, 0xFFFF), 3),
        (MovAccMem(MemoryPtr(0), R.AL), 3),
        (Push(R.AL), 1),
        (Pop(R.AL), 1),
        (AddAcc8(0), 2),
        (AddAcc16(0), 3),
        (SubAcc8(0), 2),
        (SubAcc16(0), 3),
        (Inc(R.AX), 1),
        (Dec(R.AX), 1),
        (AndAcc8(0), 2),
        (AndAcc16(0), 3),
        (OrAcc8(0), 2),
        (OrAcc16(0), 3),
    ],
)
def test_fixed_instruction_size(instr, size):
    assert instr.size() == size


def test_instruction_from_invalid_bytes():
    with pytest.raises(DecodeError):
        Instruction.from_bytes(0xFF, [])


def test_truncated_immediate_raises():
    with pytest.raises(DecodeError):
        Instruction.from_bytes(0xB8, [0xFF])


def test_noop_instruction_from_bytes():
    assert Instruction.from_bytes(Opcode.NOOP, []) == Noop()


def test_mov_imm_instruction_from_bytes():
    assert Instruction.from_bytes(0xB0, [0xFF]) == MovImm8(R.AL, 0xFF)
    assert Instruction.from_bytes(0xB8, [0xFF, 0xFF]) == MovImm16(R.AX, 0xFFFF)


def test_mov_reg_reg_instruction_from_bytes():
    assert Instruction.from_bytes(0x88, [0b11001011]) == Mov(R.BL, R.CL)
    assert Instruction.from_bytes(0x8A, [0b11011001]) == Mov(R.BL, R.CL)
    assert Instruction.from_bytes(0x8A, [0b11001011]) == Mov(R.CL, R.BL)
    assert Instruction.from_bytes(0x89, [0b11001011]) == Mov(R.BX, R.CX)
    assert Instruction.from_bytes(0x8B, [0b11011001]) == Mov(R.BX, R.CX)
    assert Instruction.from_bytes(0x8B, [0b11001011]) == Mov(R.CX, R.BX)


def test_mov_reg_mem_instruction_from_bytes():
    bp_di = MemAddress(R.BP, R.DI, 0, 0)
    assert Instruction.from_bytes(0x88, [0b00001011]) == Mov(bp_di, R.CL)
    assert Instruction.from_bytes(0x8A, [0b00001011]) == Mov(R.CL, bp_di)
    assert Instruction.from_bytes(0x89, [0b00001011]) == Mov(bp_di, R.CX)
    assert Instruction.from_bytes(0x8B, [0b00001011]) == Mov(R.CX, bp_di)


@pytest.mark.parametrize("opcode,reg", [(0x88, R.CL), (0x89, R.CX)])
def test_mov_reg_mem_mod_0_instruction_from_bytes(opcode, reg):
    cases = [
        ([0b00001000], MemAddress(R.BX, R.SI, 0, 0)),
        ([0b00001001], MemAddress(R.BX, R.DI, 0, 0)),
        ([0b00001010], MemAddress(R.BP, R.SI, 0, 0)),
        ([0b00001011], MemAddress(R.BP, R.DI, 0, 0)),
        ([0b00001100], MemAddress(None, R.SI, 0, 0)),
        ([0b00001101], MemAddress(None, R.DI, 0, 0)),
        ([0b00001111], MemAddress(R.BX, None, 0, 0)),
    ]
    for data, address in cases:
        assert Instruction.from_bytes(opcode, data) == Mov(address, reg)

    instr = Instruction.from_bytes(opcode, [0b00001110, 0xAA, 0xBB])
    assert instr == Mov(MemAddress(None, None, 0xBBAA, 2), reg)
    assert instr.size() == 4


@pytest.mark.parametrize("opcode,reg", [(0x88, R.CL), (0x89, R.CX)])
def test_mov_reg_mem_displacement_instruction_from_bytes(opcode, reg):
    instr = Instruction.from_bytes(opcode, [0b01001000, 0xAA])
    assert instr == Mov(MemAddress(R.BX, R.SI, 0xAA, 1), reg)
    assert instr.size() == 3

    instr = Instruction.from_bytes(opcode, [0b10001000, 0xAA, 0xBB])
    assert instr == Mov(MemAddress(R.BX, R.SI, 0xBBAA, 2), reg)
    assert instr.size() == 4


@pytest.mark.parametrize(
    "opcode,expected",
    [
        (0xA0, MovAccMem(R.AL, MemoryPtr(0xBBAA))),
        (0xA1, MovAccMem(R.AX, MemoryPtr(0xBBAA))),
        (0xA2, MovAccMem(MemoryPtr(0xBBAA), R.AL)),
        (0xA3, MovAccMem(MemoryPtr(0xBBAA), R.AX)),
    ],
)
def test_mov_acc_mem_instruction_from_bytes(opcode, expected):
    instr = Instruction.from_bytes(opcode, [0xAA, 0xBB])
    assert instr == expected
    assert instr.size() == 3


SIXTEEN_BIT_ORDER = [R.AX, R.CX, R.DX, R.BX, R.SP, R.BP, R.SI, R.DI]


@pytest.mark.parametrize("offset,reg", list(enumerate(SIXTEEN_BIT_ORDER)))
def test_push_pop_instruction_from_bytes(offset, reg):
    push = Instruction.from_bytes(0x50 + offset, [])
    assert push == Push(reg)
    assert push.size() == 1
    pop = Instruction.from_bytes(0x58 + offset, [])
    assert pop == Pop(reg)
    assert pop.size() == 1


@pytest.mark.parametrize("offset,reg", list(enumerate(SIXTEEN_BIT_ORDER)))
def test_inc_dec_instruction_from_bytes(offset, reg):
    assert Instruction.from_bytes(0x40 + offset, []) == Inc(reg)
    assert Instruction.from_bytes(0x48 + offset, []) == Dec(reg)


@pytest.mark.parametrize("cls,base", [(Add, 0x00), (Sub, 0x28), (And, 0x20), (Or, 0x08)])
def test_alu_instruction_from_bytes(cls, base):
    bx_si = MemAddress(R.BX, R.SI, 0, 0)
    bx_si_disp = MemAddress(R.BX, R.SI, 0xBBFF, 2)
    direct = MemAddress(None, None, 0xBBFF, 2)

    cases = [
        (base, [0b11000000], cls(R.AL, R.AL), 2),
        (base, [0b00000000], cls(bx_si, R.AL), 2),
        (base + 1, [0b00000000], cls(bx_si, R.AX), 2),
        (base + 2, [0b00000000], cls(R.AL, bx_si), 2),
        (base + 3, [0b00000000], cls(R.AX, bx_si), 2),
        (base, [0b10000000, 0xFF, 0xBB], cls(bx_si_disp, R.AL), 4),
        (base + 1, [0b10000000, 0xFF, 0xBB], cls(bx_si_disp, R.AX), 4),
        (base + 2, [0b10000000, 0xFF, 0xBB], cls(R.AL, bx_si_disp), 4),
        (base + 3, [0b10000000, 0xFF, 0xBB], cls(R.AX, bx_si_disp), 4),
        (base + 3, [0b00000110, 0xFF, 0xBB], cls(R.AX, direct), 4),
    ]
    for opcode, data, expected, size in cases:
        instr = Instruction.from_bytes(opcode, data)
        assert instr == expected
        assert instr.size() == size


@pytest.mark.parametrize(
    "opcode,data,expected,size",
    [
        (0x04, [0xFF], AddAcc8(0xFF), 2),
        (0x05, [0xAA, 0xBB], AddAcc16(0xBBAA), 3),
        (0x2C, [0xFF], SubAcc8(0xFF), 2),
        (0x2D, [0xAA, 0xBB], SubAcc16(0xBBAA), 3),
        (0x24, [0xFF], AndAcc8(0xFF), 2),
        (0x25, [0xAA, 0xBB], AndAcc16(0xBBAA), 3),
        (0x0C, [0xFF], OrAcc8(0xFF), 2),
        (0x0D, [0xAA, 0xBB], OrAcc16(0xBBAA), 3),
    ],
)
def test_acc_instruction_from_bytes(opcode, data, expected, size):
    instr = Instruction.from_bytes(opcode, data)
    assert instr == expected
    assert instr.size() == size


def test_different_operations_with_same_operands_differ():
    assert Add(R.AL, R.CL) != Sub(R.AL, R.CL)
    assert Add(R.AL, R.CL) == Add(R.AL, R.CL)