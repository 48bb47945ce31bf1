# nvm

nvm is a small virtual machine modelled on the 16-bit 8086. It loads a flat
binary image into 16 KiB of zero-filled linear memory. It then decodes
instructions one at a time and executes them against a register file.

## Supported instructions

- `NOP` (`0x90`)
- `MOV` in three forms:
  - register, immediate (`0xB0`–`0xBF`)
  - between registers, or between a register and memory, through a ModR/M
    byte (`0x88`–`0x8B`)
  - between `AL`/`AX` and a direct 16-bit address (`0xA0`–`0xA3`)
- `PUSH` and `POP` of 16-bit general registers (`0x50`–`0x5F`)
- `ADD`, `SUB`, `AND` and `OR`, each in its ModR/M form and in its
  `AL, imm8` and `AX, imm16` accumulator forms
- `INC` and `DEC` of 16-bit general registers (`0x40`–`0x4F`)

Words are little-endian. Arithmetic wraps around at the width of the
destination. The stack pointer starts at 1024, and `PUSH` moves it down by 2.

## Installation

```
pip install .
```

## Running a program

```
nvm program.bin
```

The command loads the image at address 0 and executes exactly 20
instructions. It prints each one as it runs, for example
`Running instruction: Noop()`.

It exits with status 1 and prints a message to standard error in these cases:

- the file does not exist
- the image is larger than memory
- an opcode or register code cannot be decoded
- a memory access falls outside memory

Otherwise it exits with status 0.

## Using it as a library

```python
from nvm.machine import Machine
from nvm.register import Register

machine = Machine()
machine.load_program_bytes(bytes([0xB0, 0x2A, 0x04, 0x01]))  # MOV AL, 0x2A; ADD AL, 1
machine.step()
machine.step()

assert machine.get_register(Register.AL) == 0x2B
assert machine.get_register(Register.IP) == 4
```

Library calls:

- `Machine.step()` runs the instruction at `IP`, advances `IP` by its size and
  returns the decoded instruction.
- `Machine.load_program(stream)` reads the program from a binary file object.
- `Machine.get_register` and `Machine.set_register` handle both the 16-bit
  registers and their 8-bit halves. Writing `AH` or `AL` changes only that half
  of `AX`.

You can also decode instructions and run them on their own:

```python
from nvm.instruction import AddAcc16, Instruction
from nvm.machine import Machine

instruction = Instruction.from_bytes(0x05, bytes([0xAA, 0xBB]))  # ADD AX, 0xBBAA
assert instruction == AddAcc16(0xBBAA)
assert instruction.size() == 3

machine = Machine()
machine.run_instruction(instruction)
```

- `nvm.modrm.decode_operands` decodes a ModR/M byte into a
  `(destination, source)` pair. Each element is a `Register` or a
  `MemAddress`.
- `Machine.ptr_from_mem_address` computes the effective address of a
  `MemAddress`.
- An unknown opcode or register code, or truncated instruction bytes, raise
  `nvm.register.DecodeError`, which is a subclass of `ValueError`.

## What it does not do

- The machine does not update flags.
- It has no jumps, calls, interrupts or halt instruction.
- The command always runs a fixed 20 steps. It does not stop at the end of
  the program: zero bytes after the image decode as `ADD [BX+SI], AL`.
- Segment registers exist, but they are not used in address calculation.

## Development

```
pip install -e ".[test]"
pytest
```