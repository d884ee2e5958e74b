"""
CPU4 Emulator - Instruction Decoder

Instruction byte layout:

    7   6   5   4   3   2   1   0
  ┌───────────────┬───────────────┐
  │    opcode     │    operand    │
  └───────────────┴───────────────┘

The operand nibble means different things per opcode:
  immediate   LDA, LDB
  address     STA, STB, LDM, JMP, JZ
  register    OUT, INC, DEC (low 2 bits), MOV (src<<2 | dst)
  sub-opcode  ALU
  unused      NOP, ADD, SUB, HLT

All 16 opcode values are assigned, so the first-stage decode is total.
Under ALU only sub-opcodes 0x0-0x7 are defined; 0x8-0xF decode with
alu_op=None and execute as a diagnostic no-op.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..config import BYTE_MASK, NIBBLE_MASK, NIBBLE_BITS


class Opcode(IntEnum):
    NOP = 0x0   # No operation
    LDA = 0x1   # Load immediate to A
    LDB = 0x2   # Load immediate to B
    STA = 0x3   # Store A to memory
    STB = 0x4   # Store B to memory
    ADD = 0x5   # A = A + B
    SUB = 0x6   # A = A - B
    JMP = 0x7   # Jump to address
    JZ = 0x8    # Jump if zero flag set
    MOV = 0x9   # Register to register
    LDM = 0xA   # Load memory to A
    OUT = 0xB   # Output register value
    INC = 0xC   # Increment register
    DEC = 0xD   # Decrement register
    ALU = 0xE   # Extended logic/shift group, operand = sub-opcode
    HLT = 0xF   # Halt


class AluOp(IntEnum):
    AND = 0x0
    OR = 0x1
    XOR = 0x2
    NOT = 0x3
    SHL = 0x4
    SHR = 0x5
    ROL = 0x6
    ROR = 0x7


# Sub-opcode values with a defined meaning
ALU_OPS = {op.value: op for op in AluOp}

# Mnemonic used in trace output for an undefined ALU sub-opcode
UNKNOWN_ALU_MNEMONIC = 'ALU?'


@dataclass(frozen=True)
class Instruction:
    """One fetched byte, split into its fields."""
    raw: int
    opcode: int                     # Opcode member, or a plain int if unassigned
    operand: int
    alu_op: Optional[AluOp] = None

    @property
    def is_known(self) -> bool:
        if not isinstance(self.opcode, Opcode):
            return False
        if self.opcode is Opcode.ALU:
            return self.alu_op is not None
        return True

    @property
    def mnemonic(self) -> str:
        if self.alu_op is not None:
            return self.alu_op.name
        if self.opcode == Opcode.ALU:
            return UNKNOWN_ALU_MNEMONIC
        if isinstance(self.opcode, Opcode):
            return self.opcode.name
        return f"?{self.opcode:X}"


def split_byte(byte: int) -> tuple:
    """Return (opcode_nibble, operand_nibble) for an instruction byte."""
    byte &= BYTE_MASK
    return ((byte >> NIBBLE_BITS) & NIBBLE_MASK, byte & NIBBLE_MASK)


def decode_alu(operand: int) -> Optional[AluOp]:
    """Second-stage decode of an ALU operand. None means undefined."""
    return ALU_OPS.get(operand & NIBBLE_MASK)


def decode_instruction(byte: int) -> Instruction:
    """Decode one instruction byte. Never raises."""
    op_nibble, operand = split_byte(byte)
    try:
        opcode = Opcode(op_nibble)
    except ValueError:
        # Unreachable while every nibble value has a member
        opcode = op_nibble
    alu_op = decode_alu(operand) if opcode == Opcode.ALU else None
    return Instruction(raw=byte & BYTE_MASK, opcode=opcode,
                       operand=operand, alu_op=alu_op)


def encode(opcode: int, operand: int = 0) -> int:
    """Build an instruction byte from its two nibbles."""
    return ((opcode & NIBBLE_MASK) << NIBBLE_BITS) | (operand & NIBBLE_MASK)


def encode_mov(src: int, dst: int) -> int:
    """MOV operand packs src in bits 3-2 and dst in bits 1-0."""
    return encode(Opcode.MOV, ((src & 0x03) << 2) | (dst & 0x03))
