"""
CPU4 Emulator - Cycle-stepped 4-bit CPU simulator
==================================================
4 registers, 16-byte unified memory, 16-entry opcode table with an
extended ALU group (AND/OR/XOR/NOT/SHL/SHR/ROL/ROR).

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────────┐
    │  Memory  │───>│ Decoder  │───>│ Executor │───>│  TraceEvent  │
    │ (16 B)   │    │ (nibbles)│    │ (state)  │    │ (trace.py)   │
    └──────────┘    └──────────┘    └──────────┘    └──────────────┘
         ^                                                │
         └──────────────── run() loop: HLT / budget ──────┘
"""

__version__ = "0.1.0"

from .cpu.decoder import AluOp, Instruction, Opcode, decode_instruction
from .emu import (
    CPU4Emulator,
    MachineState,
    RunResult,
    RunStatus,
    StopReason,
    TraceEvent,
)
from .programs import EXAMPLE_PROGRAMS, ProgramFormatError, parse_program

__all__ = [
    "AluOp",
    "CPU4Emulator",
    "EXAMPLE_PROGRAMS",
    "Instruction",
    "MachineState",
    "Opcode",
    "ProgramFormatError",
    "RunResult",
    "RunStatus",
    "StopReason",
    "TraceEvent",
    "decode_instruction",
    "parse_program",
]
