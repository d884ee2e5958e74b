"""
CPU4 Emulator - Example Programs + Program Text Parsing

Programs are already-assembled byte lists. Each example carries the step
budget it is meant to run with; the countdown loop never reaches HLT
and relies on the budget to stop.

Program text format (for `cpu4kit run --hex` and .hex files):
    15 23 50        ; LDA #5, LDB #3, ADD
    0xB0, $F0       # OUT A, HLT
Tokens are hex bytes, optionally prefixed 0x or $, separated by
whitespace or commas. ';' and '#' start a comment.
"""

import re
from dataclasses import dataclass
from typing import Dict, List

from .config import BYTE_MASK, DEFAULT_MAX_STEPS


class ProgramFormatError(ValueError):
    """Raised when program text contains something that is not a byte."""

    def __init__(self, message: str, line: int = 0, token: str = ''):
        self.line = line
        self.token = token
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class ExampleProgram:
    name: str
    title: str
    code: bytes
    max_steps: int = DEFAULT_MAX_STEPS


EXAMPLE_PROGRAMS: List[ExampleProgram] = [
    ExampleProgram('add', 'Basic Addition', bytes([
        0x15,  # LDA #5
        0x23,  # LDB #3
        0x50,  # ADD      A = 8
        0xB0,  # OUT A
        0xF0,  # HLT
    ])),
    ExampleProgram('countdown', 'Countdown Loop', bytes([
        0x15,  # 0: LDA #5
        0xB0,  # 1: OUT A
        0xD0,  # 2: DEC A
        0x81,  # 3: JZ 1
        0x71,  # 4: JMP 1
        0xF0,  # 5: HLT (never reached)
    ]), max_steps=20),
    ExampleProgram('memory', 'Memory Operations', bytes([
        0x1A,  # 0: LDA #10
        0x3F,  # 1: STA [15]
        0x10,  # 2: LDA #0
        0xB0,  # 3: OUT A    (0)
        0xAF,  # 4: LDM [15]
        0xB0,  # 5: OUT A    (10)
        0xF0,  # 6: HLT
    ])),
    ExampleProgram('logic', 'ALU Logic', bytes([
        0x1C,  # LDA #12
        0x2A,  # LDB #10
        0xE0,  # AND      A = 8
        0xB0,  # OUT A
        0x1C,  # LDA #12
        0xE1,  # OR       A = 14
        0xB0,  # OUT A
        0x1C,  # LDA #12
        0xE2,  # XOR      A = 6
        0xB0,  # OUT A
        0xE3,  # NOT      A = 9
        0xB0,  # OUT A
        0xF0,  # HLT
    ])),
    ExampleProgram('shift', 'Shift and Rotate', bytes([
        0x13,  # LDA #3
        0xE4,  # SHL      A = 6
        0xE4,  # SHL      A = 12
        0xB0,  # OUT A
        0xE5,  # SHR      A = 6
        0xE5,  # SHR      A = 3
        0xB0,  # OUT A
        0x19,  # LDA #9
        0xE6,  # ROL      A = 3
        0xE6,  # ROL      A = 6
        0xB0,  # OUT A
        0xE7,  # ROR      A = 3
        0xE7,  # ROR      A = 9
        0xB0,  # OUT A
        0xF0,  # HLT
    ])),
]

EXAMPLES_BY_NAME: Dict[str, ExampleProgram] = {p.name: p for p in EXAMPLE_PROGRAMS}

_TOKEN_RE = re.compile(r'^(?:0[xX]|\$)?([0-9A-Fa-f]{1,2})$')


def parse_program(text: str) -> bytes:
    """Parse hex program text into bytes. Length is not checked here."""
    out = bytearray()
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = re.split(r'[;#]', line, maxsplit=1)[0]
        for token in line.replace(',', ' ').split():
            m = _TOKEN_RE.match(token)
            if m is None:
                raise ProgramFormatError(f"bad byte {token!r}", lineno, token)
            out.append(int(m.group(1), 16) & BYTE_MASK)
    return bytes(out)
