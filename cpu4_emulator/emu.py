"""
CPU4 Emulator - Main Emulator Class

This is the top-level class that integrates:
  - Register file, PC and Zero flag (cpu/regs.py)
  - 16-cell unified memory (mem/memory.py)
  - Instruction decoder (cpu/decoder.py)
  - 4-bit ALU operations (cpu/alu.py)

Execution model (one step):
  1. Fetch the byte at Memory[PC]
  2. Advance PC by one (mod 16)
  3. Decode opcode / operand / ALU sub-opcode
  4. Execute the handler -> update registers, memory, flag
  5. Emit a TraceEvent describing what the instruction touched

Termination reasons for run():
  - HALT:     HLT executed (or the machine was already halted)
  - TIMEOUT:  step budget used up while still running
  - BREAK:    breakpoint address reached

Nothing in the fetch/decode/execute path raises. Undefined ALU
sub-opcodes execute as diagnostic no-ops flagged `unknown` in the trace.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Set

from .config import DEFAULT_MAX_STEPS, NIBBLE_MASK
from .cpu import alu
from .cpu.decoder import AluOp, Instruction, Opcode, decode_instruction
from .cpu.regs import Registers, mask4, register_name
from .mem.memory import Memory
from .trace import format_event

log = logging.getLogger(__name__)


class RunStatus(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'


class StopReason(Enum):
    HALT = 'HALT'
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'


@dataclass(frozen=True)
class TraceEvent:
    """What one executed instruction did.

    Only the fields an instruction actually touched are filled in;
    `zero` is None unless the flag was recomputed.
    """
    pc: int                         # address the byte was fetched from
    raw: int
    opcode: int
    operand: int
    mnemonic: str
    next_pc: int
    alu_op: Optional[AluOp] = None
    register: Optional[str] = None  # register written (or read, for OUT/STA/STB)
    source: Optional[str] = None    # MOV source register
    value: Optional[int] = None
    address: Optional[int] = None   # memory cell or jump target
    zero: Optional[bool] = None
    taken: Optional[bool] = None    # JMP/JZ
    unknown: bool = False

    @property
    def output(self) -> Optional[tuple]:
        """(register, value) for OUT, else None."""
        if self.opcode == Opcode.OUT and not self.unknown:
            return (self.register, self.value)
        return None


@dataclass(frozen=True)
class MachineState:
    """Read-only view of the whole machine."""
    a: int
    b: int
    c: int
    d: int
    pc: int
    zero: bool
    status: RunStatus
    memory: bytes
    steps: int = 0

    @property
    def halted(self) -> bool:
        return self.status is RunStatus.HALTED

    @property
    def registers(self) -> dict:
        return {'A': self.a, 'B': self.b, 'C': self.c, 'D': self.d}


@dataclass
class RunResult:
    reason: StopReason
    steps: int
    events: List[TraceEvent] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return self.reason is StopReason.TIMEOUT

    @property
    def halted(self) -> bool:
        return self.reason is StopReason.HALT

    @property
    def outputs(self) -> List[int]:
        """Values emitted by OUT, in execution order."""
        return [e.value for e in self.events if e.output is not None]


class CPU4Emulator:
    """4-bit CPU emulator.

    Usage:
        emu = CPU4Emulator()
        emu.load_program([0x15, 0x23, 0x50, 0xB0, 0xF0])
        result = emu.run()
        print(result.outputs)       # [8]
        print(emu.snapshot().a)     # 8

    An optional on_event callback receives every TraceEvent as it is
    produced. A machine instance is single-owner: drive it from one
    thread only.
    """

    DEFAULT_MAX_STEPS = DEFAULT_MAX_STEPS

    def __init__(self, on_event: Optional[Callable[[TraceEvent], None]] = None):
        self.regs = Registers()
        self.mem = Memory()
        self.status = RunStatus.RUNNING
        self.on_event = on_event

        # Breakpoints: set of PC addresses that stop run() with BREAK
        self._breakpoints: Set[int] = set()

        # Trace recording
        self._trace = False
        self.trace: List[TraceEvent] = []

        self._dispatch = self._build_dispatch()
        self._alu_dispatch = {
            AluOp.AND: alu.and4,
            AluOp.OR:  alu.or4,
            AluOp.XOR: alu.xor4,
            AluOp.NOT: alu.not4,
            AluOp.SHL: alu.shl4,
            AluOp.SHR: alu.shr4,
            AluOp.ROL: alu.rol4,
            AluOp.ROR: alu.ror4,
        }

    # ══════════════════════════════════════════════
    # State
    # ══════════════════════════════════════════════

    @property
    def halted(self) -> bool:
        return self.status is RunStatus.HALTED

    def reset(self):
        """Zero registers, PC, flag and memory; back to RUNNING."""
        self.regs.reset()
        self.mem.clear()
        self.status = RunStatus.RUNNING
        self._breakpoints.clear()
        self.trace.clear()

    def load_program(self, program) -> int:
        """Copy a program into memory from address 0.

        Accepts bytes, bytearray, a sequence of ints, or a path to a raw
        binary file. At most 16 bytes are used; the rest are dropped.
        Registers, PC and flag are not touched.
        """
        if isinstance(program, (str, Path)):
            data = list(Path(program).read_bytes())
        else:
            data = list(program)
        count = self.mem.load_program(data)
        if len(data) > count:
            log.info("Program truncated: %d bytes supplied, %d loaded",
                     len(data), count)
        log.debug("Loaded %d program bytes", count)
        return count

    def snapshot(self) -> MachineState:
        return MachineState(
            a=self.regs.A,
            b=self.regs.B,
            c=self.regs.C,
            d=self.regs.D,
            pc=self.regs.PC,
            zero=self.regs.Z,
            status=self.status,
            memory=self.mem.snapshot(),
            steps=self.regs.steps,
        )

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[TraceEvent]:
        """Execute one instruction. Returns its TraceEvent, or None if halted."""
        if self.halted:
            return None

        pc = self.regs.PC
        ins = decode_instruction(self.mem.read(pc))
        self.regs.advance_pc()

        handler = self._dispatch.get(ins.opcode)
        if handler is None:
            touched = self._op_unknown(ins)
        else:
            touched = handler(ins)
        self.regs.steps += 1

        event = TraceEvent(
            pc=pc,
            raw=ins.raw,
            opcode=ins.opcode,
            operand=ins.operand,
            mnemonic=ins.mnemonic,
            next_pc=self.regs.PC,
            alu_op=ins.alu_op,
            **touched,
        )
        if log.isEnabledFor(logging.DEBUG):
            log.debug("$%X: %02X %-4s %s", pc, ins.raw, ins.mnemonic,
                      self.regs.display())

        if self._trace:
            self.trace.append(event)
        if self.on_event is not None:
            self.on_event(event)
        return event

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """Step until HLT, a breakpoint, or max_steps instructions.

        Running out of steps is reported as StopReason.TIMEOUT, not
        raised. The first instruction of each call is never stopped on by
        a breakpoint, so calling run() again resumes past it.
        """
        if max_steps is None:
            max_steps = self.DEFAULT_MAX_STEPS
        if max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {max_steps}")

        events: List[TraceEvent] = []
        steps = 0
        while steps < max_steps and not self.halted:
            if steps and self.regs.PC in self._breakpoints:
                log.info("Breakpoint hit at $%X after %d steps",
                         self.regs.PC, steps)
                return RunResult(StopReason.BREAK, steps, events)
            events.append(self.step())
            steps += 1

        if self.halted:
            return RunResult(StopReason.HALT, steps, events)

        log.warning("Max steps reached (%d) without HLT, PC=$%X",
                    max_steps, self.regs.PC)
        return RunResult(StopReason.TIMEOUT, steps, events)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(ins) -> dict of TraceEvent fields.
    # PC has already been advanced past the instruction when a handler
    # runs; JMP/JZ overwrite it.

    def _build_dispatch(self) -> dict:
        """Build opcode -> handler dispatch table."""
        return {
            Opcode.NOP: self._op_nop,
            Opcode.LDA: self._op_lda,
            Opcode.LDB: self._op_ldb,
            Opcode.STA: self._op_sta,
            Opcode.STB: self._op_stb,
            Opcode.ADD: self._op_add,
            Opcode.SUB: self._op_sub,
            Opcode.JMP: self._op_jmp,
            Opcode.JZ:  self._op_jz,
            Opcode.MOV: self._op_mov,
            Opcode.LDM: self._op_ldm,
            Opcode.OUT: self._op_out,
            Opcode.INC: self._op_inc,
            Opcode.DEC: self._op_dec,
            Opcode.ALU: self._op_alu,
            Opcode.HLT: self._op_hlt,
        }

    # ── Load/Store ──

    def _op_nop(self, ins: Instruction) -> dict:
        return {}

    def _op_lda(self, ins):
        self.regs.A = mask4(ins.operand)
        return {'register': 'A', 'value': self.regs.A}

    def _op_ldb(self, ins):
        self.regs.B = mask4(ins.operand)
        return {'register': 'B', 'value': self.regs.B}

    def _op_sta(self, ins):
        self.mem.write(ins.operand, self.regs.A)
        return {'register': 'A', 'value': self.regs.A, 'address': ins.operand}

    def _op_stb(self, ins):
        self.mem.write(ins.operand, self.regs.B)
        return {'register': 'B', 'value': self.regs.B, 'address': ins.operand}

    def _op_ldm(self, ins):
        # Cells can hold full instruction bytes; A only keeps the low nibble
        self.regs.A = mask4(self.mem.read(ins.operand))
        return {'register': 'A', 'value': self.regs.A, 'address': ins.operand}

    def _op_mov(self, ins):
        src = (ins.operand >> 2) & 0x03
        dst = ins.operand & 0x03
        value = self.regs.get(src)
        self.regs.set(dst, value)
        return {'register': register_name(dst), 'source': register_name(src),
                'value': value}

    # ── Arithmetic ──

    def _arith(self, fn, index: int) -> dict:
        result, zero = fn(self.regs.get(index))
        self.regs.set(index, result)
        self.regs.Z = zero
        return {'register': register_name(index), 'value': result, 'zero': zero}

    def _op_add(self, ins):
        self.regs.A, self.regs.Z = alu.add4(self.regs.A, self.regs.B)
        return {'register': 'A', 'value': self.regs.A, 'zero': self.regs.Z}

    def _op_sub(self, ins):
        self.regs.A, self.regs.Z = alu.sub4(self.regs.A, self.regs.B)
        return {'register': 'A', 'value': self.regs.A, 'zero': self.regs.Z}

    def _op_inc(self, ins):
        return self._arith(alu.inc4, ins.operand)

    def _op_dec(self, ins):
        return self._arith(alu.dec4, ins.operand)

    # ── Extended ALU group ──

    def _op_alu(self, ins):
        fn = self._alu_dispatch.get(ins.alu_op)
        if fn is None:
            log.warning("Unknown ALU sub-opcode $%X at $%X, ignored",
                        ins.operand, (self.regs.PC - 1) & NIBBLE_MASK)
            return {'unknown': True}
        self.regs.A, self.regs.Z = fn(self.regs.A, self.regs.B)
        return {'register': 'A', 'value': self.regs.A, 'zero': self.regs.Z}

    # ── Control flow ──

    def _op_jmp(self, ins):
        self.regs.jump(ins.operand)
        return {'address': self.regs.PC, 'taken': True}

    def _op_jz(self, ins):
        if self.regs.Z:
            self.regs.jump(ins.operand)
        return {'address': mask4(ins.operand), 'taken': self.regs.Z}

    def _op_out(self, ins):
        index = ins.operand & 0x03
        return {'register': register_name(index), 'value': self.regs.get(index)}

    def _op_hlt(self, ins):
        self.status = RunStatus.HALTED
        log.info("CPU halted after %d steps", self.regs.steps + 1)
        return {}

    def _op_unknown(self, ins):
        log.warning("Unknown opcode $%X in byte $%02X, ignored",
                    ins.opcode, ins.raw)
        return {'unknown': True}

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Stop run() before executing the instruction at addr."""
        self._breakpoints.add(addr & NIBBLE_MASK)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr & NIBBLE_MASK)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    @property
    def breakpoints(self) -> Set[int]:
        return set(self._breakpoints)

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Record every TraceEvent into self.trace."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(format_event(e) for e in self.trace)

    def clear_trace(self):
        self.trace.clear()
