"""
CPU4 Emulator - Trace / State Rendering

Turns TraceEvent and MachineState values into the text the CLI prints.
The emulator core never prints; it hands events to whoever renders them.

Trace line format:
  PC=3 Instr=0xb0 Op=0xb Operand=0x0 OUT A=8 ***
  └─ fetch address, raw byte, nibbles ─┘└─ per-opcode detail ─┘
"""

from .cpu.decoder import AluOp, Opcode
from .mem.memory import hexdump

# Expression shown for each ALU sub-op
ALU_EXPR = {
    AluOp.AND: 'A&B',
    AluOp.OR:  'A|B',
    AluOp.XOR: 'A^B',
    AluOp.NOT: '~A',
    AluOp.SHL: 'A<<1',
    AluOp.SHR: 'A>>1',
    AluOp.ROL: 'A rol 1',
    AluOp.ROR: 'A ror 1',
}


def _z(event) -> str:
    return f"Z={int(event.zero)}"


def _fmt_alu(e) -> str:
    if e.unknown:
        return f"ALU? sub-op 0x{e.operand:x} (ignored)"
    return f"{e.mnemonic} {ALU_EXPR[e.alu_op]} -> A={e.value} {_z(e)}"


def _fmt_jz(e) -> str:
    if e.taken:
        return f"JZ (taken) -> PC={e.next_pc}"
    return "JZ (not taken)"


_FORMATTERS = {
    Opcode.NOP: lambda e: "NOP",
    Opcode.LDA: lambda e: f"LDA #{e.operand} -> A={e.value}",
    Opcode.LDB: lambda e: f"LDB #{e.operand} -> B={e.value}",
    Opcode.STA: lambda e: f"STA [{e.address}] <- A={e.value}",
    Opcode.STB: lambda e: f"STB [{e.address}] <- B={e.value}",
    Opcode.ADD: lambda e: f"ADD A+B -> A={e.value} {_z(e)}",
    Opcode.SUB: lambda e: f"SUB A-B -> A={e.value} {_z(e)}",
    Opcode.JMP: lambda e: f"JMP -> PC={e.next_pc}",
    Opcode.JZ:  _fmt_jz,
    Opcode.MOV: lambda e: f"MOV {e.source}->{e.register} (value={e.value})",
    Opcode.LDM: lambda e: f"LDM [{e.address}] -> A={e.value}",
    Opcode.OUT: lambda e: f"OUT {e.register}={e.value} ***",
    Opcode.INC: lambda e: f"INC {e.register}={e.value} {_z(e)}",
    Opcode.DEC: lambda e: f"DEC {e.register}={e.value} {_z(e)}",
    Opcode.ALU: _fmt_alu,
    Opcode.HLT: lambda e: "HLT - CPU Halted",
}


def format_event(event) -> str:
    """Render one TraceEvent as a single line."""
    head = (f"PC={event.pc:x} Instr=0x{event.raw:02x} "
            f"Op=0x{event.opcode:x} Operand=0x{event.operand:x}")
    fmt = _FORMATTERS.get(event.opcode)
    if fmt is None or (event.unknown and event.opcode != Opcode.ALU):
        return f"{head} UNKNOWN OPCODE!"
    return f"{head} {fmt(event)}"


def format_output(event) -> str:
    """Render the OUT value of an event, e.g. 'A=8'."""
    register, value = event.output
    return f"{register}={value}"


def format_state(state) -> str:
    """Render a MachineState: registers, flag, run status, RAM."""
    lines = [
        "=== CPU State ===",
        f"A={state.a} B={state.b} C={state.c} D={state.d}",
        f"PC={state.pc} Zero={int(state.zero)} Running={int(not state.halted)} "
        f"Steps={state.steps}",
        "",
        "=== RAM ===",
        hexdump(state.memory),
    ]
    return '\n'.join(lines)
