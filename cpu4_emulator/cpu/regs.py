"""
CPU4 Emulator - Register File, Program Counter, Zero Flag

Register model:
  A   - 4-bit accumulator (arithmetic, ALU, LDA/LDM target)
  B   - 4-bit second operand (LDB target, ADD/SUB/ALU right-hand side)
  C   - 4-bit general purpose (reachable through MOV/OUT/INC/DEC)
  D   - 4-bit general purpose (reachable through MOV/OUT/INC/DEC)
  PC  - 4-bit program counter, wraps 15 -> 0
  Z   - Zero flag, recomputed by arithmetic/logic/INC/DEC only

Register selector encoding (2 bits): 0=A, 1=B, 2=C, 3=D.
Every write goes through a 4-bit mask, so no register can ever hold a
value outside 0-15.
"""

from ..config import NIBBLE_MASK, REGISTER_NAMES, REGISTER_SELECT_MASK


def mask4(value: int) -> int:
    """Reduce any integer to its low nibble (two's complement for negatives)."""
    return value & NIBBLE_MASK


def register_name(index: int) -> str:
    """Name of the register selected by the low 2 bits of index."""
    return REGISTER_NAMES[index & REGISTER_SELECT_MASK]


class Registers:
    """CPU4 register set.

    The selector is masked to 2 bits before lookup, so get()/set() are
    total over any integer argument and there is no fallback register.
    """

    __slots__ = ('A', 'B', 'C', 'D', 'PC', 'Z', 'steps')

    def __init__(self):
        self.A: int = 0
        self.B: int = 0
        self.C: int = 0
        self.D: int = 0
        self.PC: int = 0
        self.Z: bool = False
        self.steps: int = 0    # executed instruction counter

    # --- Indexed access (MOV/OUT/INC/DEC operand encoding) ---

    def get(self, index: int) -> int:
        return getattr(self, register_name(index))

    def set(self, index: int, value: int):
        setattr(self, register_name(index), mask4(value))

    # --- Flag access ---

    @property
    def zero(self) -> bool:
        return self.Z

    # --- Program counter ---

    def advance_pc(self) -> int:
        """Move PC to the next cell (mod 16) and return the new value."""
        self.PC = mask4(self.PC + 1)
        return self.PC

    def jump(self, addr: int):
        self.PC = mask4(addr)

    # --- Display ---

    def display(self) -> str:
        """One-line register dump for debugging."""
        return (f"PC={self.PC:X} A={self.A:X} B={self.B:X} "
                f"C={self.C:X} D={self.D:X} Z={int(self.Z)}")

    def reset(self):
        """Reset to power-on state (all zero, flag clear)."""
        self.A = 0
        self.B = 0
        self.C = 0
        self.D = 0
        self.PC = 0
        self.Z = False
        self.steps = 0
