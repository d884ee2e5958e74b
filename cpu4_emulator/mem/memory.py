"""
CPU4 Emulator - 16-Cell Unified Memory

Memory map:
  $0-$F  One flat array shared by program bytes and data (Von Neumann)

Cells hold full 8-bit values because instruction bytes live in the same
store as data, but every address is a nibble. Addresses are masked to
4 bits before indexing, so there is no out-of-range access path.
Stores from the 4-bit registers naturally only ever write 0-15.
"""

from pathlib import Path
from typing import Iterable, Union

from ..config import BYTE_MASK, HEXDUMP_ROW, MEMORY_SIZE, NIBBLE_MASK, PROGRAM_BASE


class Memory:
    """16-byte flat memory with wrapped 4-bit addressing."""

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)

    def __len__(self) -> int:
        return MEMORY_SIZE

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        return self._mem[addr & NIBBLE_MASK]

    def write(self, addr: int, value: int):
        self._mem[addr & NIBBLE_MASK] = value & BYTE_MASK

    def clear(self):
        """Zero every cell."""
        for addr in range(MEMORY_SIZE):
            self._mem[addr] = 0

    # --- Bulk load ---

    def load_program(self, data: Union[bytes, bytearray, Iterable[int]]) -> int:
        """Copy program bytes in from address 0.

        Anything past the 16th byte is dropped. Cells beyond the program
        keep whatever they held. Returns the number of bytes copied.
        """
        count = 0
        for i, byte in enumerate(data):
            if i >= MEMORY_SIZE:
                break
            self._mem[PROGRAM_BASE + i] = byte & BYTE_MASK
            count += 1
        return count

    def load_file(self, filepath: Union[str, Path]) -> int:
        """Load a raw binary image. Missing files raise FileNotFoundError."""
        return self.load_program(Path(filepath).read_bytes())

    # --- Snapshots ---

    def snapshot(self) -> bytes:
        """Immutable copy of all 16 cells."""
        return bytes(self._mem)

    # --- Hex dump ---

    def hexdump(self) -> str:
        return hexdump(self._mem)


def hexdump(data: bytes) -> str:
    """Dump cells as `addr:0xNN`, HEXDUMP_ROW per line."""
    lines = []
    for row in range(0, len(data), HEXDUMP_ROW):
        lines.append(' '.join(
            f'{addr:x}:0x{data[addr]:02x}'
            for addr in range(row, min(row + HEXDUMP_ROW, len(data)))
        ))
    return '\n'.join(lines)
