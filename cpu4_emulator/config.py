"""
CPU4 Emulator - Machine Geometry / Runtime Defaults
====================================================

Everything the emulator treats as a fixed constant lives here so the
CPU, memory and CLI modules agree on one set of numbers.

Machine summary:
  - 4-bit datapath, 8-bit instruction bytes (opcode:operand nibbles)
  - 4 registers A, B, C, D
  - 16-byte unified memory (program and data share it)
  - 4-bit program counter, single Zero flag
"""

# =============================================================================
#  DATAPATH
# =============================================================================
NIBBLE_BITS = 4
NIBBLE_MASK = 0x0F        # every register / address / operand value
BYTE_MASK = 0xFF          # memory cells hold whole instruction bytes
NIBBLE_MSB = 0x08         # bit 3, carried round by ROL
NIBBLE_LSB = 0x01         # bit 0, carried round by ROR


# =============================================================================
#  REGISTERS
# =============================================================================
# Index order is the 2-bit register selector used by MOV/OUT/INC/DEC.
REGISTER_NAMES = ('A', 'B', 'C', 'D')
REGISTER_SELECT_MASK = 0x03


# =============================================================================
#  MEMORY
# =============================================================================
MEMORY_SIZE = 16          # addresses 0x0-0xF
PROGRAM_BASE = 0x0        # programs always load at address 0
HEXDUMP_ROW = 8           # cells per hexdump line


# =============================================================================
#  EXECUTION
# =============================================================================
DEFAULT_MAX_STEPS = 100   # run() budget when the caller gives none


# =============================================================================
#  LOGGING
# =============================================================================
LOGGER_NAME = "cpu4_emulator"   # parent of every module logger
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
