"""
Decoder and ALU unit tests - pure functions, no emulator instance.
"""

import pytest

from cpu4_emulator.cpu import alu
from cpu4_emulator.cpu.decoder import (
    AluOp,
    Opcode,
    decode_alu,
    decode_instruction,
    encode,
    encode_mov,
    split_byte,
)
from cpu4_emulator.cpu.regs import Registers, mask4, register_name


class TestDecoder:

    def test_split_byte(self):
        assert split_byte(0x3F) == (0x3, 0xF)
        assert split_byte(0x1FA) == (0xF, 0xA)   # masked to 8 bits first

    def test_every_opcode_nibble_is_assigned(self):
        for nibble in range(16):
            ins = decode_instruction(nibble << 4)
            assert isinstance(ins.opcode, Opcode)
            assert ins.opcode == nibble

    def test_operand(self):
        ins = decode_instruction(0x8C)
        assert ins.opcode is Opcode.JZ
        assert ins.operand == 0xC
        assert ins.alu_op is None
        assert ins.mnemonic == 'JZ'
        assert ins.raw == 0x8C

    def test_alu_second_stage(self):
        for sub in range(8):
            ins = decode_instruction(0xE0 | sub)
            assert ins.opcode is Opcode.ALU
            assert ins.alu_op is AluOp(sub)
            assert ins.mnemonic == AluOp(sub).name
            assert ins.is_known

    def test_alu_unknown_sub_op(self):
        for sub in range(8, 16):
            ins = decode_instruction(0xE0 | sub)
            assert ins.alu_op is None
            assert ins.mnemonic == 'ALU?'
            assert not ins.is_known

    def test_non_alu_operand_is_not_a_sub_op(self):
        """Operand 0 under LDA must not decode as ALU AND."""
        assert decode_instruction(0x10).alu_op is None

    def test_decode_alu_masks(self):
        assert decode_alu(0x12) is AluOp.XOR
        assert decode_alu(0x9) is None

    def test_decode_is_pure(self):
        assert decode_instruction(0xB2) == decode_instruction(0xB2)

    def test_encode(self):
        assert encode(Opcode.LDA, 5) == 0x15
        assert encode(Opcode.ALU, AluOp.ROR) == 0xE7
        assert encode_mov(src=1, dst=2) == 0x96


class TestAlu:

    @pytest.mark.parametrize("fn,a,b,expected", [
        (alu.add4, 5, 3, 8),
        (alu.add4, 15, 1, 0),
        (alu.add4, 9, 9, 2),
        (alu.sub4, 5, 3, 2),
        (alu.sub4, 3, 5, 14),
        (alu.and4, 12, 10, 8),
        (alu.or4, 12, 10, 14),
        (alu.xor4, 12, 10, 6),
        (alu.xor4, 7, 7, 0),
    ])
    def test_binary(self, fn, a, b, expected):
        result, zero = fn(a, b)
        assert result == expected
        assert zero == (expected == 0)

    @pytest.mark.parametrize("fn,a,expected", [
        (alu.inc4, 14, 15),
        (alu.inc4, 15, 0),
        (alu.dec4, 1, 0),
        (alu.dec4, 0, 15),
        (alu.not4, 0, 15),
        (alu.not4, 0b1010, 0b0101),
        (alu.shl4, 0b0011, 0b0110),
        (alu.shl4, 0b1001, 0b0010),
        (alu.shr4, 0b1100, 0b0110),
        (alu.shr4, 0b0001, 0),
        (alu.rol4, 0b1001, 0b0011),
        (alu.rol4, 0b0011, 0b0110),
        (alu.rol4, 0b1000, 0b0001),
        (alu.ror4, 0b0001, 0b1000),
        (alu.ror4, 0b0110, 0b0011),
        (alu.ror4, 0b0011, 0b1001),
    ])
    def test_unary(self, fn, a, expected):
        result, zero = fn(a)
        assert result == expected
        assert zero == (expected == 0)

    def test_results_stay_in_nibble_range(self):
        fns = [alu.add4, alu.sub4, alu.and4, alu.or4, alu.xor4, alu.not4,
               alu.shl4, alu.shr4, alu.rol4, alu.ror4]
        for fn in fns:
            for a in range(16):
                for b in range(16):
                    assert 0 <= fn(a, b)[0] <= 15


class TestRegisters:

    def test_mask4(self):
        assert mask4(16) == 0
        assert mask4(-1) == 15

    def test_register_name_total(self):
        assert [register_name(i) for i in range(8)] == list('ABCDABCD')

    def test_set_masks_value(self):
        regs = Registers()
        regs.set(2, 0x1F)
        assert regs.C == 0xF

    def test_advance_pc_wraps(self):
        regs = Registers()
        regs.PC = 15
        assert regs.advance_pc() == 0

    def test_display(self):
        regs = Registers()
        regs.A, regs.B, regs.PC = 10, 3, 4
        assert regs.display() == "PC=4 A=A B=3 C=0 D=0 Z=0"
