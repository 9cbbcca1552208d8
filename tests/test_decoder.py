"""
Intcode Machine - Decoder and Tape Tests

The decoder is checked directly against a Tape, without a Machine, to
pin down mode digit extraction, parameter resolution and purity.
"""

import pytest

from intcode import (
    DEFAULT_INSTRUCTION_SET, InstructionSet, InvalidOpcode, MemoryFault, Tape,
    decode_instruction,
)
from intcode.cpu import alu
from intcode.cpu.decoder import OPCODES, split_modes


class TestTape:
    def test_dump_format(self):
        assert Tape([1, -2, 30]).dump() == "[1, -2, 30]"

    def test_dump_single_and_empty(self):
        assert Tape([99]).dump() == "[99]"
        assert Tape([]).dump() == "[]"

    def test_read_write(self):
        t = Tape([0, 0, 0])
        t[2] = 7
        assert t[2] == 7
        assert t.read(2) == 7
        assert len(t) == 3
        assert list(t) == [0, 0, 7]

    def test_out_of_range(self):
        t = Tape([1, 2, 3])
        for addr in (3, 100, -1):
            with pytest.raises(MemoryFault):
                t.read(addr)
            with pytest.raises(MemoryFault):
                t.write(addr, 0)
        assert t.snapshot() == (1, 2, 3)

    def test_fault_message(self):
        with pytest.raises(MemoryFault, match=r"Address 5 out of range \[0, 3\)"):
            Tape([1, 2, 3]).check(5)

    def test_snapshot_is_a_copy(self):
        t = Tape([1, 2])
        snap = t.snapshot()
        t[0] = 9
        assert snap == (1, 2)


class TestModeDigits:
    def test_split_modes(self):
        assert split_modes(1002, 3) == (0, 1, 0)
        assert split_modes(11105, 3) == (1, 1, 1)
        assert split_modes(99, 0) == ()
        assert split_modes(204, 1) == (2,)

    def test_missing_digits_default_to_position(self):
        assert split_modes(1, 3) == (0, 0, 0)


class TestDecode:
    def test_add_operands(self):
        t = Tape([1, 5, 6, 3, 99, 10, 20])
        ins = decode_instruction(t, 0)
        assert ins.mnemonic == 'ADD'
        assert ins.raw == (5, 6, 3)
        # reads are dereferenced, the write slot is a raw address
        assert ins.operands == (10, 20, 3)
        assert ins.next_pc == 4

    def test_decode_does_not_mutate(self):
        t = Tape([2, 0, 0, 0, 99])
        decode_instruction(t, 0)
        assert t.dump() == "[2, 0, 0, 0, 99]"

    def test_halt_has_no_operands(self):
        ins = decode_instruction(Tape([99]), 0)
        assert ins.mnemonic == 'HALT'
        assert ins.operands == ()
        assert ins.opcode.width == 1

    def test_decode_mid_tape(self):
        ins = decode_instruction(Tape([99, 4, 0, 99]), 1)
        assert ins.mnemonic == 'OUT'
        assert ins.operands == (99,)
        assert ins.next_pc == 3

    def test_unknown_opcode(self):
        with pytest.raises(InvalidOpcode) as exc:
            decode_instruction(Tape([42, 0, 0, 0]), 0)
        assert exc.value.opcode == 42
        assert exc.value.pc == 0

    def test_write_address_checked(self):
        with pytest.raises(MemoryFault) as exc:
            decode_instruction(Tape([3, 9]), 0)
        assert exc.value.address == 9
        assert exc.value.pc == 0

    def test_pc_off_tape(self):
        with pytest.raises(MemoryFault):
            decode_instruction(Tape([99]), 1)


class TestInstructionSet:
    def test_default_opcodes(self):
        assert set(OPCODES) == {1, 2, 3, 4, 99}
        for code in OPCODES:
            assert code in DEFAULT_INSTRUCTION_SET
        assert 5 not in DEFAULT_INSTRUCTION_SET

    def test_duplicate_opcode_rejected(self):
        iset = InstructionSet(OPCODES)
        with pytest.raises(ValueError, match="already registered"):
            iset.register(1, 'ADD2', 'rrw')

    def test_bad_registrations(self):
        iset = InstructionSet()
        with pytest.raises(ValueError):
            iset.register(100, 'BIG')
        with pytest.raises(ValueError):
            iset.register(6, 'JF', 'rx')
        with pytest.raises(ValueError):
            iset.register_mode(0, lambda tape, raw, kind: raw)
        with pytest.raises(ValueError):
            iset.register_mode(10, lambda tape, raw, kind: raw)

    def test_copy_is_independent(self):
        iset = DEFAULT_INSTRUCTION_SET.copy()
        iset.register(8, 'EQ', 'rrw')
        assert 8 in iset
        assert 8 not in DEFAULT_INSTRUCTION_SET
        assert len(iset) == len(DEFAULT_INSTRUCTION_SET) + 1

    def test_default_set_is_frozen(self):
        assert DEFAULT_INSTRUCTION_SET.frozen
        with pytest.raises(ValueError, match="frozen"):
            DEFAULT_INSTRUCTION_SET.register(5, 'JT', 'rr')
        with pytest.raises(ValueError, match="frozen"):
            DEFAULT_INSTRUCTION_SET.register_mode(1, lambda tape, raw, kind: raw)
        assert 5 not in DEFAULT_INSTRUCTION_SET
        assert not DEFAULT_INSTRUCTION_SET.copy().frozen

    def test_registered_opcode_decodes(self):
        iset = DEFAULT_INSTRUCTION_SET.copy()
        op = iset.register(6, 'JF', 'rr')
        assert op.width == 3
        ins = decode_instruction(Tape([6, 0, 0]), 0, iset)
        assert ins.mnemonic == 'JF'
        assert ins.operands == (6, 6)


class TestWordArithmetic:
    def test_wrap_boundaries(self):
        assert alu.wrap64(alu.WORD_MAX) == alu.WORD_MAX
        assert alu.wrap64(alu.WORD_MAX + 1) == alu.WORD_MIN
        assert alu.wrap64(alu.WORD_MIN - 1) == alu.WORD_MAX
        assert alu.wrap64(-1) == -1

    def test_add_mul(self):
        assert alu.add(2, 3) == 5
        assert alu.mul(-4, 5) == -20
        assert alu.mul(2 ** 32, 2 ** 32) == 0
