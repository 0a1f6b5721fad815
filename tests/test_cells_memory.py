"""
Cell and memory model tests.

Tests cover:
  - Cell classification and accessors (including mismatch errors)
  - Cell rendering: integers, instructions, the empty uninitialized form
  - make_empty / thaw / freeze and their round-trip identity
  - Copy independence between modes
  - Bounds checking and write validation
  - Snapshot diffing
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from asm_emulator import (
    BareInstruction, CellKind, CellTypeError, FrozenMemory, Immediate, Integer,
    InstructionCell, MemoryRangeError, MutableMemory, Number, Opcode, Register,
    DRegister, TwoOperandInstruction, UNINITIALIZED, Uninitialized,
    diff, freeze, make_empty, thaw,
)


def _add_3_a():
    return TwoOperandInstruction(
        opcode=Opcode.ADD,
        source=Immediate(value=Number(value=3)),
        dest=DRegister(register=Register(name="A")),
    )


# ─── Cells ─────────────────────────────────

class TestCellKinds:
    def test_classification(self):
        assert UNINITIALIZED.kind is CellKind.EMPTY
        assert Integer(7).kind is CellKind.NUMBER
        assert InstructionCell(_add_3_a()).kind is CellKind.INSTRUCTION

    def test_as_int(self):
        assert Integer(-12).as_int() == -12

    def test_as_instruction(self):
        instr = _add_3_a()
        assert InstructionCell(instr).as_instruction() == instr

    def test_as_int_on_wrong_variant_raises(self):
        """Reading an uninitialized or instruction cell as a number is an error."""
        with pytest.raises(CellTypeError):
            UNINITIALIZED.as_int()
        with pytest.raises(CellTypeError):
            InstructionCell(_add_3_a()).as_int()

    def test_as_instruction_on_wrong_variant_raises(self):
        with pytest.raises(CellTypeError) as exc:
            Integer(1).as_instruction()
        assert exc.value.expected is CellKind.INSTRUCTION
        assert isinstance(exc.value, TypeError)

    def test_cells_compare_by_value(self):
        assert Integer(3) == Integer(3)
        assert Integer(3) != Integer(4)
        assert Uninitialized() == UNINITIALIZED
        assert Integer(0) != UNINITIALIZED

    def test_instruction_cell_requires_instruction(self):
        with pytest.raises(TypeError):
            InstructionCell()

    def test_cells_are_immutable(self):
        cell = Integer(1)
        with pytest.raises(AttributeError):
            cell.value = 2


class TestCellRendering:
    def test_integer_renders_decimal(self):
        assert Integer(42).render() == "42"
        assert Integer(-5).render() == "-5"

    def test_uninitialized_renders_empty(self):
        assert UNINITIALIZED.render() == ""
        assert str(UNINITIALIZED) == ""

    def test_instruction_renders_assembly(self):
        assert InstructionCell(_add_3_a()).render() == "ADD #3 A"

    def test_str_matches_render(self):
        cell = InstructionCell(BareInstruction(opcode=Opcode.HALT))
        assert str(cell) == cell.render() == "HALT"

    def test_uninitialized_repr_is_visible(self):
        assert repr(UNINITIALIZED) == "Uninitialized"


# ─── Memory ────────────────────────────────

class TestMakeEmpty:
    def test_all_cells_uninitialized(self):
        mem = make_empty(20)
        assert isinstance(mem, FrozenMemory)
        assert mem.capacity == 20
        assert all(cell == UNINITIALIZED for cell in mem)

    def test_zero_capacity(self):
        assert len(make_empty(0)) == 0

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            make_empty(-1)

    def test_frozen_memory_has_no_write(self):
        mem = make_empty(4)
        assert not hasattr(mem, "write")
        with pytest.raises(TypeError):
            mem[0] = Integer(1)


class TestThawFreeze:
    def test_thaw_gives_mutable(self):
        mem = thaw(make_empty(5))
        assert isinstance(mem, MutableMemory)
        assert not mem.is_frozen

    def test_freeze_gives_frozen(self):
        mem = freeze(thaw(make_empty(5)))
        assert isinstance(mem, FrozenMemory)
        assert mem.is_frozen

    def test_thaw_then_freeze_round_trip(self):
        """freeze(thaw(r)) is element-wise identical to r."""
        mutable = thaw(make_empty(6))
        mutable.write(0, InstructionCell(_add_3_a()))
        mutable.write(3, Integer(9))
        frozen = freeze(mutable)

        assert freeze(thaw(frozen)) == frozen
        assert freeze(thaw(frozen)).cells() == frozen.cells()

    def test_freeze_then_thaw_round_trip(self):
        """thaw(freeze(m)) is element-wise identical to m."""
        mutable = thaw(make_empty(6))
        mutable.write(1, Integer(-4))
        mutable.write(5, InstructionCell(BareInstruction(opcode=Opcode.RETURN)))

        again = thaw(freeze(mutable))
        assert again == mutable
        assert [again.read(i) for i in range(6)] == [mutable.read(i) for i in range(6)]

    def test_thaw_copy_is_independent(self):
        frozen = make_empty(3)
        mutable = thaw(frozen)
        mutable.write(0, Integer(1))
        assert frozen.read(0) == UNINITIALIZED

    def test_freeze_copy_is_independent(self):
        mutable = thaw(make_empty(3))
        frozen = freeze(mutable)
        mutable.write(2, Integer(8))
        assert frozen.read(2) == UNINITIALIZED

    def test_conversions_accept_either_mode(self):
        """thaw of a mutable image and freeze of a frozen image still copy."""
        mutable = thaw(make_empty(2))
        other = thaw(mutable)
        other.write(0, Integer(1))
        assert mutable.read(0) == UNINITIALIZED

        frozen = make_empty(2)
        assert freeze(frozen) == frozen
        assert freeze(frozen) is not frozen

    def test_modes_are_not_equal(self):
        frozen = make_empty(2)
        assert thaw(frozen) != frozen
        assert thaw(frozen).cells() == frozen.cells()


class TestBounds:
    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_read_out_of_range(self, index):
        with pytest.raises(MemoryRangeError):
            make_empty(4).read(index)

    @pytest.mark.parametrize("index", [-1, 4])
    def test_write_out_of_range(self, index):
        mem = thaw(make_empty(4))
        with pytest.raises(MemoryRangeError) as exc:
            mem.write(index, Integer(0))
        assert exc.value.capacity == 4
        assert isinstance(exc.value, IndexError)

    def test_last_cell_is_addressable(self):
        mem = thaw(make_empty(4))
        mem.write(3, Integer(1))
        assert mem.read(3) == Integer(1)

    def test_write_rejects_non_cells(self):
        mem = thaw(make_empty(4))
        with pytest.raises(TypeError):
            mem.write(0, 5)


class TestDiff:
    def test_reports_changed_cells(self):
        before = make_empty(4)
        mutable = thaw(before)
        mutable.write(1, Integer(3))
        mutable.write(2, Integer(4))
        changes = diff(before, freeze(mutable))
        assert changes == {
            1: (UNINITIALIZED, Integer(3)),
            2: (UNINITIALIZED, Integer(4)),
        }

    def test_identical_images(self):
        assert diff(make_empty(3), thaw(make_empty(3))) == {}

    def test_capacity_mismatch(self):
        with pytest.raises(ValueError):
            diff(make_empty(3), make_empty(4))
