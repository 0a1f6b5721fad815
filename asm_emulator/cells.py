"""
Memory cells: the tagged value held by one memory slot.

A cell is one of:
  Uninitialized    nothing has been stored yet
  Integer          a signed number
  InstructionCell  a decoded instruction placed by the loader

Cells are immutable; storing a new value replaces the whole cell. The
accessors as_int() / as_instruction() raise CellTypeError on a variant
mismatch so callers can either branch on .kind first or catch the error.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass

from .ast_nodes import Instruction
from .renderer import render_instruction


class CellKind(enum.Enum):
    EMPTY = "empty"
    NUMBER = "number"
    INSTRUCTION = "instruction"


class CellTypeError(TypeError):
    """A cell was read as a variant it does not hold."""
    def __init__(self, cell: Cell, expected: CellKind):
        self.cell = cell
        self.expected = expected
        super().__init__(f"Expected a {expected.value} cell, got {cell!r}")


@dataclass(frozen=True)
class Cell:
    """Base class for memory cells."""

    @property
    def kind(self) -> CellKind:
        raise NotImplementedError

    def as_int(self) -> int:
        raise CellTypeError(self, CellKind.NUMBER)

    def as_instruction(self) -> Instruction:
        raise CellTypeError(self, CellKind.INSTRUCTION)

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Uninitialized(Cell):

    @property
    def kind(self) -> CellKind:
        return CellKind.EMPTY

    def render(self) -> str:
        # Empty text keeps memory dumps compact
        return ""

    def __repr__(self) -> str:
        return "Uninitialized"


@dataclass(frozen=True)
class Integer(Cell):
    value: int = 0

    @property
    def kind(self) -> CellKind:
        return CellKind.NUMBER

    def as_int(self) -> int:
        return self.value

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class InstructionCell(Cell):
    instruction: Instruction

    @property
    def kind(self) -> CellKind:
        return CellKind.INSTRUCTION

    def as_instruction(self) -> Instruction:
        return self.instruction

    def render(self) -> str:
        return render_instruction(self.instruction)


UNINITIALIZED = Uninitialized()
