"""
AST Node definitions for the assembly language.

Defines the tree produced by the parser and consumed by the symbol table,
the loader and the renderer. Each addressing mode is its own node type so
that consumers dispatch on the type instead of inspecting flags.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import List, Union

__all__ = [
    'ASTNode', 'Register', 'Value', 'Symbol', 'Number', 'Location',
    'Destination', 'DRegister', 'DValue', 'DIndex', 'DPostInc', 'DPostDec',
    'DPreInc', 'DPreDec', 'DIndirect', 'Immediate', 'Source',
    'Opcode', 'TWO_OPERAND_OPCODES', 'TRANSFER_OPCODES',
    'Instruction', 'TwoOperandInstruction', 'TransferInstruction', 'BareInstruction',
    'Declaration', 'LabelDecl', 'ByteAlloc', 'WordAlloc', 'InstructionDecl',
    'ValueDecl', 'Program',
]


# ──────────────────────────────────────────────
# Base AST node
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


# ──────────────────────────────────────────────
# Values, registers, locations
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Register(ASTNode):
    """A named machine register: A, SP or PC."""
    name: str = ""


@dataclass(frozen=True)
class Value(ASTNode):
    """Base class for operand values."""


@dataclass(frozen=True)
class Symbol(Value):
    """A reference to a label, allocation or constant by name."""
    name: str = ""


@dataclass(frozen=True)
class Number(Value):
    """An unsigned literal numeral."""
    value: int = 0


Location = Union[Register, Value]


# ──────────────────────────────────────────────
# Destination operands (one class per addressing mode)
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Destination(ASTNode):
    """Base class for operands that can be written to."""


@dataclass(frozen=True)
class DRegister(Destination):
    register: Register = field(default_factory=Register)


@dataclass(frozen=True)
class DValue(Destination):
    """Direct addressing: the value is the memory address."""
    value: Value = field(default_factory=Number)


@dataclass(frozen=True)
class DIndex(Destination):
    """Indexed: (location)offset"""
    location: Location = field(default_factory=Register)
    offset: Value = field(default_factory=Number)


@dataclass(frozen=True)
class DPostInc(Destination):
    """(location)+"""
    location: Location = field(default_factory=Register)


@dataclass(frozen=True)
class DPostDec(Destination):
    """(location)-"""
    location: Location = field(default_factory=Register)


@dataclass(frozen=True)
class DPreInc(Destination):
    """+(location)"""
    location: Location = field(default_factory=Register)


@dataclass(frozen=True)
class DPreDec(Destination):
    """-(location)"""
    location: Location = field(default_factory=Register)


@dataclass(frozen=True)
class DIndirect(Destination):
    """(location)"""
    location: Location = field(default_factory=Register)


@dataclass(frozen=True)
class Immediate(ASTNode):
    """#value, only valid as a source operand."""
    value: Value = field(default_factory=Number)


Source = Union[Destination, Immediate]


# ──────────────────────────────────────────────
# Instructions
# ──────────────────────────────────────────────

class Opcode(enum.Enum):
    # Two-operand: source, destination
    MOVE = "MOVE"
    ADD = "ADD"
    SUB = "SUB"
    MULT = "MULT"
    DIV = "DIV"
    MOD = "MOD"

    # Control transfer: one target value
    JUMP = "JUMP"
    CALL = "CALL"
    BEQ = "BEQ"
    BNE = "BNE"
    BLT = "BLT"
    BGT = "BGT"
    BLE = "BLE"
    BGE = "BGE"

    # No operands
    RETURN = "RETURN"
    HALT = "HALT"

    @property
    def is_two_operand(self) -> bool:
        return self in TWO_OPERAND_OPCODES

    @property
    def is_transfer(self) -> bool:
        return self in TRANSFER_OPCODES


TWO_OPERAND_OPCODES = frozenset({
    Opcode.MOVE, Opcode.ADD, Opcode.SUB, Opcode.MULT, Opcode.DIV, Opcode.MOD,
})

TRANSFER_OPCODES = frozenset({
    Opcode.JUMP, Opcode.CALL,
    Opcode.BEQ, Opcode.BNE, Opcode.BLT, Opcode.BGT, Opcode.BLE, Opcode.BGE,
})


@dataclass(frozen=True)
class Instruction(ASTNode):
    """Base class for decoded instructions."""
    opcode: Opcode = Opcode.HALT


@dataclass(frozen=True)
class TwoOperandInstruction(Instruction):
    """MOVE/ADD/SUB/MULT/DIV/MOD source destination"""
    source: Source = field(default_factory=Immediate)
    dest: Destination = field(default_factory=DValue)


@dataclass(frozen=True)
class TransferInstruction(Instruction):
    """JUMP/CALL/Bxx target"""
    target: Value = field(default_factory=Number)


@dataclass(frozen=True)
class BareInstruction(Instruction):
    """RETURN, HALT"""


# ──────────────────────────────────────────────
# Declarations
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Declaration(ASTNode):
    """Base class for top-level program declarations."""


@dataclass(frozen=True)
class LabelDecl(Declaration):
    """name: binds name to the address of the next instruction."""
    name: str = ""


@dataclass(frozen=True)
class ByteAlloc(Declaration):
    """.BYTE name count"""
    name: str = ""
    count: int = 1


@dataclass(frozen=True)
class WordAlloc(Declaration):
    """.WORD name count"""
    name: str = ""
    count: int = 1


@dataclass(frozen=True)
class InstructionDecl(Declaration):
    instruction: Instruction = field(default_factory=BareInstruction)


@dataclass(frozen=True)
class ValueDecl(Declaration):
    """.EQU name value: a named literal constant."""
    name: str = ""
    value: int = 0


@dataclass(frozen=True)
class Program(ASTNode):
    """Root node: declarations in source order."""
    declarations: List[Declaration] = field(default_factory=list)
