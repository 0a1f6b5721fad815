"""
Disassembler: converts decoded instructions back into assembly text.

Every function here is pure and total over well-formed AST nodes. The
output is the canonical syntax accepted by the parser, so rendering a
parsed instruction reproduces its source modulo whitespace, comments and
the RET alias.

    MOVE #3 A          two-operand: mnemonic source destination
    JUMP loop          control transfer: mnemonic target
    HALT               no operands

Destination forms:

    A  5  lbl          register / value
    (A)4               indexed
    (A)+  (A)-         post-increment / post-decrement
    +(A)  -(A)         pre-increment / pre-decrement
    (A)                indirect
"""

from __future__ import annotations

from .ast_nodes import (
    BareInstruction, DIndex, DIndirect, DPostDec, DPostInc, DPreDec, DPreInc,
    DRegister, DValue, Destination, Immediate, Instruction, Location, Number,
    Register, Source, Symbol, TransferInstruction, TwoOperandInstruction, Value,
)


def render_register(reg: Register) -> str:
    return reg.name


def render_value(value: Value) -> str:
    """Symbols render by name, numbers as decimal."""
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, Number):
        return str(value.value)
    raise TypeError(f"Not a value node: {value!r}")


def render_location(loc: Location) -> str:
    if isinstance(loc, Register):
        return render_register(loc)
    return render_value(loc)


def render_destination(dest: Destination) -> str:
    if isinstance(dest, DRegister):
        return render_register(dest.register)
    if isinstance(dest, DValue):
        return render_value(dest.value)
    if isinstance(dest, DIndex):
        return f"({render_location(dest.location)}){render_value(dest.offset)}"
    if isinstance(dest, DPostInc):
        return f"({render_location(dest.location)})+"
    if isinstance(dest, DPostDec):
        return f"({render_location(dest.location)})-"
    if isinstance(dest, DPreInc):
        return f"+({render_location(dest.location)})"
    if isinstance(dest, DPreDec):
        return f"-({render_location(dest.location)})"
    if isinstance(dest, DIndirect):
        return f"({render_location(dest.location)})"
    raise TypeError(f"Not a destination node: {dest!r}")


def render_source(src: Source) -> str:
    if isinstance(src, Immediate):
        return "#" + render_value(src.value)
    return render_destination(src)


def render_instruction(instr: Instruction) -> str:
    """Render an instruction as 'MNEMONIC operand...'."""
    if isinstance(instr, TwoOperandInstruction):
        return f"{instr.opcode.value} {render_source(instr.source)} {render_destination(instr.dest)}"
    if isinstance(instr, TransferInstruction):
        return f"{instr.opcode.value} {render_value(instr.target)}"
    if isinstance(instr, BareInstruction):
        return instr.opcode.value
    raise TypeError(f"Not an instruction node: {instr!r}")
