"""
Symbol table: building, resolution and static verification.

Addresses follow the one-cell-per-instruction memory model:

  Labels       bind to the index of the next instruction.
  .BYTE/.WORD  allocate consecutive cells after the code, in declaration
               order, one cell per allocated unit.
  .EQU         binds a constant; no storage.

    start:  MOVE #0 A       ; start = 0
    loop:   ADD #1 A        ; loop  = 1
            JUMP loop
            .BYTE buf 4     ; buf   = 3 (cells 3..6)
            .EQU  ten 10    ; ten   = 10

The three passes mirror the loader stages: build records every definition
(duplicates included), resolve checks that each referenced name exists,
verify enforces the static rules and reports every violation at once.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .ast_nodes import (
    ByteAlloc, DIndex, DRegister, DValue, Destination, Immediate, InstructionDecl,
    Instruction, LabelDecl, Number, Program, Symbol, TransferInstruction,
    TwoOperandInstruction, Value, ValueDecl, WordAlloc,
)

logger = logging.getLogger(__name__)

__all__ = [
    'SymbolKind', 'SymbolEntry', 'SymbolTable',
    'UnresolvedSymbolError', 'VerificationError',
    'build_symbol_table', 'resolve_symbols', 'verify_program',
    'extract_instructions',
]


class UnresolvedSymbolError(Exception):
    """One or more referenced names have no definition."""
    def __init__(self, missing: Dict[str, int]):
        self.missing = dict(sorted(missing.items()))
        names = ", ".join(f"'{name}' (line {line})" for name, line in self.missing.items())
        super().__init__(f"Undefined symbol(s): {names}")


class VerificationError(Exception):
    """The program breaks one or more static rules."""
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Verification failed:\n" + "\n".join(self.problems))


# ──────────────────────────────────────────────
# Table
# ──────────────────────────────────────────────

class SymbolKind(enum.Enum):
    LABEL = "label"
    BYTE = "byte"
    WORD = "word"
    CONSTANT = "const"


@dataclass(frozen=True)
class SymbolEntry:
    name: str
    kind: SymbolKind
    value: int          # address for labels/allocations, the constant itself for .EQU
    size: int = 0       # cells reserved (allocations only)
    line: int = 0

    def __str__(self) -> str:
        return f"{self.kind.value} {self.value}"


@dataclass(frozen=True)
class SymbolTable:
    """Definitions in declaration order. Immutable; passes return new tables.

    When a name is defined twice, lookups see the first definition; the
    verifier rejects such programs.
    """
    entries: Tuple[SymbolEntry, ...] = ()
    resolved: bool = False
    _index: Dict[str, SymbolEntry] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        index: Dict[str, SymbolEntry] = {}
        for entry in self.entries:
            index.setdefault(entry.name, entry)
        object.__setattr__(self, "entries", tuple(self.entries))
        object.__setattr__(self, "_index", index)

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> SymbolEntry:
        return self._index[name]

    def __len__(self) -> int:
        return len(self._index)

    def get(self, name: str) -> Optional[SymbolEntry]:
        return self._index.get(name)

    def lookup(self, name: str) -> int:
        """Address or constant value bound to name."""
        return self._index[name].value

    def names(self) -> List[str]:
        return list(self._index)

    def duplicates(self) -> Dict[str, List[int]]:
        """Names defined more than once: name -> definition lines."""
        lines: Dict[str, List[int]] = {}
        for entry in self.entries:
            lines.setdefault(entry.name, []).append(entry.line)
        return {name: ls for name, ls in lines.items() if len(ls) > 1}

    def __str__(self) -> str:
        body = ", ".join(f"{e.name}: {e}" for e in self._index.values())
        return "{" + body + "}"


EMPTY_TABLE = SymbolTable()


# ──────────────────────────────────────────────
# AST walking
# ──────────────────────────────────────────────

def extract_instructions(program: Program) -> List[Instruction]:
    """Instructions in source order; labels, allocations and constants dropped."""
    return [d.instruction for d in program.declarations if isinstance(d, InstructionDecl)]


def _dest_values(dest: Destination) -> Iterator[Value]:
    if isinstance(dest, DRegister):
        return
    if isinstance(dest, DValue):
        yield dest.value
        return
    # Every remaining form wraps a location, DIndex adds an offset
    if isinstance(dest.location, Value):
        yield dest.location
    if isinstance(dest, DIndex):
        yield dest.offset


def _operand_values(instr: Instruction) -> Iterator[Value]:
    if isinstance(instr, TwoOperandInstruction):
        if isinstance(instr.source, Immediate):
            yield instr.source.value
        else:
            yield from _dest_values(instr.source)
        yield from _dest_values(instr.dest)
    elif isinstance(instr, TransferInstruction):
        yield instr.target


def _referenced_symbols(program: Program) -> Iterator[Symbol]:
    for instr in extract_instructions(program):
        for value in _operand_values(instr):
            if isinstance(value, Symbol):
                yield value


# ──────────────────────────────────────────────
# Passes
# ──────────────────────────────────────────────

def build_symbol_table(program: Program) -> SymbolTable:
    """Assign an address or value to every defined name."""
    static_size = len(extract_instructions(program))
    entries: List[SymbolEntry] = []
    pc = 0
    heap = static_size

    for decl in program.declarations:
        if isinstance(decl, InstructionDecl):
            pc += 1
        elif isinstance(decl, LabelDecl):
            entries.append(SymbolEntry(decl.name, SymbolKind.LABEL, pc, line=decl.line))
        elif isinstance(decl, (ByteAlloc, WordAlloc)):
            kind = SymbolKind.BYTE if isinstance(decl, ByteAlloc) else SymbolKind.WORD
            entries.append(SymbolEntry(decl.name, kind, heap, size=decl.count, line=decl.line))
            heap += decl.count
        elif isinstance(decl, ValueDecl):
            entries.append(SymbolEntry(decl.name, SymbolKind.CONSTANT, decl.value, line=decl.line))

    for entry in entries:
        logger.debug(f"Symbol {entry.name} = {entry.kind.value} {entry.value}")

    return SymbolTable(tuple(entries))


def resolve_symbols(program: Program, table: SymbolTable) -> SymbolTable:
    """Check that every referenced name is defined.

    Returns the table marked resolved. Raises UnresolvedSymbolError naming
    each missing symbol with the first line it is used on.
    """
    missing: Dict[str, int] = {}
    for sym in _referenced_symbols(program):
        if sym.name not in table and sym.name not in missing:
            missing[sym.name] = sym.line

    if missing:
        raise UnresolvedSymbolError(missing)

    return SymbolTable(table.entries, resolved=True)


def verify_program(program: Program, table: SymbolTable, capacity: int) -> None:
    """Enforce static rules. Raises VerificationError listing every violation.

    Rules:
      - no name is defined twice
      - allocations reserve at least one cell
      - code plus allocations fit in memory
      - control transfers target labels or literal addresses, inside the code
    """
    problems: List[str] = []
    instructions = extract_instructions(program)
    static_size = len(instructions)

    for name, lines in table.duplicates().items():
        where = ", ".join(str(ln) for ln in lines)
        problems.append(f"Duplicate definition of '{name}' (lines {where})")

    allocated = 0
    for decl in program.declarations:
        if isinstance(decl, (ByteAlloc, WordAlloc)):
            if decl.count <= 0:
                problems.append(f"Line {decl.line}: allocation '{decl.name}' reserves no cells")
            allocated += decl.count

    if static_size + allocated > capacity:
        problems.append(
            f"Program needs {static_size} code + {allocated} data cells, "
            f"memory holds {capacity}"
        )

    for instr in instructions:
        if not isinstance(instr, TransferInstruction):
            continue
        target = instr.target
        if isinstance(target, Symbol):
            entry = table.get(target.name)
            if entry is not None and entry.kind is not SymbolKind.LABEL:
                problems.append(
                    f"Line {instr.line}: {instr.opcode.value} target '{target.name}' "
                    f"is a {entry.kind.value}, not a label"
                )
            elif entry is not None and entry.value >= static_size:
                # End-of-code labels may be defined but not jumped to
                problems.append(
                    f"Line {instr.line}: {instr.opcode.value} target '{target.name}' "
                    f"= {entry.value} is outside the code region [0, {static_size})"
                )
        elif isinstance(target, Number) and target.value >= static_size:
            problems.append(
                f"Line {instr.line}: {instr.opcode.value} target {target.value} "
                f"is outside the code region [0, {static_size})"
            )

    if problems:
        for problem in problems:
            logger.warning(problem)
        raise VerificationError(problems)
