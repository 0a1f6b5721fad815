"""
asm_emulator: execution environment for a small assembly language
====================================================================
A typed memory model (accumulator, stack pointer, program counter, cell
RAM), a loader that turns assembly source into that memory image, and a
disassembler that renders memory cells back into assembly text.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────────┐    ┌─────────────┐
    │  Source  │───>│  Lexer   │───>│  Parser  │───>│ Symbol table │───>│   Loader    │
    │  (.asm)  │    │ (tokens) │    │  (AST)   │    │ build/resolve│    │ Environment │
    └──────────┘    └──────────┘    └──────────┘    │    verify    │    └──────┬──────┘
                                                    └──────────────┘           │
                                               ┌──────────┐                    │
                                               │ Renderer │<── cells / dump ───┘
                                               └──────────┘

    - lexer.py / parser.py: tokenizer and recursive-descent parser
    - ast_nodes.py:         dataclass tree, one class per addressing mode
    - symbols.py:           symbol table passes
    - cells.py:             Uninitialized / Integer / InstructionCell
    - memory.py:            FrozenMemory / MutableMemory, thaw, freeze
    - environment.py:       machine state, snapshot, text dump
    - loader.py:            the load pipeline
    - renderer.py:          instruction -> assembly text

The fetch/decode/execute engine is not part of this package; it receives
the Environment returned by load_source() and reads/writes it directly.
"""

__version__ = "0.1.0"

from .ast_nodes import *
from .lexer import AsmSyntaxError, Lexer, LexerError, Token, TokenType
from .parser import ParseError, Parser, parse_source
from .cells import (
    Cell, CellKind, CellTypeError, Integer, InstructionCell, UNINITIALIZED, Uninitialized,
)
from .memory import (
    FrozenMemory, MemoryImage, MemoryRangeError, MutableMemory, diff, freeze, make_empty, thaw,
)
from .symbols import (
    SymbolEntry, SymbolKind, SymbolTable, UnresolvedSymbolError, VerificationError,
    build_symbol_table, extract_instructions, resolve_symbols, verify_program,
)
from .config import DEFAULT_INPUT_SEED, DEFAULT_MEMORY_SIZE, MachineConfig
from .environment import Environment, MemoryModeError
from .loader import load_source, write_instructions
from .renderer import (
    render_destination, render_instruction, render_location, render_register,
    render_source, render_value,
)
