"""
Loader: assembly source text to a ready-to-run Environment.

Pipeline:
    ┌────────┐   ┌───────┐   ┌──────────┐   ┌─────────┐   ┌────────┐   ┌──────────────┐
    │ Source │──>│ Parse │──>│ Build ST │──>│ Resolve │──>│ Verify │──>│ Write memory │
    └────────┘   └───────┘   └──────────┘   └─────────┘   └────────┘   └──────────────┘

Any stage failure propagates (AsmSyntaxError, UnresolvedSymbolError,
VerificationError) and no environment is produced. The returned
environment has mutable memory, instruction i in cell i, and its input
queue seeded from the configuration.
"""

from __future__ import annotations
import logging
from collections import deque
from dataclasses import replace
from typing import List, Optional

from .ast_nodes import Instruction
from .cells import InstructionCell
from .config import MachineConfig
from .environment import Environment, MemoryModeError
from .memory import MemoryRangeError
from .parser import parse_source
from .symbols import build_symbol_table, extract_instructions, resolve_symbols, verify_program

logger = logging.getLogger(__name__)


def write_instructions(env: Environment, instructions: List[Instruction], start: int = 0) -> Environment:
    """Store one instruction per cell from address start; sets static_size.

    The whole range is checked first, so a failed call writes nothing.
    """
    end = start + len(instructions)
    if start < 0 or end > env.capacity:
        bad = start if start < 0 else max(start, env.capacity)
        raise MemoryRangeError(bad, env.capacity)
    if env.is_frozen:
        raise MemoryModeError("Environment memory is frozen; thaw() it before writing")

    address = start
    for instr in instructions:
        env.write(address, InstructionCell(instr))
        address += 1
    env.static_size = address
    return env


def load_source(source: str, config: Optional[MachineConfig] = None) -> Environment:
    """Parse, resolve, verify and load a program.

    Args:
        source: Assembly source text.
        config: Memory size and input seed (defaults: 20 cells, input [5]).

    Returns:
        Environment in mutable-memory mode, ready for execution.
    """
    config = config or MachineConfig()

    program = parse_source(source)
    logger.debug(f"Parsed {len(program.declarations)} declarations")

    table = build_symbol_table(program)
    table = resolve_symbols(program, table)
    verify_program(program, table, config.memory_size)
    logger.debug(f"Resolved and verified {len(table)} symbols")

    instructions = extract_instructions(program)

    env = replace(
        Environment.initial(config.memory_size),
        input_queue=deque(config.input_seed),
        symbols=table,
    )
    env = env.thaw()
    write_instructions(env, instructions)

    logger.info(f"Loaded {env.static_size} instructions into {env.capacity}-cell memory")
    return env
