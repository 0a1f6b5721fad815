"""
Machine environment: the complete state of the virtual machine.

  A            accumulator cell
  SP           stack pointer; starts at the memory capacity, grows downward
  PC           program counter; starts at 0
  RAM          FrozenMemory or MutableMemory, never both
  StaticSize   cells [0, StaticSize) hold the loaded code, the rest is heap/stack
  StdIn        FIFO of pending input values
  StdOut       output values, append-only
  Symbols      resolved symbol table of the loaded program

An environment is built frozen, thawed before anything is written or
executed, and snapshotted (frozen copy) for display and comparison.
thaw() and snapshot() return new environments; the receiver keeps its mode.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, List, Union

from .cells import Cell, CellKind, UNINITIALIZED
from .config import DEFAULT_MEMORY_SIZE
from .memory import FrozenMemory, MutableMemory, freeze, make_empty, thaw
from .symbols import EMPTY_TABLE, SymbolTable


class MemoryModeError(RuntimeError):
    """Memory was written while frozen."""


@dataclass
class Environment:
    accumulator: Cell = UNINITIALIZED
    stack_pointer: int = DEFAULT_MEMORY_SIZE
    program_counter: int = 0
    memory: Union[FrozenMemory, MutableMemory] = field(
        default_factory=lambda: make_empty(DEFAULT_MEMORY_SIZE))
    static_size: int = 0
    input_queue: Deque[int] = field(default_factory=deque)
    output_queue: List[int] = field(default_factory=list)
    symbols: SymbolTable = EMPTY_TABLE

    @classmethod
    def initial(cls, capacity: int = DEFAULT_MEMORY_SIZE) -> Environment:
        """Fresh environment: empty frozen memory of the given capacity."""
        return cls(
            accumulator=UNINITIALIZED,
            stack_pointer=capacity,
            program_counter=0,
            memory=make_empty(capacity),
            static_size=0,
            input_queue=deque(),
            output_queue=[],
            symbols=EMPTY_TABLE,
        )

    # --- Memory mode ---

    @property
    def capacity(self) -> int:
        return self.memory.capacity

    @property
    def is_frozen(self) -> bool:
        return self.memory.is_frozen

    def _copy(self, memory) -> Environment:
        return replace(
            self,
            memory=memory,
            input_queue=deque(self.input_queue),
            output_queue=list(self.output_queue),
        )

    def thaw(self) -> Environment:
        """Copy of this environment with mutable memory."""
        return self._copy(thaw(self.memory))

    def snapshot(self) -> Environment:
        """Copy of this environment with frozen memory.

        Non-destructive: a running environment stays mutable and keeps its
        own queues, so the snapshot can be inspected while execution goes on.
        """
        return self._copy(freeze(self.memory))

    # --- Memory access ---

    def read(self, address: int) -> Cell:
        return self.memory.read(address)

    def write(self, address: int, cell: Cell) -> None:
        if self.memory.is_frozen:
            raise MemoryModeError("Environment memory is frozen; thaw() it before writing")
        self.memory.write(address, cell)

    # --- Display ---

    def render(self) -> str:
        """Multi-line dump of the full machine state."""
        env = self if self.is_frozen else self.snapshot()
        ram = "\n         ".join(cell.render() for cell in env.memory)
        acc = env.accumulator
        acc_text = repr(acc) if acc.kind is CellKind.EMPTY else acc.render()
        return (
            "ENVIRONMENT ["
            f"\n   A = {acc_text}"
            f"\n   SP = {env.stack_pointer}"
            f"\n   PC = {env.program_counter}"
            f"\n   StdIn = {list(env.input_queue)}"
            f"\n   StdOut = {env.output_queue}"
            f"\n   StaticSize = {env.static_size}"
            f"\n   RAM = {ram}"
            f"\n   Symbols = {env.symbols}"
            "\n]\n"
        )

    def __str__(self) -> str:
        return self.render()
