"""
Machine memory: a fixed-capacity, zero-indexed array of cells.

Memory exists in one of two modes:

  FrozenMemory   tuple-backed, read-only; safe to share, compare and display
  MutableMemory  list-backed, written in place while loading and executing

thaw() and freeze() convert between the modes. Both always succeed, always
copy, and preserve every cell at its index, so

    freeze(thaw(frozen)) == frozen    and    thaw(freeze(mutable)) == mutable

element by element. Capacity never changes after construction.
"""

from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Tuple

from .cells import Cell, UNINITIALIZED


class MemoryRangeError(IndexError):
    """Address outside [0, capacity)."""
    def __init__(self, index: int, capacity: int):
        self.index = index
        self.capacity = capacity
        super().__init__(f"Address {index} out of range [0, {capacity})")


class MemoryImage:
    """Read-only view shared by both memory modes."""

    __slots__ = ("_cells",)

    is_frozen: bool = True

    def __init__(self, cells: Iterable[Cell]):
        raise NotImplementedError

    @property
    def capacity(self) -> int:
        return len(self._cells)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._cells):
            raise MemoryRangeError(index, len(self._cells))

    def read(self, index: int) -> Cell:
        self._check(index)
        return self._cells[index]

    def cells(self) -> Tuple[Cell, ...]:
        """All cells in address order."""
        return tuple(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(tuple(self._cells))

    def __getitem__(self, index: int) -> Cell:
        return self.read(index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemoryImage):
            return NotImplemented
        return self.is_frozen == other.is_frozen and self.cells() == other.cells()

    def __repr__(self) -> str:
        used = sum(1 for c in self._cells if c != UNINITIALIZED)
        return f"{type(self).__name__}(capacity={self.capacity}, used={used})"


class FrozenMemory(MemoryImage):
    """Immutable snapshot of memory."""

    __slots__ = ()

    is_frozen = True

    def __init__(self, cells: Iterable[Cell]):
        self._cells: Tuple[Cell, ...] = tuple(cells)

    def __hash__(self) -> int:
        return hash(self._cells)


class MutableMemory(MemoryImage):
    """Memory that can be written in place."""

    __slots__ = ()

    is_frozen = False

    __hash__ = None

    def __init__(self, cells: Iterable[Cell]):
        self._cells: List[Cell] = list(cells)

    def write(self, index: int, cell: Cell) -> None:
        if not isinstance(cell, Cell):
            raise TypeError(f"Memory holds cells, not {type(cell).__name__}")
        self._check(index)
        self._cells[index] = cell

    def __setitem__(self, index: int, cell: Cell) -> None:
        self.write(index, cell)


# ──────────────────────────────────────────────
# Construction and mode conversion
# ──────────────────────────────────────────────

def make_empty(capacity: int) -> FrozenMemory:
    """Frozen memory with every cell uninitialized."""
    if capacity < 0:
        raise ValueError(f"Memory capacity must be non-negative, got {capacity}")
    return FrozenMemory([UNINITIALIZED] * capacity)


def thaw(image: MemoryImage) -> MutableMemory:
    """Independent mutable copy of image."""
    return MutableMemory(image.cells())


def freeze(image: MemoryImage) -> FrozenMemory:
    """Independent frozen copy of image."""
    return FrozenMemory(image.cells())


def diff(before: MemoryImage, after: MemoryImage) -> Dict[int, Tuple[Cell, Cell]]:
    """Compare two images, return {address: (old, new)} for changed cells.

    Used by tracers to show what a step wrote: snapshot before, snapshot
    after, diff. Images must have the same capacity.
    """
    if before.capacity != after.capacity:
        raise ValueError(
            f"Cannot diff memories of capacity {before.capacity} and {after.capacity}"
        )
    changes = {}
    for addr, (old, new) in enumerate(zip(before.cells(), after.cells())):
        if old != new:
            changes[addr] = (old, new)
    return changes
