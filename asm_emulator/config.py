"""
Machine configuration.

DEFAULT_MEMORY_SIZE is small on purpose: the whole address space fits on
one screen in an environment dump.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


# Number of memory cells, addressed 0 .. DEFAULT_MEMORY_SIZE - 1
DEFAULT_MEMORY_SIZE = 20

# Values preloaded into the input queue of a freshly loaded program.
# Stands in for interactive input until a host supplies its own.
DEFAULT_INPUT_SEED: Tuple[int, ...] = (5,)


@dataclass(frozen=True)
class MachineConfig:
    """Configuration for building a loaded environment."""
    memory_size: int = DEFAULT_MEMORY_SIZE
    input_seed: Tuple[int, ...] = DEFAULT_INPUT_SEED

    def __post_init__(self):
        if self.memory_size < 0:
            raise ValueError(f"memory_size must be non-negative, got {self.memory_size}")
        seed = tuple(self.input_seed)
        for value in seed:
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"input_seed values must be integers, got {value!r}")
        object.__setattr__(self, "input_seed", seed)
