"""
Synthetic Workloads

Simulated hardware contexts that generate instruction and cache-miss
counts with the character of common workload classes.
"""

from enum import Enum
from typing import Optional, Tuple

import numpy as np


class WorkloadType(Enum):
    """Workload classes and their base L2 miss rates."""
    COMPUTE_INTENSIVE = 0.005   # Few memory accesses
    MEMORY_INTENSIVE = 0.15     # Streams through memory
    MIXED_WORKLOAD = 0.05       # Balanced compute and memory
    CACHE_FRIENDLY = 0.02       # Good locality

    @property
    def base_miss_rate(self) -> float:
        return self.value

    @property
    def label(self) -> str:
        return self.name.replace('_', ' ').title()

    @classmethod
    def from_name(cls, name: str) -> 'WorkloadType':
        """Look up a workload by name ('compute_intensive', 'Memory Intensive', ...)."""
        key = name.strip().upper().replace(' ', '_').replace('-', '_')
        try:
            return cls[key]
        except KeyError:
            valid = [w.name.lower() for w in cls]
            raise ValueError(f"Unknown workload type: {name} (expected one of {valid})") from None


class SimulatedContext:
    """
    Hardware context running a synthetic workload.

    Each cycle retires a random number of instructions and suffers a
    number of misses around the workload's base miss rate.
    """

    def __init__(self, context_id: int, workload: WorkloadType,
                 seed: Optional[int] = None,
                 instructions_range: Tuple[int, int] = (800, 1200),
                 miss_variation: Tuple[float, float] = (0.8, 1.2)):
        """
        Initialize simulated context.

        Args:
            context_id: Identifier used with the allocator
            workload: Workload class
            seed: Base random seed (combined with context_id)
            instructions_range: Inclusive bounds on instructions per cycle
            miss_variation: Multiplicative jitter applied to the base miss rate
        """
        self.context_id = context_id
        self.workload = workload
        self.instructions_range = instructions_range
        self.miss_variation = miss_variation

        # SeedSequence entropy must be non-negative
        entropy = [context_id % (1 << 64)]
        if seed is not None:
            entropy.insert(0, seed % (1 << 64))
        self._rng = np.random.default_rng(entropy)

        self.total_instructions = 0
        self.total_misses = 0

    def step(self) -> Tuple[int, int]:
        """
        Simulate one cycle.

        Returns:
            (instructions, misses) produced this cycle
        """
        low, high = self.instructions_range
        instructions = int(self._rng.integers(low, high + 1))
        miss_rate = self.workload.base_miss_rate * self._rng.uniform(*self.miss_variation)
        misses = int(instructions * miss_rate)

        self.total_instructions += instructions
        self.total_misses += misses

        return instructions, misses

    @property
    def observed_miss_rate(self) -> float:
        if self.total_instructions == 0:
            return 0.0
        return self.total_misses / self.total_instructions

    def __repr__(self) -> str:
        return f"SimulatedContext(id={self.context_id}, workload={self.workload.label})"
