"""
Context Metrics Record

Per-context state tracked by the register allocator: the performance
counters reported by the simulator and the current register share.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict


@dataclass
class ContextMetrics:
    """State of a single hardware execution context."""
    context_id: int                 # Externally assigned identifier
    cache_misses: int = 0           # Cumulative L2 cache misses
    instructions_executed: int = 0  # Cumulative instructions executed
    miss_rate: float = 0.0          # cache_misses / instructions_executed
    allocated_registers: int = 0    # Current rename register share
    registration_order: int = 0     # Tie-break order, assigned at registration

    def update_counters(self, cache_misses: int,
                        instructions_executed: int) -> None:
        """
        Overwrite the cumulative counters with the latest report.

        Args:
            cache_misses: Cumulative cache misses so far
            instructions_executed: Cumulative instructions executed so far
        """
        if cache_misses < 0 or instructions_executed < 0:
            raise ValueError(
                f"Counters must be non-negative, got misses={cache_misses}, "
                f"instructions={instructions_executed}"
            )

        self.cache_misses = cache_misses
        self.instructions_executed = instructions_executed

        if instructions_executed > 0:
            self.miss_rate = cache_misses / instructions_executed
        else:
            self.miss_rate = 0.0

    def copy(self) -> 'ContextMetrics':
        """Return a detached copy."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'context_id': self.context_id,
            'cache_misses': self.cache_misses,
            'instructions_executed': self.instructions_executed,
            'miss_rate': self.miss_rate,
            'allocated_registers': self.allocated_registers,
        }
