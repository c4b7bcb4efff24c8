"""
SMT Register Allocator

Dynamic partitioning of a shared rename register file among the active
hardware contexts of a simultaneous-multithreading core.

Contexts with better performance (fewer cache misses per instruction)
receive a larger share of the pool, while every context keeps a
guaranteed minimum so none is starved.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ..components.context import ContextMetrics
from ..components.registry import ContextRegistry
from .config import AllocatorConfig, ConfigurationError
from .redistribution import RedistributionResult, redistribute
from .scheduler import CycleScheduler
from .scoring import ScoringPolicy, create_scoring_policy

logger = logging.getLogger(__name__)

# Returned by allocation_of for unknown context ids
NOT_FOUND = -1


class SMTRegisterAllocator:
    """
    Performance-proportional rename register allocator.

    Invariants while at least one context is active:
        - every context holds >= min_registers_per_context
        - the shares sum to exactly total_registers

    Not thread-safe; callers sharing an instance must serialize access.
    """

    def __init__(self, config: Union[AllocatorConfig, dict],
                 scoring_policy: Optional[ScoringPolicy] = None):
        """
        Initialize allocator.

        Args:
            config: Allocator configuration
            scoring_policy: Policy ranking contexts (defaults to the one
                named in the configuration)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if isinstance(config, dict):
            config = AllocatorConfig.from_dict(config)

        errors = config.validate()
        if errors:
            raise ConfigurationError(errors)

        self.config = config
        self.policy = scoring_policy or create_scoring_policy(config.scoring_policy)

        self._registry = ContextRegistry(config.max_contexts)
        self._scheduler = CycleScheduler(config.reallocation_interval,
                                         self._redistribute)

        self.last_result = RedistributionResult()

    @property
    def total_registers(self) -> int:
        return self.config.total_registers

    @property
    def min_registers_per_context(self) -> int:
        return self.config.min_registers_per_context

    @property
    def max_contexts(self) -> int:
        return self.config.max_contexts

    @property
    def cycles_since_reallocation(self) -> int:
        return self._scheduler.cycles_since_reallocation

    @property
    def redistribution_count(self) -> int:
        return self._scheduler.firings

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, context_id: int) -> bool:
        """
        Add a context and redistribute the pool.

        Returns:
            False if the id is already active or the core is full
        """
        record = self._registry.add(context_id, self.min_registers_per_context)
        if record is None:
            return False

        logger.debug("Registered context %d (%d/%d active)",
                     context_id, len(self._registry), self.max_contexts)
        self._scheduler.force()
        return True

    def deregister(self, context_id: int) -> bool:
        """
        Remove a context and hand its registers to the others.

        Returns:
            False if the id is not active
        """
        if not self._registry.remove(context_id):
            return False

        logger.debug("Deregistered context %d (%d/%d active)",
                     context_id, len(self._registry), self.max_contexts)

        if len(self._registry) > 0:
            self._scheduler.force()
        else:
            self._scheduler.reset()
        return True

    def allocation_of(self, context_id: int) -> int:
        """Registers held by a context, or NOT_FOUND."""
        record = self._registry.get(context_id)
        if record is None:
            return NOT_FOUND
        return record.allocated_registers

    def active_count(self) -> int:
        return len(self._registry)

    def __contains__(self, context_id: int) -> bool:
        return context_id in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def report(self, context_id: int, cache_misses: int,
               instructions_executed: int) -> bool:
        """
        Record the latest cumulative counters for a context.

        Unknown ids are ignored. Allocations only change at the next
        redistribution.

        Returns:
            False if the id is not active (no state changed)
        """
        record = self._registry.get(context_id)
        if record is None:
            logger.debug("Ignoring metrics for unknown context %d", context_id)
            return False

        record.update_counters(cache_misses, instructions_executed)
        return True

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance one simulated cycle.

        Returns:
            True if the reallocation interval elapsed and the pool was
            redistributed
        """
        return self._scheduler.tick()

    def force(self) -> RedistributionResult:
        """Redistribute immediately and restart the interval."""
        return self._scheduler.force()

    def _redistribute(self) -> RedistributionResult:
        self.last_result = redistribute(
            self._registry.records(),
            self.total_registers,
            self.min_registers_per_context,
            self.policy
        )
        return self.last_result

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def utilization(self) -> Tuple[int, int]:
        """(allocated registers, total registers)"""
        allocated = sum(r.allocated_registers for r in self._registry)
        return allocated, self.total_registers

    def minimums_satisfied(self) -> bool:
        """True if every active context holds at least the minimum."""
        return all(r.allocated_registers >= self.min_registers_per_context
                   for r in self._registry)

    def pool_conserved(self) -> bool:
        """True if the pool is fully assigned (or no context is active)."""
        if len(self._registry) == 0:
            return True
        allocated, total = self.utilization()
        return allocated == total

    def snapshot(self) -> List[ContextMetrics]:
        """Copies of every active record, in slot order."""
        return [r.copy() for r in self._registry]

    def get_statistics(self) -> Dict[str, Any]:
        """Get allocator statistics."""
        allocated, total = self.utilization()
        return {
            'active_contexts': len(self._registry),
            'max_contexts': self.max_contexts,
            'total_registers': total,
            'allocated_registers': allocated,
            'utilization': allocated / total,
            'cycles_since_reallocation': self.cycles_since_reallocation,
            'reallocation_interval': self.config.reallocation_interval,
            'total_cycles': self._scheduler.total_cycles,
            'redistributions': self.redistribution_count,
            'scoring_policy': self.policy.name,
        }

    def format_allocation_state(self) -> str:
        """Get allocation state as formatted table."""
        allocated, total = self.utilization()

        lines = [
            "SMT Register Allocation State:",
            "-" * 62,
            f"Total Registers: {total}",
            f"Min Registers per Context: {self.min_registers_per_context}",
            f"Active Contexts: {len(self._registry)}/{self.max_contexts}",
            f"Allocation Cycles: {self.cycles_since_reallocation}/"
            f"{self.config.reallocation_interval}",
            f"Register Utilization: {allocated}/{total} "
            f"({100.0 * allocated / total:.1f}%)",
            "",
            f"{'Context':<9} {'Registers':>10} {'L2 Misses':>12} "
            f"{'Instructions':>14} {'Miss Rate':>12}",
            "-" * 62
        ]

        for r in self._registry:
            lines.append(
                f"{r.context_id:<9} {r.allocated_registers:>10} "
                f"{r.cache_misses:>12,} {r.instructions_executed:>14,} "
                f"{r.miss_rate:>12.4f}"
            )

        lines.append("-" * 62)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"SMTRegisterAllocator(total={self.total_registers}, "
                f"min={self.min_registers_per_context}, "
                f"max_contexts={self.max_contexts}, "
                f"active={len(self._registry)})")
