"""
Metrics Collection and Analysis

Collects register allocation samples during a simulation run and
summarizes how the pool was shared between contexts.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any
import numpy as np

from ..components.context import ContextMetrics


@dataclass
class SimulationResults:
    """Container for simulation results."""
    total_cycles: int
    elapsed_time: float
    redistributions: int
    scoring_policy: str
    context_results: Dict[int, Dict[str, Any]]
    utilization: Dict[str, float]
    allocator_config: Dict[str, Any]
    config: Dict[str, Any]

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'total_cycles': self.total_cycles,
            'elapsed_time': self.elapsed_time,
            'redistributions': self.redistributions,
            'scoring_policy': self.scoring_policy,
            'context_results': {str(k): v for k, v in self.context_results.items()},
            'utilization': self.utilization,
            'allocator_config': self.allocator_config,
            'config': self.config
        }

    def get_summary(self) -> str:
        """Get text summary of results."""
        lines = [
            f"Policy: {self.scoring_policy}",
            f"Cycles: {self.total_cycles:,}",
            f"Redistributions: {self.redistributions:,}",
            f"Time: {self.elapsed_time:.2f}s",
            ""
        ]

        for context_id, stats in self.context_results.items():
            lines.append(f"Context {context_id} ({stats.get('workload', 'unknown')}):")
            lines.append(f"  Mean registers: {stats.get('mean_allocation', 0):.2f}")
            lines.append(f"  Final registers: {stats.get('final_allocation', 0)}")
            lines.append(f"  Miss rate: {stats.get('final_miss_rate', 0)*100:.3f}%")

        return "\n".join(lines)


@dataclass
class ContextTrace:
    """Allocation samples for a single context."""
    workload: str = "unknown"
    cycles: List[int] = field(default_factory=list)
    allocations: List[int] = field(default_factory=list)
    miss_rates: List[float] = field(default_factory=list)

    def reset(self) -> None:
        self.cycles.clear()
        self.allocations.clear()
        self.miss_rates.clear()


class AllocationMetricsCollector:
    """
    Collects per-context register allocation samples.
    """

    def __init__(self):
        self._contexts: Dict[int, ContextTrace] = {}
        self._utilization: List[float] = []
        self._sample_cycles: List[int] = []

    def register_context(self, context_id: int, workload: str = "unknown") -> None:
        """Register a context for metrics collection."""
        self._contexts[context_id] = ContextTrace(workload=workload)

    def record_sample(self, cycle: int, records: List[ContextMetrics],
                      total_registers: int) -> None:
        """
        Record allocator state at a cycle.

        Args:
            cycle: Simulated cycle number
            records: Snapshot of the allocator's contexts
            total_registers: Size of the register pool
        """
        allocated = 0
        for record in records:
            if record.context_id not in self._contexts:
                self.register_context(record.context_id)

            trace = self._contexts[record.context_id]
            trace.cycles.append(cycle)
            trace.allocations.append(record.allocated_registers)
            trace.miss_rates.append(record.miss_rate)
            allocated += record.allocated_registers

        self._sample_cycles.append(cycle)
        self._utilization.append(allocated / total_registers)

    @property
    def num_samples(self) -> int:
        return len(self._sample_cycles)

    def get_context_stats(self, context_id: int) -> Dict[str, Any]:
        """Get statistics for a context."""
        trace = self._contexts.get(context_id)
        if trace is None or not trace.allocations:
            return {}

        allocations = np.asarray(trace.allocations, dtype=np.float64)

        return {
            'workload': trace.workload,
            'samples': len(trace.allocations),
            'mean_allocation': float(np.mean(allocations)),
            'std_allocation': float(np.std(allocations)),
            'min_allocation': int(np.min(allocations)),
            'max_allocation': int(np.max(allocations)),
            'final_allocation': int(trace.allocations[-1]),
            'final_miss_rate': float(trace.miss_rates[-1]),
        }

    def get_all_context_stats(self) -> Dict[int, Dict[str, Any]]:
        return {
            context_id: self.get_context_stats(context_id)
            for context_id in self._contexts
        }

    def get_utilization_stats(self) -> Dict[str, float]:
        """Summary of pool utilization across samples."""
        if not self._utilization:
            return {'mean': 0.0, 'min': 0.0, 'max': 0.0}

        values = np.asarray(self._utilization)
        return {
            'mean': float(np.mean(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
        }

    def get_allocation_matrix(self) -> np.ndarray:
        """
        Allocation samples as a (contexts x samples) array.

        Contexts that were not active for a sample hold zero.
        """
        context_ids = list(self._contexts)
        column = {cycle: i for i, cycle in enumerate(self._sample_cycles)}
        matrix = np.zeros((len(context_ids), len(self._sample_cycles)), dtype=np.int64)

        for row, context_id in enumerate(context_ids):
            trace = self._contexts[context_id]
            for cycle, allocation in zip(trace.cycles, trace.allocations):
                matrix[row, column[cycle]] = allocation

        return matrix

    def reset(self) -> None:
        """Reset all samples."""
        for trace in self._contexts.values():
            trace.reset()
        self._utilization.clear()
        self._sample_cycles.clear()

    def get_comparison_table(self) -> str:
        """Get per-context table as formatted string."""
        if not self._contexts:
            return "No contexts registered"

        lines = [
            "Context Allocation Summary:",
            "-" * 72,
            f"{'Context':<9} {'Workload':<20} {'Mean':>9} {'Min':>6} {'Max':>6} {'Miss Rate':>12}",
            "-" * 72
        ]

        for context_id in self._contexts:
            stats = self.get_context_stats(context_id)
            if not stats:
                continue
            lines.append(
                f"{context_id:<9} {stats['workload']:<20} "
                f"{stats['mean_allocation']:>9.2f} {stats['min_allocation']:>6} "
                f"{stats['max_allocation']:>6} {stats['final_miss_rate']*100:>11.3f}%"
            )

        lines.append("-" * 72)
        return "\n".join(lines)

