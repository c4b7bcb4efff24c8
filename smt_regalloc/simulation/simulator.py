"""
SMT Allocation Simulator

Drives a register allocator with synthetic workloads, cycle by cycle.
"""

import logging
import time
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Union
import numpy as np
from tqdm import tqdm

from ..allocator.allocator import SMTRegisterAllocator
from ..allocator.config import AllocatorConfig
from ..allocator.scoring import ScoringPolicy, create_scoring_policy
from .metrics import AllocationMetricsCollector, SimulationResults
from .workload import SimulatedContext, WorkloadType

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for simulation run."""
    total_cycles: int = 1000
    report_interval: int = 250
    metrics_update_interval: int = 10
    sample_interval: int = 10
    seed: Optional[int] = 42
    verbose: bool = True

    def __post_init__(self):
        # Interval settings of 0 disable that activity
        for name in ('total_cycles', 'report_interval',
                     'metrics_update_interval', 'sample_interval'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

    @classmethod
    def from_dict(cls, config: dict) -> 'SimulationConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})


class SMTSimulator:
    """
    SMT core simulator.

    Every cycle each context executes, its cumulative counters are
    reported to the allocator every ``metrics_update_interval`` cycles,
    and the allocator advances one cycle.
    """

    def __init__(self, allocator: SMTRegisterAllocator,
                 config: Union[SimulationConfig, dict, None] = None):
        """
        Initialize simulator.

        Args:
            allocator: Register allocator under test
            config: Simulation configuration
        """
        if config is None:
            config = SimulationConfig()
        elif isinstance(config, dict):
            config = SimulationConfig.from_dict(config)
        self.config = config

        self.allocator = allocator
        self.contexts: Dict[int, SimulatedContext] = {}
        self.metrics = AllocationMetricsCollector()

        self.cycle = 0

    def add_context(self, context_id: int,
                    workload: Union[WorkloadType, str]) -> bool:
        """
        Start a context running a workload.

        Returns:
            False if the allocator rejected the context
        """
        if isinstance(workload, str):
            workload = WorkloadType.from_name(workload)

        context = SimulatedContext(context_id, workload, seed=self.config.seed)

        if not self.allocator.register(context_id):
            logger.warning("Allocator rejected context %d", context_id)
            return False

        self.contexts[context_id] = context
        self.metrics.register_context(context_id, workload.label)
        logger.info("Added context %d (%s)", context_id, workload.label)
        return True

    def remove_context(self, context_id: int) -> bool:
        """Stop a context and return its registers to the pool."""
        if context_id not in self.contexts:
            return False

        self.allocator.deregister(context_id)
        del self.contexts[context_id]
        logger.info("Removed context %d", context_id)
        return True

    def run(self, total_cycles: Optional[int] = None) -> SimulationResults:
        """
        Run the simulation.

        Args:
            total_cycles: Cycles to simulate (defaults to config)

        Returns:
            SimulationResults with per-context allocation statistics
        """
        if total_cycles is None:
            total_cycles = self.config.total_cycles

        logger.info("Simulating %d cycles with %d contexts (%s)",
                    total_cycles, len(self.contexts), self.allocator.policy.name)

        start_time = time.time()
        redistributions_before = self.allocator.redistribution_count

        cycles = range(total_cycles)
        if self.config.verbose:
            cycles = tqdm(cycles, desc="Simulating", unit="cycles")

        try:
            for _ in cycles:
                self._step()
        except KeyboardInterrupt:
            logger.warning("Simulation interrupted at cycle %d", self.cycle)

        elapsed_time = time.time() - start_time

        return SimulationResults(
            total_cycles=self.cycle,
            elapsed_time=elapsed_time,
            redistributions=self.allocator.redistribution_count - redistributions_before,
            scoring_policy=self.allocator.policy.name,
            context_results=self.metrics.get_all_context_stats(),
            utilization=self.metrics.get_utilization_stats(),
            allocator_config=self.allocator.config.to_dict(),
            config=vars(self.config).copy()
        )

    def _step(self) -> None:
        """Simulate a single cycle."""
        report_due = (self.config.metrics_update_interval
                      and self.cycle % self.config.metrics_update_interval == 0)

        for context_id, context in self.contexts.items():
            context.step()
            if report_due:
                self.allocator.report(context_id, context.total_misses,
                                      context.total_instructions)

        self.allocator.tick()
        self.cycle += 1

        if self.config.sample_interval and self.cycle % self.config.sample_interval == 0:
            self.metrics.record_sample(self.cycle, self.allocator.snapshot(),
                                       self.allocator.total_registers)

        if self.config.report_interval and self.cycle % self.config.report_interval == 0:
            self._log_progress()

    def _log_progress(self) -> None:
        """Log allocation state during simulation."""
        allocated, total = self.allocator.utilization()
        shares = ", ".join(
            f"{cid}={self.allocator.allocation_of(cid)}" for cid in self.contexts
        )
        logger.info("Cycle %d | registers %d/%d | %s",
                    self.cycle, allocated, total, shares)
        logger.debug("\n%s", self.allocator.format_allocation_state())


class ComparativeSimulator:
    """
    Run the same workload mix under several scoring policies.
    """

    def __init__(self, allocator_config: AllocatorConfig,
                 config: Union[SimulationConfig, dict, None] = None):
        self.allocator_config = allocator_config
        self.config = config
        self.results: List[SimulationResults] = []

    def run_comparison(self,
                       workloads: Dict[int, Union[WorkloadType, str]],
                       policies: List[Union[ScoringPolicy, str]]) -> Dict:
        """
        Run comparison across policies.

        Args:
            workloads: Context id -> workload
            policies: Scoring policies (or names) to compare

        Returns:
            Aggregated results
        """
        self.results = []

        for policy in policies:
            if isinstance(policy, str):
                policy = create_scoring_policy(policy)

            allocator = SMTRegisterAllocator(self.allocator_config, scoring_policy=policy)
            sim = SMTSimulator(allocator, self.config)

            for context_id, workload in workloads.items():
                sim.add_context(context_id, workload)

            self.results.append(sim.run())

        return self._aggregate_results(self.results)

    def _aggregate_results(self, results: List[SimulationResults]) -> Dict:
        """Aggregate results across policies."""
        if not results:
            return {}

        aggregated = {
            'policies': [r.scoring_policy for r in results],
            'total_cycles': results[0].total_cycles,
            'total_time': sum(r.elapsed_time for r in results),
            'per_policy': {}
        }

        for result in results:
            means = {
                context_id: stats.get('mean_allocation', 0.0)
                for context_id, stats in result.context_results.items()
            }
            values = np.array(list(means.values()), dtype=np.float64)

            aggregated['per_policy'][result.scoring_policy] = {
                'redistributions': result.redistributions,
                'mean_allocation': means,
                'allocation_spread': float(np.max(values) - np.min(values)) if values.size else 0.0,
                'mean_utilization': result.utilization.get('mean', 0.0),
            }

        return aggregated
