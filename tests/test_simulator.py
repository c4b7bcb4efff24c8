"""Tests for the synthetic workload simulator."""

from __future__ import annotations

import numpy as np
import pytest

from smt_regalloc import AllocatorConfig, SMTRegisterAllocator
from smt_regalloc.components.context import ContextMetrics
from smt_regalloc.simulation import (
    AllocationMetricsCollector,
    ComparativeSimulator,
    SimulatedContext,
    SimulationConfig,
    SMTSimulator,
    WorkloadType,
)

WORKLOADS = {
    1: WorkloadType.COMPUTE_INTENSIVE,
    2: WorkloadType.MEMORY_INTENSIVE,
    3: WorkloadType.CACHE_FRIENDLY,
    4: WorkloadType.MIXED_WORKLOAD,
}


def _sim_config(**overrides) -> SimulationConfig:
    values = dict(total_cycles=200, report_interval=0, metrics_update_interval=10,
                  sample_interval=10, seed=7, verbose=False)
    values.update(overrides)
    return SimulationConfig(**values)


def _simulator(interval: int = 50, **config) -> SMTSimulator:
    allocator = SMTRegisterAllocator(AllocatorConfig(128, 16, 4, interval))
    simulator = SMTSimulator(allocator, _sim_config(**config))
    for context_id, workload in WORKLOADS.items():
        assert simulator.add_context(context_id, workload)
    return simulator


@pytest.mark.parametrize(
    "name, expected",
    [
        ("compute_intensive", WorkloadType.COMPUTE_INTENSIVE),
        ("Memory Intensive", WorkloadType.MEMORY_INTENSIVE),
        ("cache-friendly", WorkloadType.CACHE_FRIENDLY),
    ],
)
def test_workload_from_name(name: str, expected: WorkloadType) -> None:
    assert WorkloadType.from_name(name) is expected


def test_workload_from_unknown_name() -> None:
    with pytest.raises(ValueError):
        WorkloadType.from_name("io_bound")


def test_workload_label() -> None:
    assert WorkloadType.MIXED_WORKLOAD.label == "Mixed Workload"


def test_simulated_context_is_reproducible() -> None:
    a = SimulatedContext(1, WorkloadType.MIXED_WORKLOAD, seed=3)
    b = SimulatedContext(1, WorkloadType.MIXED_WORKLOAD, seed=3)

    assert [a.step() for _ in range(20)] == [b.step() for _ in range(20)]


def test_simulated_context_stays_in_range() -> None:
    context = SimulatedContext(2, WorkloadType.MEMORY_INTENSIVE, seed=1)

    for _ in range(200):
        instructions, misses = context.step()
        assert 800 <= instructions <= 1200
        assert misses <= instructions * 0.15 * 1.2

    assert 0.15 * 0.8 - 0.01 <= context.observed_miss_rate <= 0.15 * 1.2
    assert context.total_instructions > 0


def test_run_keeps_pool_invariants() -> None:
    simulator = _simulator()

    results = simulator.run()

    allocator = simulator.allocator
    assert results.total_cycles == 200
    assert results.redistributions == 4
    assert allocator.minimums_satisfied()
    assert allocator.utilization() == (128, 128)


def test_compute_bound_context_gets_more_registers() -> None:
    simulator = _simulator()

    results = simulator.run()

    allocator = simulator.allocator
    assert allocator.allocation_of(1) > allocator.allocation_of(3)
    assert allocator.allocation_of(3) > allocator.allocation_of(2)
    assert allocator.allocation_of(2) >= 16
    assert results.context_results[1]['mean_allocation'] > \
        results.context_results[2]['mean_allocation']


def test_run_collects_samples() -> None:
    simulator = _simulator()

    results = simulator.run()

    assert simulator.metrics.num_samples == 20
    stats = results.context_results[2]
    assert stats['workload'] == "Memory Intensive"
    assert stats['samples'] == 20
    assert stats['min_allocation'] >= 16
    assert results.utilization == {'mean': 1.0, 'min': 1.0, 'max': 1.0}


def test_add_context_rejected_when_full() -> None:
    simulator = _simulator()

    assert not simulator.add_context(5, "mixed_workload")
    assert 5 not in simulator.contexts


def test_negative_context_id_is_supported() -> None:
    allocator = SMTRegisterAllocator(AllocatorConfig(64, 8, 4, 10))
    simulator = SMTSimulator(allocator, _sim_config())

    assert simulator.add_context(-1, "compute_intensive")
    assert simulator.add_context(2, "memory_intensive")

    assert -1 in allocator
    assert set(simulator.contexts) == {-1, 2}
    simulator.run(40)
    assert allocator.allocation_of(-1) > allocator.allocation_of(2)


def test_negative_context_id_is_reproducible() -> None:
    a = SimulatedContext(-7, WorkloadType.MIXED_WORKLOAD, seed=-3)
    b = SimulatedContext(-7, WorkloadType.MIXED_WORKLOAD, seed=-3)

    assert [a.step() for _ in range(20)] == [b.step() for _ in range(20)]


def test_failed_context_setup_leaves_allocator_untouched(monkeypatch) -> None:
    import smt_regalloc.simulation.simulator as simulator_module

    def broken_context(*args, **kwargs):
        raise RuntimeError("context setup failed")

    simulator = _simulator()
    simulator.remove_context(4)
    monkeypatch.setattr(simulator_module, "SimulatedContext", broken_context)

    with pytest.raises(RuntimeError):
        simulator.add_context(9, WorkloadType.MIXED_WORKLOAD)

    assert 9 not in simulator.allocator
    assert 9 not in simulator.contexts
    assert simulator.allocator.active_count() == len(simulator.contexts) == 3


def test_zero_sample_interval_disables_sampling() -> None:
    simulator = _simulator(sample_interval=0)

    results = simulator.run()

    assert results.total_cycles == 200
    assert simulator.metrics.num_samples == 0
    assert results.utilization == {'mean': 0.0, 'min': 0.0, 'max': 0.0}


def test_zero_metrics_interval_disables_reporting() -> None:
    simulator = _simulator(metrics_update_interval=0)

    results = simulator.run()

    # No counters reach the allocator, so every context scores the same
    assert results.redistributions == 4
    assert {simulator.allocator.allocation_of(cid) for cid in WORKLOADS} == {32}
    assert all(r.instructions_executed == 0 for r in simulator.allocator.snapshot())


@pytest.mark.parametrize(
    "field_name",
    ["total_cycles", "report_interval", "metrics_update_interval", "sample_interval"],
)
def test_negative_intervals_are_rejected(field_name: str) -> None:
    with pytest.raises(ValueError, match=field_name):
        _sim_config(**{field_name: -1})


def test_run_zero_cycles_simulates_nothing() -> None:
    simulator = _simulator()

    results = simulator.run(0)

    assert results.total_cycles == 0
    assert simulator.cycle == 0
    assert simulator.metrics.num_samples == 0
    assert results.redistributions == 0


def test_remove_context_returns_registers() -> None:
    simulator = _simulator()
    simulator.run(50)

    assert simulator.remove_context(2)
    assert not simulator.remove_context(2)

    assert simulator.allocator.active_count() == 3
    assert simulator.allocator.utilization() == (128, 128)
    simulator.run(50)
    assert simulator.cycle == 100


def test_results_serialize() -> None:
    simulator = _simulator()

    results = simulator.run()
    data = results.to_dict()

    assert data['scoring_policy'] == 'inverse_miss_rate'
    assert set(data['context_results']) == {'1', '2', '3', '4'}
    assert data['allocator_config']['total_registers'] == 128
    assert data['config']['total_cycles'] == 200
    assert "Context 1 (Compute Intensive)" in results.get_summary()


def test_config_from_dict_ignores_unknown_keys() -> None:
    config = SimulationConfig.from_dict({'total_cycles': 10, 'colour': 'blue'})

    assert config.total_cycles == 10
    assert config.sample_interval == 10


def test_comparative_simulator() -> None:
    comparison = ComparativeSimulator(AllocatorConfig(128, 16, 4, 50), _sim_config())

    aggregated = comparison.run_comparison(WORKLOADS, ["inverse_miss_rate", "uniform"])

    assert aggregated['policies'] == ["inverse_miss_rate", "uniform"]
    uniform = aggregated['per_policy']['uniform']
    assert uniform['allocation_spread'] == 0.0
    assert set(uniform['mean_allocation'].values()) == {32.0}
    assert aggregated['per_policy']['inverse_miss_rate']['allocation_spread'] > 0
    assert len(comparison.results) == 2


def test_metrics_collector_matrix() -> None:
    collector = AllocationMetricsCollector()
    collector.register_context(1, "Compute Intensive")

    collector.record_sample(10, [ContextMetrics(1, allocated_registers=40),
                                 ContextMetrics(2, allocated_registers=24)], 64)
    collector.record_sample(20, [ContextMetrics(1, allocated_registers=64)], 64)

    matrix = collector.get_allocation_matrix()
    assert matrix.shape == (2, 2)
    assert np.array_equal(matrix, np.array([[40, 64], [24, 0]]))
    assert collector.get_context_stats(2)['workload'] == "unknown"
    assert collector.get_context_stats(1)['max_allocation'] == 64
    assert collector.get_utilization_stats()['min'] == 1.0


def test_metrics_collector_reset() -> None:
    collector = AllocationMetricsCollector()
    collector.record_sample(10, [ContextMetrics(1, allocated_registers=8)], 8)

    collector.reset()

    assert collector.num_samples == 0
    assert collector.get_context_stats(1) == {}
    assert "Context Allocation Summary" in collector.get_comparison_table()
