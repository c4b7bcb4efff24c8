"""Tests for the proportional register redistribution algorithm."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import pytest

from smt_regalloc.allocator.redistribution import rank_contexts, redistribute
from smt_regalloc.allocator.scoring import (
    InverseMissRatePolicy,
    ScoringPolicy,
    UniformPolicy,
)
from smt_regalloc.components.context import ContextMetrics


class ZeroPolicy(ScoringPolicy):
    name = "zero"

    def score(self, record: ContextMetrics) -> float:
        return 0.0


def _records(counters: Sequence[Tuple[int, int]]) -> List[ContextMetrics]:
    records = []
    for order, (misses, instructions) in enumerate(counters):
        record = ContextMetrics(context_id=order + 1, registration_order=order)
        record.update_counters(misses, instructions)
        records.append(record)
    return records


def _allocations(records: Sequence[ContextMetrics]) -> List[int]:
    return [r.allocated_registers for r in records]


def test_spare_pool_follows_inverse_miss_rate() -> None:
    records = _records([(100, 10000), (500, 10000), (1000, 10000)])

    result = redistribute(records, 64, 8, InverseMissRatePolicy())

    assert _allocations(records) == [39, 14, 11]
    assert result.available == 40
    assert result.remainder == 1
    assert result.order == [1, 2, 3]
    assert result.best_context == 1
    assert not result.used_fallback


def test_worst_context_keeps_minimum() -> None:
    records = _records([(1, 10000), (10, 10000), (100, 10000), (5000, 10000)])

    redistribute(records, 32, 4, InverseMissRatePolicy())

    assert _allocations(records) == [19, 5, 4, 4]


def test_no_spare_registers_leaves_everyone_at_minimum() -> None:
    records = _records([(1, 100), (50, 100), (90, 100), (0, 0)])

    result = redistribute(records, 32, 8, InverseMissRatePolicy())

    assert _allocations(records) == [8, 8, 8, 8]
    assert result.available == 0


def test_previous_allocations_are_discarded() -> None:
    records = _records([(1, 100), (1, 100)])
    records[0].allocated_registers = 500

    redistribute(records, 20, 4, InverseMissRatePolicy())

    assert sum(_allocations(records)) == 20


def test_remainder_goes_to_earliest_registered_on_ties() -> None:
    records = _records([(0, 0), (0, 0)])
    records.reverse()  # slot order differs from registration order

    result = redistribute(records, 65, 8, InverseMissRatePolicy())

    by_id = {r.context_id: r.allocated_registers for r in records}
    assert by_id == {1: 33, 2: 32}
    assert result.order == [1, 2]


def test_rank_contexts_breaks_ties_by_registration_order() -> None:
    records = _records([(5, 100), (1, 100), (5, 100)])
    scores = np.array([1.0, 3.0, 1.0])

    assert rank_contexts(records, scores).tolist() == [1, 0, 2]


def test_uniform_policy_splits_evenly() -> None:
    records = _records([(1, 100), (90, 100), (40, 100), (0, 0)])

    redistribute(records, 128, 16, UniformPolicy())

    assert _allocations(records) == [32, 32, 32, 32]


def test_zero_total_score_falls_back_to_equal_split() -> None:
    records = _records([(1, 100), (2, 100), (3, 100)])

    result = redistribute(records, 64, 8, ZeroPolicy())

    assert result.used_fallback
    assert result.remainder == 1
    assert _allocations(records) == [22, 21, 21]


def test_fallback_remainder_follows_registration_order() -> None:
    records = _records([(1, 100), (2, 100), (3, 100)])
    records = [records[2], records[0], records[1]]

    redistribute(records, 68, 8, ZeroPolicy())

    by_id = {r.context_id: r.allocated_registers for r in records}
    assert by_id == {1: 23, 2: 23, 3: 22}


def test_empty_input_is_noop() -> None:
    result = redistribute([], 64, 8, InverseMissRatePolicy())

    assert result.order == []
    assert result.best_context == -1


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_random_inputs_keep_invariants_and_fairness(seed: int) -> None:
    rng = np.random.default_rng(seed)
    count = int(rng.integers(1, 9))
    counters = [(int(rng.integers(0, 5000)), int(rng.integers(0, 10000)))
                for _ in range(count)]
    records = _records(counters)

    redistribute(records, 200, 6, InverseMissRatePolicy())

    assert sum(_allocations(records)) == 200
    assert all(r.allocated_registers >= 6 for r in records)
    for a in records:
        for b in records:
            if a.miss_rate < b.miss_rate:
                assert a.allocated_registers >= b.allocated_registers
