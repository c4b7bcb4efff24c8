"""Tests for the per-context metrics record."""

from __future__ import annotations

import pytest

from smt_regalloc.components.context import ContextMetrics


def test_update_counters_computes_miss_rate() -> None:
    record = ContextMetrics(context_id=1)

    record.update_counters(250, 10000)

    assert record.cache_misses == 250
    assert record.instructions_executed == 10000
    assert record.miss_rate == pytest.approx(0.025)


def test_zero_instructions_gives_zero_miss_rate() -> None:
    record = ContextMetrics(context_id=1)
    record.update_counters(100, 1000)

    record.update_counters(0, 0)

    assert record.miss_rate == 0.0


def test_latest_report_overwrites_counters() -> None:
    record = ContextMetrics(context_id=3)
    record.update_counters(10, 100)
    record.update_counters(5, 1000)

    assert record.cache_misses == 5
    assert record.instructions_executed == 1000
    assert record.miss_rate == pytest.approx(0.005)


def test_update_leaves_allocation_untouched() -> None:
    record = ContextMetrics(context_id=1, allocated_registers=24)

    record.update_counters(1, 10)

    assert record.allocated_registers == 24


@pytest.mark.parametrize("misses, instructions", [(-1, 10), (1, -10)])
def test_negative_counters_are_rejected(misses: int, instructions: int) -> None:
    record = ContextMetrics(context_id=1)

    with pytest.raises(ValueError):
        record.update_counters(misses, instructions)


def test_copy_is_detached() -> None:
    record = ContextMetrics(context_id=7, allocated_registers=12)

    clone = record.copy()
    clone.allocated_registers = 99

    assert clone == ContextMetrics(context_id=7, allocated_registers=99)
    assert record.allocated_registers == 12


def test_to_dict_exports_public_fields() -> None:
    record = ContextMetrics(context_id=2, allocated_registers=8)
    record.update_counters(1, 4)

    assert record.to_dict() == {
        'context_id': 2,
        'cache_misses': 1,
        'instructions_executed': 4,
        'miss_rate': 0.25,
        'allocated_registers': 8,
    }
