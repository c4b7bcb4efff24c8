"""
Register Redistribution

Repartitions the fixed rename register pool among the active contexts.
Every context first receives the guaranteed minimum; the spare registers
are then split in proportion to each context's performance score, and the
rounding remainder goes to the best-scoring context.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..components.context import ContextMetrics
from .scoring import ScoringPolicy

logger = logging.getLogger(__name__)


@dataclass
class RedistributionResult:
    """Outcome of one redistribution pass."""
    available: int = 0            # Registers beyond the guaranteed minimums
    remainder: int = 0            # Rounding slack awarded to the top context
    used_fallback: bool = False   # Equal split taken because total score <= 0
    order: List[int] = field(default_factory=list)  # Context ids, best first

    @property
    def best_context(self) -> int:
        return self.order[0] if self.order else -1


def rank_contexts(records: Sequence[ContextMetrics],
                  scores: np.ndarray) -> np.ndarray:
    """
    Order record positions by score, highest first.

    Equal scores keep ascending registration order.
    """
    registration = np.array([r.registration_order for r in records], dtype=np.int64)
    # lexsort uses the last key as the primary key
    return np.lexsort((registration, -scores))


def redistribute(records: Sequence[ContextMetrics],
                 total_registers: int,
                 min_registers: int,
                 policy: ScoringPolicy) -> RedistributionResult:
    """
    Recompute every context's register share in place.

    Args:
        records: Active context records (mutated)
        total_registers: Size of the register pool
        min_registers: Guaranteed registers per context
        policy: Scoring policy ranking the contexts

    Returns:
        RedistributionResult describing the pass
    """
    result = RedistributionResult()

    if not records:
        return result

    for record in records:
        record.allocated_registers = min_registers

    available = total_registers - min_registers * len(records)
    result.available = available

    if available <= 0:
        result.order = [r.context_id for r in records]
        return result

    scores = policy.score_all(records)
    ranked = rank_contexts(records, scores)
    result.order = [records[i].context_id for i in ranked]

    total_score = float(scores.sum())

    if total_score > 0:
        extras = np.floor(available * scores / total_score).astype(np.int64)
        remaining = available

        for i in ranked:
            extra = min(int(extras[i]), remaining)
            records[i].allocated_registers += extra
            remaining -= extra

        # Rounding slack goes to the best performer
        if remaining > 0:
            records[ranked[0]].allocated_registers += remaining
        result.remainder = remaining
    else:
        result.used_fallback = True
        ordered = sorted(records, key=lambda r: r.registration_order)
        per_context, leftover = divmod(available, len(ordered))

        for position, record in enumerate(ordered):
            record.allocated_registers += per_context
            if position < leftover:
                record.allocated_registers += 1
        result.remainder = leftover

    logger.debug(
        "Redistributed %d spare registers over %d contexts (remainder=%d, fallback=%s)",
        available, len(records), result.remainder, result.used_fallback
    )

    return result
