"""
Scoring Policies

A scoring policy maps each context to a non-negative performance score.
The redistribution algorithm hands out the spare register pool in
proportion to these scores.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ..components.context import ContextMetrics


class ScoringPolicy(ABC):
    """Abstract base class for context scoring policies."""

    name = "base"

    @abstractmethod
    def score(self, record: ContextMetrics) -> float:
        """
        Score a single context.

        Args:
            record: Context to score

        Returns:
            Non-negative score (higher = larger share of the spare pool)
        """
        pass

    def score_all(self, records: Sequence[ContextMetrics]) -> np.ndarray:
        """Score every context, in the order given."""
        scores = np.array([self.score(r) for r in records], dtype=np.float64)

        if scores.size and (not np.all(np.isfinite(scores)) or np.any(scores < 0)):
            raise ValueError(
                f"Policy '{self.name}' produced invalid scores: {scores.tolist()}"
            )

        return scores

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class InverseMissRatePolicy(ScoringPolicy):
    """
    Score = 1 / (miss_rate + epsilon).

    Cache-friendly contexts score high and receive most of the spare pool;
    a context with no measured misses gets the largest finite score.
    """

    name = "inverse_miss_rate"

    def __init__(self, epsilon: float = 1e-10):
        if epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {epsilon}")
        self.epsilon = epsilon

    def score(self, record: ContextMetrics) -> float:
        return 1.0 / (record.miss_rate + self.epsilon)

    def __repr__(self) -> str:
        return f"InverseMissRatePolicy(epsilon={self.epsilon})"


class UniformPolicy(ScoringPolicy):
    """Every context scores the same: static equal partitioning."""

    name = "uniform"

    def score(self, record: ContextMetrics) -> float:
        return 1.0


_POLICIES = {
    InverseMissRatePolicy.name: InverseMissRatePolicy,
    UniformPolicy.name: UniformPolicy,
}


def available_policies() -> list:
    """Names accepted by create_scoring_policy."""
    return sorted(_POLICIES)


def create_scoring_policy(name: str) -> ScoringPolicy:
    """
    Create scoring policy by name.

    Args:
        name: Policy name ('inverse_miss_rate', 'uniform')

    Returns:
        ScoringPolicy instance
    """
    policy_class = _POLICIES.get(name.lower())
    if not policy_class:
        raise ValueError(
            f"Unknown scoring policy: {name} (expected one of {available_policies()})"
        )
    return policy_class()
