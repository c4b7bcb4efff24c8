"""
Allocator Configuration

Construction parameters for the register allocator and their validation.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List

from .scoring import available_policies


class ConfigurationError(ValueError):
    """Raised when an allocator is constructed from an invalid configuration."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid allocator configuration: " + "; ".join(self.errors))


@dataclass(frozen=True)
class AllocatorConfig:
    """Fixed configuration of one simulated core's register allocator."""
    total_registers: int
    min_registers_per_context: int
    max_contexts: int
    reallocation_interval: int = 1000
    scoring_policy: str = 'inverse_miss_rate'

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'AllocatorConfig':
        """Create config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})

    def validate(self) -> List[str]:
        """
        Check the configuration.

        Returns:
            List of violated rules (empty when valid)
        """
        errors = []

        for name in ('total_registers', 'min_registers_per_context',
                     'max_contexts', 'reallocation_interval'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"{name} must be an integer, got {value!r}")
        if errors:
            return errors

        if self.total_registers <= 0:
            errors.append(f"total_registers must be > 0, got {self.total_registers}")
        if self.min_registers_per_context <= 0:
            errors.append(
                f"min_registers_per_context must be > 0, got {self.min_registers_per_context}"
            )
        if self.max_contexts <= 0:
            errors.append(f"max_contexts must be > 0, got {self.max_contexts}")
        if self.reallocation_interval < 0:
            errors.append(
                f"reallocation_interval must be >= 0, got {self.reallocation_interval}"
            )

        if self.scoring_policy not in available_policies():
            errors.append(
                f"scoring_policy must be one of {available_policies()}, "
                f"got {self.scoring_policy!r}"
            )

        reserved = self.min_registers_per_context * self.max_contexts
        if reserved > self.total_registers:
            errors.append(
                f"min_registers_per_context * max_contexts ({reserved}) "
                f"exceeds total_registers ({self.total_registers})"
            )

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
