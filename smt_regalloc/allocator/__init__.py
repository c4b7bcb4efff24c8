# Allocator Package
from .allocator import SMTRegisterAllocator, NOT_FOUND
from .config import AllocatorConfig, ConfigurationError
from .redistribution import RedistributionResult, redistribute
from .scheduler import CycleScheduler
from .scoring import (
    ScoringPolicy,
    InverseMissRatePolicy,
    UniformPolicy,
    create_scoring_policy,
)

__all__ = [
    'SMTRegisterAllocator',
    'NOT_FOUND',
    'AllocatorConfig',
    'ConfigurationError',
    'RedistributionResult',
    'redistribute',
    'CycleScheduler',
    'ScoringPolicy',
    'InverseMissRatePolicy',
    'UniformPolicy',
    'create_scoring_policy',
]
