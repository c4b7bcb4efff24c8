# SMT Register Allocator Package
"""
SMT Register Allocator

Dynamic rename register partitioning for simultaneous-multithreading
processor simulators:
- Guaranteed minimum share per hardware context
- Spare registers split by inverse cache-miss rate
- Cycle-driven reallocation with forced updates on context changes
"""

__version__ = "1.0.0"

from .allocator import (
    SMTRegisterAllocator,
    NOT_FOUND,
    AllocatorConfig,
    ConfigurationError,
)
from .components import ContextMetrics

__all__ = [
    'SMTRegisterAllocator',
    'NOT_FOUND',
    'AllocatorConfig',
    'ConfigurationError',
    'ContextMetrics',
]
