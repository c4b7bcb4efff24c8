# Components Package
from .context import ContextMetrics
from .registry import ContextRegistry

__all__ = [
    'ContextMetrics',
    'ContextRegistry',
]
