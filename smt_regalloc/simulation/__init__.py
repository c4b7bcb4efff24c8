# Simulation Package
from .simulator import SMTSimulator, SimulationConfig, ComparativeSimulator
from .metrics import AllocationMetricsCollector, SimulationResults
from .workload import SimulatedContext, WorkloadType

__all__ = [
    'SMTSimulator',
    'SimulationConfig',
    'ComparativeSimulator',
    'AllocationMetricsCollector',
    'SimulationResults',
    'SimulatedContext',
    'WorkloadType'
]
