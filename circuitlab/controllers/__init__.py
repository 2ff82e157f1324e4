"""
Controllers for circuitlab.

This package contains the controller classes that orchestrate operations
between the network model and its callers using an observer pattern.
"""

from .circuit_controller import CircuitController
from .file_controller import FileController, validate_network_data
from .simulation_controller import SimulationController, SimulationResult, TickRecord

__all__ = [
    "CircuitController",
    "SimulationController",
    "SimulationResult",
    "TickRecord",
    "FileController",
    "validate_network_data",
]
