"""
circuitlab - Frame-by-frame electrical network evaluation engine.

Build a network with CircuitController, tick it with SimulationController
and persist it with FileController.
"""

from .controllers import CircuitController, FileController, SimulationController
from .models import NetworkModel

__version__ = "0.1.0"

__all__ = [
    "CircuitController",
    "FileController",
    "NetworkModel",
    "SimulationController",
]
