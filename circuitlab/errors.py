"""Exceptions raised by the circuitlab engine and its controllers."""


class CircuitLabError(Exception):
    """Base class for every error raised by circuitlab."""


class StructuralError(CircuitLabError, ValueError):
    """Raised when a mutation would leave the network in an invalid shape.

    The graph is left untouched when this is raised.
    """


class WiringError(StructuralError):
    """Raised when a connection is refused (self, duplicate or capacity)."""


class ComponentError(StructuralError):
    """Raised for an unknown component type or a misplaced component."""


class BranchLookupError(StructuralError):
    """Raised when the circuit a branch should merge back into is missing."""


class SimulationError(CircuitLabError, RuntimeError):
    """Raised when the coordinator is asked to evaluate a torn-down network."""


class NetworkFileError(CircuitLabError, ValueError):
    """Raised when saved network data is malformed."""
