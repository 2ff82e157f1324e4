"""
CircuitData - A node of the circuit tree.

A circuit groups the components at one nesting depth. The root circuit
(depth 0) holds the power sources; every Connector branch owns a child
circuit one level deeper. Circuits only hold ids; the NetworkModel resolves
them and implements the solver.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .component import ZERO_RESISTANCE


class CompositionMode(Enum):
    SERIES = "series"
    PARALLEL = "parallel"


@dataclass
class CircuitData:
    """
    One level of the circuit tree.

    ``broken`` is this circuit's own flag; whether it is effectively broken
    also depends on its ancestors (see NetworkModel.is_broken).
    """

    circuit_id: int
    depth: int = 0
    parent_id: Optional[int] = None
    mode: CompositionMode = CompositionMode.SERIES
    component_ids: list[int] = field(default_factory=list)
    broken: bool = False
    broken_by: Optional[int] = None
    current: float = 0.0

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def __len__(self) -> int:
        return len(self.component_ids)


def resistance_in_series(*resistances: float) -> float:
    """Sum of resistances; an empty series is a short."""
    total = sum(resistances)
    return total if total > ZERO_RESISTANCE else ZERO_RESISTANCE


def resistance_in_parallel(*resistances: float) -> float:
    """
    Reciprocal sum of resistances.

    Any branch at or below the zero sentinel shorts the combination, so the
    result is ZERO_RESISTANCE rather than a division by zero.
    """
    if not resistances or any(r <= ZERO_RESISTANCE for r in resistances):
        return ZERO_RESISTANCE
    return 1 / sum(1 / r for r in resistances)


def combine_resistances(mode: CompositionMode, resistances: list[float]) -> float:
    if mode is CompositionMode.PARALLEL:
        return resistance_in_parallel(*resistances)
    return resistance_in_series(*resistances)
