"""
Pure Python data models for circuitlab.

This package contains the component graph, the circuit tree and the
series/parallel solver. Nothing here knows about files, observers or
output formats.
"""

from .capacitor import Capacitor, CapacitorState
from .catalog import COMPONENT_CLASSES, COMPONENT_TYPES, create_component, resolve_kind
from .circuit import (
    CircuitData,
    CompositionMode,
    combine_resistances,
    resistance_in_parallel,
    resistance_in_series,
)
from .component import (
    INFINITE_RESISTANCE,
    LOW_RESISTANCE,
    ZERO_RESISTANCE,
    Capability,
    Component,
    ComponentKind,
    Direction,
)
from .connector import BranchMode, Connector, TwoWaySwitch
from .network import FaultNotice, NetworkModel
from .tick import TickContext
from .tracing import trace
from .wire import MATERIALS, WireData

__all__ = [
    "NetworkModel",
    "FaultNotice",
    "Component",
    "ComponentKind",
    "Capability",
    "Direction",
    "COMPONENT_CLASSES",
    "COMPONENT_TYPES",
    "create_component",
    "resolve_kind",
    "CircuitData",
    "CompositionMode",
    "combine_resistances",
    "resistance_in_series",
    "resistance_in_parallel",
    "ZERO_RESISTANCE",
    "LOW_RESISTANCE",
    "INFINITE_RESISTANCE",
    "Connector",
    "TwoWaySwitch",
    "BranchMode",
    "Capacitor",
    "CapacitorState",
    "TickContext",
    "trace",
    "WireData",
    "MATERIALS",
]
