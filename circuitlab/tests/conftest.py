"""
Shared test fixtures for the circuitlab test suite.

Fixtures build networks through CircuitController so every test exercises
the same connection rules a caller would.
"""

import sys
from pathlib import Path

# Ensure the repository root is on sys.path so ``circuitlab`` imports work
# when running individual test files without installing the package.
_root_dir = str(Path(__file__).resolve().parent.parent.parent)
if _root_dir not in sys.path:
    sys.path.insert(0, _root_dir)

import pytest
from circuitlab.config import SimulationSettings
from circuitlab.controllers.circuit_controller import CircuitController
from circuitlab.controllers.simulation_controller import SimulationController
from circuitlab.models.network import NetworkModel


def build_loop(controller, source, *parts):
    """
    Wire ``source -> parts[0] -> ... -> parts[-1] -> source``.

    Each part is either a type name or a (type name, data) pair. Parts are
    laid out 50 px apart. Returns the created components, source first.
    """
    type_name, data = _split_part(source)
    head = controller.add_component(type_name, (0.0, 0.0), data)
    created = [head]
    for i, part in enumerate(parts, start=1):
        type_name, data = _split_part(part)
        component = controller.add_component(type_name, (50.0 * i, 0.0), data)
        controller.connect(created[-1].component_id, component.component_id)
        created.append(component)
    controller.connect(created[-1].component_id, head.component_id)
    return created


def _split_part(part):
    if isinstance(part, tuple):
        return part
    return part, None


@pytest.fixture
def network():
    return NetworkModel(settings=SimulationSettings(seed=1234))


@pytest.fixture
def controller(network):
    return CircuitController(network)


@pytest.fixture
def sim(network, controller):
    return SimulationController(network, controller)


@pytest.fixture
def events():
    """Fixture that returns a list and a callback that appends events to it."""
    recorded = []

    def callback(event, data):
        recorded.append((event, data))

    return recorded, callback


@pytest.fixture
def loop():
    """The build_loop helper, for tests that assemble their own series loops."""
    return build_loop


@pytest.fixture
def series_network(controller):
    """
    Cell (1.5 V) -> Resistor (3 ohm) -> back to the cell.

    Returns (cell, resistor).
    """
    cell, resistor = build_loop(controller, ("Cell", {"voltage": 1.5}), ("Resistor", {"resistance": 3.0}))
    return cell, resistor


@pytest.fixture
def parallel_network(controller):
    """
    DC supply (4 V) -> Connector -+-> R1 (2 ohm) -+-> End -> supply
                                  +-> R2 (2 ohm) -+

    Returns a dict of the components by role.
    """
    supply = controller.add_component("DC Power Supply", (0.0, 0.0), {"voltage": 4.0})
    split = controller.add_component("Connector", (50.0, 0.0))
    r1 = controller.add_component("Resistor", (100.0, -50.0), {"resistance": 2.0})
    r2 = controller.add_component("Resistor", (100.0, 50.0), {"resistance": 2.0})
    end = controller.add_component("Connector", (150.0, 0.0))

    controller.connect(supply.component_id, split.component_id)
    controller.connect(split.component_id, r1.component_id)
    controller.connect(split.component_id, r2.component_id)
    controller.connect(r1.component_id, end.component_id)
    controller.connect(r2.component_id, end.component_id)
    controller.connect(end.component_id, supply.component_id)
    return {"supply": supply, "split": split, "r1": r1, "r2": r2, "end": end}
