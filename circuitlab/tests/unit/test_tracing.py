"""Tests for the reachability search (circuitlab/models/tracing.py)."""

import pytest
from circuitlab.models.connector import BranchMode
from circuitlab.models.tracing import trace


def _chain(network, *names):
    """Add components and wire them one after another (no closing wire)."""
    parts = [network.add_component(name, (50.0 * i, 0.0)) for i, name in enumerate(names)]
    for source, target in zip(parts, parts[1:]):
        network.connect(source.component_id, target.component_id)
    return parts


@pytest.fixture
def uneven_branches(network):
    """
    Cell -> Split -+-> R2 -> R3 -+-> End -> cell
                   +-> R1 -------+

    The longer route is wired first.
    """
    cell, split, r1, r2, r3, end = (
        network.add_component(name)
        for name in ("Cell", "Connector", "Resistor", "Resistor", "Resistor", "Connector")
    )
    network.connect(cell.component_id, split.component_id)
    network.connect(split.component_id, r2.component_id)
    network.connect(r2.component_id, r3.component_id)
    network.connect(split.component_id, r1.component_id)
    network.connect(r3.component_id, end.component_id)
    network.connect(r1.component_id, end.component_id)
    network.connect(end.component_id, cell.component_id)
    return {"cell": cell, "split": split, "r1": r1, "r2": r2, "r3": r3, "end": end}


@pytest.fixture
def two_way(network):
    """
    Cell -> Two-Way Switch -+-> R1 -+-> End -> cell
                           +-> R2 -+

    The first branch is active.
    """
    cell = network.add_component("Cell")
    switch = network.add_component("Two-Way Switch", data={"mode": "first"})
    r1 = network.add_component("Resistor")
    r2 = network.add_component("Resistor")
    end = network.add_component("Connector")
    network.connect(cell.component_id, switch.component_id)
    network.connect(switch.component_id, r1.component_id)
    network.connect(switch.component_id, r2.component_id)
    network.connect(r1.component_id, end.component_id)
    network.connect(r2.component_id, end.component_id)
    network.connect(end.component_id, cell.component_id)
    return {"cell": cell, "switch": switch, "r1": r1, "r2": r2, "end": end}


class TestShortestPath:
    def test_fewest_hops_wins(self, network, uneven_branches):
        path = trace(network, uneven_branches["split"], uneven_branches["end"])
        assert path == [uneven_branches["r1"]]

    def test_tie_goes_to_first_found(self, network, parallel_network):
        path = trace(network, parallel_network["split"], parallel_network["end"])
        assert path == [parallel_network["r1"]]

    def test_adjacent_target(self, network, series_network):
        cell, resistor = series_network
        assert trace(network, cell, resistor) == []

    def test_loop_back_to_start(self, network, uneven_branches):
        cell = uneven_branches["cell"]
        path = trace(network, cell, cell)
        assert path == [uneven_branches["split"], uneven_branches["r1"], uneven_branches["end"]]

    def test_no_loop_back_to_start(self, network):
        cell, _ = _chain(network, "Cell", "Resistor")
        assert trace(network, cell, cell) is None


class TestCycles:
    def test_loop_without_target_terminates(self, network, series_network):
        cell, _ = series_network
        island = network.add_component("Bulb")
        assert trace(network, cell, island) is None
        assert trace(network, cell, island, restrained=False) is None


class TestDirection:
    def test_restrained_follows_outputs_only(self, network):
        cell, first, second = _chain(network, "Cell", "Resistor", "Resistor")
        assert trace(network, second, first) is None
        assert trace(network, second, cell) is None

    def test_unrestrained_walks_back_along_inputs(self, network):
        cell, first, second = _chain(network, "Cell", "Resistor", "Resistor")
        assert trace(network, second, first, restrained=False) == []
        assert trace(network, second, cell, restrained=False) == [first]


class TestPassability:
    def test_blown_component_blocks(self, network, controller, loop):
        cell, fuse, resistor = loop(controller, "Cell", "Fuse", "Resistor")
        fuse.blown = True
        assert trace(network, cell, resistor) is None
        assert trace(network, cell, resistor, check_passable=False) == [fuse]

    def test_open_switch_blocks(self, network, controller, loop):
        cell, switch, resistor = loop(controller, "Cell", "Switch", "Resistor")
        switch.open(network)
        assert trace(network, cell, resistor) is None
        switch.close(network)
        assert trace(network, cell, resistor) == [switch]


class TestTwoWaySwitch:
    def test_inactive_branch_blocked(self, network, two_way):
        assert trace(network, two_way["cell"], two_way["r2"]) is None
        assert trace(network, two_way["cell"], two_way["r1"]) == [two_way["switch"]]

    def test_toggle_swaps_reachable_branch(self, network, two_way):
        assert two_way["switch"].toggle(network) is BranchMode.ONLY_SECOND
        assert trace(network, two_way["cell"], two_way["r1"]) is None
        assert trace(network, two_way["cell"], two_way["r2"]) == [two_way["switch"]]

    def test_round_trip_through_active_branch(self, network, two_way):
        cell = two_way["cell"]
        assert trace(network, cell, cell) == [two_way["switch"], two_way["r1"], two_way["end"]]
