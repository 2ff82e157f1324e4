"""Tests for CircuitController."""

import logging

import pytest
from circuitlab.controllers.circuit_controller import CircuitController
from circuitlab.errors import ComponentError, WiringError
from circuitlab.models.component import Direction
from circuitlab.models.network import NetworkModel


class TestObserverPattern:
    def test_add_observer(self, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        controller.clear_circuit()
        assert len(recorded) == 1

    def test_remove_observer(self, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        controller.remove_observer(callback)
        controller.clear_circuit()
        assert len(recorded) == 0

    def test_duplicate_observer_not_added(self, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        controller.add_observer(callback)
        controller.clear_circuit()
        assert len(recorded) == 1

    def test_remove_nonexistent_observer_safe(self, controller, events):
        _, callback = events
        controller.remove_observer(callback)  # Should not raise

    def test_failing_observer_is_logged(self, controller, events, caplog):
        recorded, callback = events

        def broken(event, data):
            raise RuntimeError("view went away")

        controller.add_observer(broken)
        controller.add_observer(callback)
        with caplog.at_level(logging.ERROR):
            controller.clear_circuit()
        assert "view went away" in caplog.text
        assert recorded == [("circuit_cleared", None)]


class TestComponentOperations:
    def test_add_component(self, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        comp = controller.add_component("Resistor", (100.0, 200.0))
        assert comp.component_id == 1
        assert comp.type_name == "Resistor"
        assert comp.position == (100.0, 200.0)
        assert recorded[-1] == ("component_added", comp)

    def test_ids_increment(self, controller):
        first = controller.add_component("Cell")
        second = controller.add_component("Bulb")
        assert second.component_id == first.component_id + 1

    def test_unknown_type_rejected_without_event(self, controller, events):
        recorded, callback = events
        controller.add_observer(callback)
        with pytest.raises(ComponentError):
            controller.add_component("Flux Capacitor")
        assert recorded == []

    def test_remove_component_emits_wire_events_first(self, controller, events, series_network):
        recorded, callback = events
        cell, resistor = series_network
        controller.add_observer(callback)
        controller.remove_component(resistor.component_id)
        names = [event for event, _ in recorded]
        assert names == ["wire_removed", "wire_removed", "component_removed"]
        assert recorded[-1][1] == resistor.component_id
        assert not cell.inputs and not cell.outputs

    def test_move_component(self, controller, network, events):
        recorded, callback = events
        comp = controller.add_component("Bulb")
        network.temperature_dirty = False
        controller.add_observer(callback)
        controller.move_component(comp.component_id, (30, 40))
        assert comp.position == (30.0, 40.0)
        assert network.temperature_dirty
        assert recorded[-1] == ("component_moved", comp)

    def test_update_component_data(self, controller, events):
        recorded, callback = events
        comp = controller.add_component("Resistor")
        controller.add_observer(callback)
        controller.update_component_data(comp.component_id, {"resistance": 47.0})
        assert comp.resistance == 47.0
        assert recorded[-1] == ("component_changed", comp)

    def test_flip_component(self, controller, events):
        recorded, callback = events
        cell = controller.add_component("Cell")
        controller.add_observer(callback)
        assert controller.flip_component(cell.component_id) is Direction.RIGHT
        assert recorded[-1] == ("component_changed", cell)

    def test_toggle_unsupported(self, controller, events):
        recorded, callback = events
        bulb = controller.add_component("Bulb")
        controller.add_observer(callback)
        with pytest.raises(ComponentError):
            controller.toggle_component(bulb.component_id)
        assert recorded == []

    def test_unknown_id(self, controller):
        with pytest.raises(ComponentError):
            controller.move_component(99, (0, 0))


class TestWireOperations:
    def test_connect_emits_wire(self, controller, events):
        recorded, callback = events
        cell = controller.add_component("Cell")
        bulb = controller.add_component("Bulb")
        controller.add_observer(callback)
        wire = controller.connect(cell.component_id, bulb.component_id, path=[(10, 10)])
        assert recorded[-1] == ("wire_added", wire)
        assert wire.path == [(10, 10)]

    def test_rejected_connection_emits_nothing(self, controller, events):
        recorded, callback = events
        cell = controller.add_component("Cell")
        controller.add_observer(callback)
        with pytest.raises(WiringError):
            controller.connect(cell.component_id, cell.component_id)
        assert recorded == []

    def test_remove_wire(self, controller, events):
        recorded, callback = events
        cell = controller.add_component("Cell")
        bulb = controller.add_component("Bulb")
        wire = controller.connect(cell.component_id, bulb.component_id)
        controller.add_observer(callback)
        controller.remove_wire(wire.wire_id)
        assert recorded[-1] == ("wire_removed", wire.wire_id)
        assert not cell.outputs

    def test_remove_unknown_wire(self, controller):
        with pytest.raises(WiringError):
            controller.remove_wire(42)


class TestNetworkOperations:
    def test_clear_circuit(self, controller, network, series_network):
        controller.clear_circuit()
        assert not network.components
        assert not network.wires
        assert list(network.circuits) == [network.root_id]

    def test_owns_model_when_none_given(self):
        controller = CircuitController()
        assert isinstance(controller.model, NetworkModel)
