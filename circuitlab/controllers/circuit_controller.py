"""
CircuitController - Orchestrates component and wire mutations.

This module contains no drawing code. It manages the NetworkModel and
notifies views of changes through an observer pattern.
"""

import logging
from typing import Any, Callable, Optional

from circuitlab.errors import StructuralError
from circuitlab.models.component import Component
from circuitlab.models.network import NetworkModel
from circuitlab.models.wire import WireData

logger = logging.getLogger(__name__)


class CircuitController:
    """
    Controller for network component and wire operations.

    Manages the NetworkModel and notifies registered observers when
    the model changes. Views register callbacks to stay in sync.

    Observer events:
        component_added (Component) - A new component was added
        component_removed (int) - A component was removed (by ID)
        component_moved (Component) - A component was moved
        component_changed (Component) - Data, polarity or switch state changed
        wire_added (WireData) - A new wire was added
        wire_removed (int) - A wire was removed (by ID)
        circuit_cleared (None) - The entire network was cleared
        model_loaded (None) - Network loaded from file
        model_saved (None) - Network saved to file
        simulation_started (None) - Simulation began
        simulation_stopped (None) - Simulation stopped, currents zeroed
        tick_completed (TickRecord) - One frame was evaluated
        simulation_completed (SimulationResult) - A run finished
        component_blown (FaultNotice) - A component blew during a tick
        simulation_failed (str) - A tick hit a structural error and halted
    """

    def __init__(self, model: Optional[NetworkModel] = None):
        self.model = model or NetworkModel()
        self._observers: list[Callable[[str, Any], None]] = []

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for model change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        """Notify all observers of a model change."""
        for observer in self._observers:
            try:
                observer(event, data)
            except (TypeError, AttributeError, RuntimeError) as e:
                logger.error("Error notifying observer: %s", e)

    # --- Component operations ---

    def add_component(self, component_type: str,
                      position: tuple[float, float] = (0.0, 0.0),
                      data: Optional[dict] = None) -> Component:
        """
        Create a component in the root circuit.

        Raises:
            ComponentError: If the type is unknown or ``data`` is invalid.
        """
        try:
            component = self.model.add_component(component_type, position, data)
        except StructuralError as e:
            logger.debug("Rejected new %r: %s", component_type, e)
            raise
        self._notify('component_added', component)
        return component

    def remove_component(self, component_id: int) -> None:
        """Remove a component and every wire attached to it."""
        for wire_id in self.model.remove_component(component_id):
            self._notify('wire_removed', wire_id)
        self._notify('component_removed', component_id)

    def move_component(self, component_id: int,
                       position: tuple[float, float]) -> None:
        """Move a component; wire lengths and the environment change with it."""
        component = self.model.get_component(component_id)
        component.position = (float(position[0]), float(position[1]))
        self.model.light_dirty = True
        self.model.temperature_dirty = True
        self._notify('component_moved', component)

    def update_component_data(self, component_id: int, data: dict) -> None:
        """Apply type-specific fields, as stored in a saved network."""
        component = self.model.get_component(component_id)
        component.apply_data(data)
        self._notify('component_changed', component)

    def flip_component(self, component_id: int):
        """Reverse a power source's polarity or a diode's direction."""
        component = self.model.get_component(component_id)
        direction = component.flip(self.model)
        self._notify('component_changed', component)
        return direction

    def toggle_component(self, component_id: int):
        """Toggle a switch, push switch or two-way switch."""
        component = self.model.get_component(component_id)
        state = component.toggle(self.model)
        self._notify('component_changed', component)
        return state

    # --- Wire operations ---

    def connect(self, source_id: int, target_id: int,
                path: Optional[list[tuple[float, float]]] = None,
                wire_options: Optional[dict] = None,
                merge: Optional[bool] = None) -> WireData:
        """
        Wire ``source_id``'s output to ``target_id``'s input.

        Returns:
            The newly created WireData.

        Raises:
            StructuralError: If the connection is refused; nothing changes.
        """
        try:
            wire = self.model.connect(source_id, target_id, path, wire_options, merge)
        except StructuralError as e:
            logger.debug("Rejected connection %s -> %s: %s", source_id, target_id, e)
            raise
        self._notify('wire_added', wire)
        return wire

    def remove_wire(self, wire_id: int) -> None:
        """Remove a wire by ID."""
        self.model.remove_wire(wire_id)
        self._notify('wire_removed', wire_id)

    # --- Network operations ---

    def clear_circuit(self) -> None:
        """Clear the entire network."""
        self.model.clear()
        self._notify('circuit_cleared', None)
