"""
Switches - Components that break their own circuit while open.

An open switch breaks its circuit with itself as the cause; closing it only
clears a break that it caused, so a blown component elsewhere keeps the
circuit broken.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .component import ZERO_RESISTANCE, Component, ComponentKind

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)


class SwitchState(Enum):
    OPEN = "open"
    CLOSED = "closed"


class Switch(Component):
    kind = ComponentKind.SWITCH
    default_resistance = ZERO_RESISTANCE

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.state = SwitchState.OPEN

    @property
    def is_open(self) -> bool:
        return self.state is SwitchState.OPEN

    def open(self, net: "NetworkModel") -> None:
        self.state = SwitchState.OPEN
        self._apply(net)

    def close(self, net: "NetworkModel") -> None:
        self.state = SwitchState.CLOSED
        self._apply(net)

    def toggle(self, net: "NetworkModel") -> SwitchState:
        if self.is_open:
            self.close(net)
        else:
            self.open(net)
        logger.debug("%s is now %s", self, self.state.value)
        return self.state

    def _apply(self, net: "NetworkModel") -> None:
        if self.is_open:
            if not net.is_broken(self.circuit_id):
                net.break_circuit(self.circuit_id, self.component_id)
        elif net.broken_by(self.circuit_id, self.component_id):
            net.break_circuit(self.circuit_id, None)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        self._apply(net)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["state"] = self.state.value
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["state"] = self.state.value
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        try:
            self.state = SwitchState(data.get("state", self.state.value))
        except ValueError:
            logger.warning("Ignoring unknown switch state %r for %s", data.get("state"), self)


class PushSwitch(Switch):
    """Momentary switch: closed only while pressed."""

    kind = ComponentKind.PUSH_SWITCH

    def press(self, net: "NetworkModel") -> None:
        self.close(net)

    def release(self, net: "NetworkModel") -> None:
        self.open(net)
