"""
Diode - Lets current through in one direction only.

A diode locks (near-infinite resistance, circuit broken) as soon as it sees
current flowing against its direction. It never unlocks during evaluation;
only an explicit ``unlock`` call, made whenever a root power source flips,
can release it.
"""

import logging
import random
from typing import TYPE_CHECKING

from circuitlab.errors import ComponentError

from .component import (
    INFINITE_RESISTANCE,
    LOW_RESISTANCE,
    Capability,
    Component,
    ComponentKind,
    Direction,
    as_number,
)

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)


class Diode(Component):
    kind = ComponentKind.DIODE
    base_capabilities = Capability.DIODE
    default_resistance = LOW_RESISTANCE
    default_max_current = 5.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.direction = Direction.RIGHT
        self.locked = False

    def _flow_is_reversed(self) -> bool:
        if self.direction is Direction.RIGHT:
            return self.current < 0
        return self.current > 0

    def lock(self, net: "NetworkModel") -> bool:
        """
        Lock if current opposes the diode's direction. Returns True on locking.

        An already locked diode keeps its circuit broken.
        """
        if self.locked:
            self._hold(net)
            return False
        if not self._flow_is_reversed():
            return False
        self.locked = True
        self._resistance = INFINITE_RESISTANCE
        self._hold(net)
        logger.debug("%s locked against %gA", self, self.current)
        return True

    def _hold(self, net: "NetworkModel") -> None:
        if not net.is_broken(self.circuit_id):
            net.break_circuit(self.circuit_id, self.component_id)

    def unlock(self, net: "NetworkModel") -> bool:
        """Unlock if current no longer opposes the diode. Returns True on success."""
        if self._flow_is_reversed():
            return False
        self.locked = False
        self._resistance = LOW_RESISTANCE
        if net.broken_by(self.circuit_id, self.component_id):
            net.break_circuit(self.circuit_id, None)
        return True

    def flip(self, net: "NetworkModel") -> Direction:
        """Reverse the diode's direction, then try to unlock."""
        self.direction = Direction.LEFT if self.direction is Direction.RIGHT else Direction.RIGHT
        self.unlock(net)
        return self.direction

    def is_on(self) -> bool:
        return not self.locked and super().is_on()

    def is_passable(self, net: "NetworkModel") -> bool:
        return not self.locked and super().is_passable(net)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        self.lock(net)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["locked"] = self.locked
        info["direction"] = self.direction.value
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["direction"] = self.direction.value
        data["locked"] = self.locked
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        if "direction" in data:
            try:
                self.direction = Direction(data["direction"])
            except ValueError:
                raise ComponentError(f"Unknown diode direction {data['direction']!r}") from None
        self.locked = bool(data.get("locked", self.locked))
        self._resistance = INFINITE_RESISTANCE if self.locked else LOW_RESISTANCE


class LightEmittingDiode(Diode):
    """Diode that glows in proportion to its current."""

    kind = ComponentKind.LIGHT_EMITTING_DIODE
    base_capabilities = Capability.DIODE | Capability.LUMINOUS
    lumens_per_watt = 90.0
    MAX_HUE = 359

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.hue = 0

    def randomize(self, rng: random.Random) -> None:
        self.hue = rng.randint(0, self.MAX_HUE)

    def brightness(self) -> float:
        if not self.is_on():
            return 0.0
        return abs(self.current) / self._max_current

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["brightness"] = self.brightness()
        info["hue"] = self.hue
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["hue"] = self.hue
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.hue = int(as_number(data, "hue", self.hue)) % (self.MAX_HUE + 1)
