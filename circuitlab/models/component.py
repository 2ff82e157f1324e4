"""
Component - Base class for every node of the wire graph.

This module contains no drawing code. A component keeps its own electrical
state and the ids of its wires; its circuit and its neighbours are looked up
through the NetworkModel handed to each call, never stored as references.
"""

import logging
import math
from enum import Enum, Flag, auto
from typing import TYPE_CHECKING, Optional

from circuitlab.errors import ComponentError

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)

# Sentinels standing in for true zero / infinite resistance
ZERO_RESISTANCE = 1e-10
LOW_RESISTANCE = 1e-3
INFINITE_RESISTANCE = 7.5e15

# Largest current still representable exactly as an integer
MAX_SAFE_CURRENT = 2**53 - 1


class ComponentKind(Enum):
    """Closed set of component types. Values are the display names."""

    CELL = "Cell"
    BATTERY = "Battery"
    DC_POWER_SUPPLY = "DC Power Supply"
    AC_POWER_SUPPLY = "AC Power Supply"
    RESISTOR = "Resistor"
    VARIABLE_RESISTOR = "Variable Resistor"
    PHOTO_RESISTOR = "Photo Resistor"
    THERMISTOR = "Thermistor"
    MATERIAL_CONTAINER = "Material Container"
    WIRE_CONTAINER = "Wire Container"
    BULB = "Bulb"
    FUSE = "Fuse"
    MOTOR = "Motor"
    HEATER = "Heater"
    BUZZER = "Buzzer"
    AMMETER = "Ammeter"
    VOLTMETER = "Voltmeter"
    THERMOMETER = "Thermometer"
    LIGHTMETER = "Lightmeter"
    SWITCH = "Switch"
    PUSH_SWITCH = "Push Switch"
    CONNECTOR = "Connector"
    TWO_WAY_SWITCH = "Two-Way Switch"
    DIODE = "Diode"
    LIGHT_EMITTING_DIODE = "Light Emitting Diode"
    CAPACITOR = "Capacitor"


class Capability(Flag):
    """Behavioural traits resolved once when a component is built."""

    NONE = 0
    POWER_SOURCE = auto()
    LUMINOUS = auto()
    HEAT_EMITTING = auto()
    BLOWABLE = auto()
    CONNECTOR = auto()
    SWITCHING = auto()
    DIODE = auto()
    TIME_DEPENDENT = auto()


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"


class Component:
    """
    A node in the wire graph.

    Subclasses set the class-level defaults below and override the hooks
    ``on_evaluate``, ``describe``, ``get_data`` and ``apply_data``.

    Attributes:
        component_id: Stable id within the owning NetworkModel.
        circuit_id: Id of the circuit this component belongs to.
        inputs / outputs: Ordered wire ids (what drives it / what it drives).
        current: Signed current in amps; the sign is the flow direction.
        blown: Sticky fault flag.
    """

    kind: ComponentKind
    base_capabilities: Capability = Capability.NONE
    max_inputs: int = 1
    max_outputs: int = 1
    default_resistance: float = 0.0
    default_max_current: Optional[float] = None
    lumens_per_watt: float = 0.0

    def __init__(self, component_id: int, circuit_id: int,
                 position: tuple[float, float] = (0.0, 0.0)):
        self.component_id = component_id
        self.circuit_id = circuit_id
        self.position = (float(position[0]), float(position[1]))
        self.angle = 0.0
        self.inputs: list[int] = []
        self.outputs: list[int] = []
        self.current = 0.0
        self.blown = False
        self.light_received = 0.0
        self.external_temperature = 20.0
        self._resistance = self.default_resistance
        self._max_current = self.default_max_current

        self.capabilities = self.base_capabilities
        if self._max_current is not None:
            self.capabilities |= Capability.BLOWABLE

    def __str__(self) -> str:
        return f"{self.type_name} #{self.component_id}"

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(id={self.component_id}, "
                f"circuit={self.circuit_id}, current={self.current!r})")

    @property
    def type_name(self) -> str:
        return self.kind.value

    def randomize(self, rng) -> None:
        """Draw randomised initial values from the network's RNG."""

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def is_power_source(self) -> bool:
        return self.has(Capability.POWER_SOURCE)

    @property
    def is_connector(self) -> bool:
        return self.has(Capability.CONNECTOR)

    # --- Electrical state ---

    @property
    def resistance(self) -> float:
        return self._resistance

    @resistance.setter
    def resistance(self, value: float) -> None:
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            return
        self._resistance = ZERO_RESISTANCE if value <= 0 else value

    @property
    def max_current(self) -> Optional[float]:
        return self._max_current

    @max_current.setter
    def max_current(self, value: float) -> None:
        if self._max_current is None:
            raise ComponentError(f"{self} has no current limit")
        value = float(value)
        if math.isfinite(value) and value > 0:
            self._max_current = value

    def get_resistance(self, net: "NetworkModel") -> float:
        """Resistance this component contributes to its circuit."""
        return self._resistance

    def get_voltage(self, net: "NetworkModel") -> float:
        return self.current * self.get_resistance(net)

    def is_blown(self) -> bool:
        if self.has(Capability.BLOWABLE):
            magnitude = abs(self.current)
            return self.blown or magnitude > self._max_current or magnitude > MAX_SAFE_CURRENT
        return self.blown

    def is_on(self) -> bool:
        return self.current != 0 and not self.blown

    def is_passable(self, net: "NetworkModel") -> bool:
        """Can a trace pass through this component?"""
        return not self.is_blown() and not net.broken_by(self.circuit_id, self.component_id)

    def get_power(self, net: "NetworkModel") -> float:
        if not self.is_on():
            return 0.0
        return self.get_voltage(net) * self.current

    def luminosity(self, net: "NetworkModel") -> float:
        """Light output in lumens (0 for non-luminous components)."""
        if not self.has(Capability.LUMINOUS) or not self.is_on():
            return 0.0
        return abs(self.get_power(net)) * self.lumens_per_watt

    def emitted_temperature(self) -> float:
        """Temperature (degrees C) radiated into the surroundings."""
        return 0.0

    def heat(self, seconds: float = 1.0) -> float:
        """Joule heating over ``seconds``: I^2 * R * t."""
        return self.current * self.current * self._resistance * seconds

    # --- Evaluation ---

    def evaluate(self, net: "NetworkModel", ctx: "TickContext") -> None:
        """
        Advance this component by one tick and cascade along its outputs.

        Each component is evaluated at most once per tick; the head power
        source is never re-entered from a wire.
        """
        if self.component_id in ctx.visited:
            return
        ctx.visited.add(self.component_id)

        circuit_broken = net.is_broken(self.circuit_id)
        if not circuit_broken and self.is_blown():
            self.blow(net)
            circuit_broken = net.is_broken(self.circuit_id)

        self.on_evaluate(net, ctx, circuit_broken)

        for wire_id in list(self.outputs):
            target_id = net.wires[wire_id].target_id
            if target_id == ctx.head_id:
                continue
            net.components[target_id].evaluate(net, ctx)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        """Type-specific per-tick behaviour."""

    def blow(self, net: "NetworkModel", message: Optional[str] = None) -> None:
        """Break the owning circuit and mark this component as blown."""
        net.break_circuit(self.circuit_id, self.component_id)
        if self.blown:
            return
        self.blown = True
        if message is None:
            limit = "its limit" if self._max_current is None else f"its limit of {self._max_current:g} A"
            message = f"{self} blew on {self.current:g} A, exceeding {limit}"
        logger.warning(message)
        net.report_fault(self.component_id, message)

    # --- User actions ---

    def flip(self, net: "NetworkModel"):
        raise ComponentError(f"{self} cannot be flipped")

    def toggle(self, net: "NetworkModel"):
        raise ComponentError(f"{self} cannot be toggled")

    # --- Queries and persistence ---

    def describe(self, net: "NetworkModel") -> dict:
        """Readings for inspection panels and exporters."""
        return {
            "id": self.component_id,
            "type": self.type_name,
            "resistance": self.get_resistance(net),
            "voltage": self.get_voltage(net),
            "current": self.current,
            "is_on": self.is_on(),
            "is_blown": self.is_blown(),
            "power": self.get_power(net),
        }

    def get_data(self) -> dict:
        """Type-specific fields for the saved network."""
        return {"blown": self.blown}

    def apply_data(self, data: dict) -> None:
        """Restore fields produced by get_data(). Unknown keys are ignored."""
        self.blown = bool(data.get("blown", False))


def as_number(data: dict, key: str, default=None):
    """Fetch a finite number from saved data, or ``default``."""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value
