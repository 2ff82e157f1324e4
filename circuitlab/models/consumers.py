"""
Consumers and meters - Components that draw current and may fault.

Each class only sets its defaults and, where it has one, a per-tick hook.
Randomised initial values are drawn from the network's RNG through
``randomize`` so seeded networks are reproducible.
"""

import math
import random
from enum import Enum
from typing import TYPE_CHECKING

from circuitlab.errors import ComponentError

from .component import (
    INFINITE_RESISTANCE,
    LOW_RESISTANCE,
    ZERO_RESISTANCE,
    Capability,
    Component,
    ComponentKind,
    as_number,
)
from .wire import DEFAULT_RADIUS, MATERIALS

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

# Joules -> degrees C for the heater's thermal mass
DEGREES_PER_JOULE = 0.00052656507646646


class Resistor(Component):
    kind = ComponentKind.RESISTOR
    default_resistance = 1.0

    def get_data(self) -> dict:
        data = super().get_data()
        data["resistance"] = self._resistance
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.resistance = as_number(data, "resistance", self._resistance)


class VariableResistor(Resistor):
    kind = ComponentKind.VARIABLE_RESISTOR
    MIN_RESISTANCE = 0.0
    MAX_RESISTANCE = 1e3

    @Resistor.resistance.setter
    def resistance(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value):
            return
        value = max(self.MIN_RESISTANCE, min(self.MAX_RESISTANCE, value))
        self._resistance = ZERO_RESISTANCE if value <= 0 else value


class PhotoResistor(Resistor):
    """Resistance falls linearly from 1 ohm in darkness to a short at 1000 lm."""

    kind = ComponentKind.PHOTO_RESISTOR
    MAX_LUMENS = 1000.0

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        lumens = max(0.0, min(self.MAX_LUMENS, self.light_received))
        self.resistance = 1 + (ZERO_RESISTANCE - 1) * (lumens / self.MAX_LUMENS)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["light"] = self.light_received
        return info


class ThermistorMode(Enum):
    NTC = "ntc"
    PTC = "ptc"


class Thermistor(Resistor):
    """
    Resistance follows the surrounding temperature.

    The temperature is clamped to -50..100 C and mapped linearly onto
    ZERO_RESISTANCE..2 ohms. A PTC thermistor rises with temperature, an NTC
    one falls.
    """

    kind = ComponentKind.THERMISTOR
    MIN_TEMPERATURE = -50.0
    MAX_TEMPERATURE = 100.0
    MAX_RESISTANCE = 2.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.mode = ThermistorMode.NTC

    def temperature_range(self) -> tuple[float, float]:
        """Rated operating range of the part, in degrees C."""
        if self.mode is ThermistorMode.NTC:
            return -55.0, 200.0
        return 0.0, 120.0

    def toggle(self, net: "NetworkModel") -> ThermistorMode:
        if self.mode is ThermistorMode.NTC:
            self.mode = ThermistorMode.PTC
        else:
            self.mode = ThermistorMode.NTC
        return self.mode

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        temperature = max(self.MIN_TEMPERATURE, min(self.MAX_TEMPERATURE, self.external_temperature))
        fraction = (temperature - self.MIN_TEMPERATURE) / (self.MAX_TEMPERATURE - self.MIN_TEMPERATURE)
        low, high = ZERO_RESISTANCE, self.MAX_RESISTANCE
        if self.mode is ThermistorMode.NTC:
            low, high = high, low
        self.resistance = low + (high - low) * fraction

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["mode"] = self.mode.value
        info["temperature"] = self.external_temperature
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["mode"] = self.mode.value
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        if "mode" in data:
            try:
                self.mode = ThermistorMode(data["mode"])
            except ValueError:
                raise ComponentError(f"Unknown thermistor mode {data['mode']!r}") from None


class MaterialContainer(Component):
    """
    Block of material whose resistance is its resistivity times its volume.

    The block is ``length`` px wide with a square ``HEIGHT`` px face; its
    volume is measured in cubic centimetres.
    """

    kind = ComponentKind.MATERIAL_CONTAINER
    HEIGHT = 50.0
    MIN_LENGTH = 10.0
    MAX_LENGTH = 150.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.material = "copper"
        self._length = 50.0

    def randomize(self, rng: random.Random) -> None:
        self.material = rng.choice(list(MATERIALS))

    @property
    def length(self) -> float:
        return self._length

    @length.setter
    def length(self, value: float) -> None:
        self._length = max(self.MIN_LENGTH, min(self.MAX_LENGTH, float(value)))

    def volume(self, pixels_per_cm: float) -> float:
        side = self.HEIGHT / pixels_per_cm
        return self._length / pixels_per_cm * side * side

    def get_resistance(self, net: "NetworkModel") -> float:
        resistance = MATERIALS[self.material] * self.volume(net.settings.pixels_per_cm)
        self._resistance = max(ZERO_RESISTANCE, resistance)
        return self._resistance

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["material"] = self.material
        info["length_cm"] = self._length / net.settings.pixels_per_cm
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["material"] = self.material
        data["length"] = self._length
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        material = str(data.get("material", self.material)).lower()
        if material in MATERIALS:
            self.material = material
        self.length = as_number(data, "length", self._length)


class WireContainer(MaterialContainer):
    """
    Length of bare wire under test.

    Resistance is resistivity times the volume of the wire's cylinder
    (pi * r^2 * length, in cubic centimetres), scaled by 1000.
    """

    kind = ComponentKind.WIRE_CONTAINER
    MIN_LENGTH = 1.0
    MAX_LENGTH = 100.0
    MIN_RADIUS = 1.0
    MAX_RADIUS = 10.0
    SCALE = 1e3

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self._length = 10.0
        self._radius = DEFAULT_RADIUS * 2

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float) -> None:
        self._radius = max(self.MIN_RADIUS, min(self.MAX_RADIUS, float(value)))

    def volume(self, pixels_per_cm: float) -> float:
        radius = self._radius / pixels_per_cm
        return math.pi * radius * radius * (self._length / pixels_per_cm)

    def get_resistance(self, net: "NetworkModel") -> float:
        resistance = MATERIALS[self.material] * self.volume(net.settings.pixels_per_cm) * self.SCALE
        self._resistance = max(ZERO_RESISTANCE, resistance)
        return self._resistance

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["radius_cm"] = self._radius / net.settings.pixels_per_cm
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["radius"] = self._radius
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.radius = as_number(data, "radius", self._radius)


class Bulb(Component):
    kind = ComponentKind.BULB
    base_capabilities = Capability.LUMINOUS
    default_resistance = 2.0
    default_max_current = 5.0
    lumens_per_watt = 15.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.wattage = 10.0

    def brightness(self, net: "NetworkModel") -> float:
        """Fraction of rated wattage being dissipated."""
        if not self.is_on():
            return 0.0
        return abs(self.get_power(net)) / self.wattage

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        power = abs(self.get_power(net))
        if not circuit_broken and power > self.wattage:
            self.blow(net, f"{self} blew at {power:g} W, exceeding its rating of {self.wattage:g} W")

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["brightness"] = self.brightness(net)
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["wattage"] = self.wattage
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        wattage = as_number(data, "wattage", self.wattage)
        if wattage > 0:
            self.wattage = wattage


class Fuse(Component):
    kind = ComponentKind.FUSE
    default_resistance = LOW_RESISTANCE
    default_max_current = 10.0

    def close_to_break(self) -> float:
        """Current as a fraction of the rating; 1.0 is the blowing point."""
        return abs(self.current / self._max_current)

    def cut(self, net: "NetworkModel") -> None:
        self.blow(net, f"{self} was cut")

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["close_to_break"] = self.close_to_break()
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["max_current"] = self._max_current
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.max_current = as_number(data, "max_current", self._max_current)


class Motor(Component):
    kind = ComponentKind.MOTOR
    default_resistance = 4.0
    default_max_current = 5.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.k = 1.0
        self.rotation = 0.0  # radians

    def randomize(self, rng: random.Random) -> None:
        self.k = rng.uniform(0.1, 5)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        if self.is_on():
            delta = self.current / self._max_current * self.k
            self.rotation = (self.rotation + delta) % (2 * math.pi)

    def angle_degrees(self) -> float:
        return math.degrees(self.rotation)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["angle"] = self.angle_degrees()
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["k"] = self.k
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.k = as_number(data, "k", self.k)


class Heater(Component):
    """
    Converts electrical heat into a temperature that it radiates.

    While on, ``heat() * efficiency`` joules accumulate each tick up to the
    maximum temperature; while off the heater cools by a random fraction
    of its efficiency.
    """

    kind = ComponentKind.HEATER
    base_capabilities = Capability.HEAT_EMITTING
    default_resistance = 2.5
    MAX_TEMPERATURE = 100.0

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.efficiency = 3000.0
        self.joules = 0.0
        self._max_temperature = self.MAX_TEMPERATURE

    def randomize(self, rng: random.Random) -> None:
        self.efficiency = rng.randint(10, 60) * 100.0

    @property
    def max_temperature(self) -> float:
        return self._max_temperature

    @max_temperature.setter
    def max_temperature(self, degrees: float) -> None:
        self._max_temperature = max(0.0, min(self.MAX_TEMPERATURE + 1, float(degrees)))

    @property
    def degrees(self) -> float:
        return self.joules * DEGREES_PER_JOULE

    def percent(self) -> float:
        return self.degrees / self._max_temperature * 100

    def emitted_temperature(self) -> float:
        return self.degrees

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        max_joules = self._max_temperature / DEGREES_PER_JOULE
        if self.is_on():
            if self.joules < max_joules:
                gained = self.heat(ctx.frames_to_seconds(1)) * self.efficiency
                self.joules = min(max_joules, self.joules + gained)
                net.temperature_dirty = True
        elif self.joules > 0:
            self.joules = max(0.0, self.joules - net.rng.random() * self.efficiency)
            net.temperature_dirty = True

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["temperature"] = self.degrees
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["efficiency"] = self.efficiency
        data["max_temperature"] = self._max_temperature
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.efficiency = as_number(data, "efficiency", self.efficiency)
        self.max_temperature = as_number(data, "max_temperature", self._max_temperature)


class Buzzer(Component):
    kind = ComponentKind.BUZZER
    default_resistance = 3.0
    default_max_current = 5.0

    def volume(self) -> float:
        if not self.is_on():
            return 0.0
        return max(0.0, min(1.0, abs(self.current) / self._max_current))

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["volume"] = self.volume()
        return info


class Ammeter(Component):
    kind = ComponentKind.AMMETER
    default_resistance = LOW_RESISTANCE

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["reading"] = self.current
        return info


class Voltmeter(Component):
    kind = ComponentKind.VOLTMETER
    default_resistance = INFINITE_RESISTANCE

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["reading"] = self.get_voltage(net)
        return info


class Thermometer(Component):
    """Reads the surrounding temperature; blows above its upper limit."""

    kind = ComponentKind.THERMOMETER
    default_resistance = LOW_RESISTANCE
    MIN_READING = -20.0
    MAX_READING = 100.0

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        temperature = self.external_temperature
        if not circuit_broken and temperature > self.MAX_READING:
            self.blow(net, f"{self} blew as it exceeded {self.MAX_READING:g}C (was {temperature:g}C)")

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["reading"] = max(self.MIN_READING, self.external_temperature)
        return info


class LightUnit(Enum):
    MICRO = "ulm"
    MILLI = "mlm"
    NORMAL = "lm"
    KILO = "klm"


_LUMEN_SCALE = {
    LightUnit.MICRO: 1e6,
    LightUnit.MILLI: 1e3,
    LightUnit.NORMAL: 1.0,
    LightUnit.KILO: 1e-3,
}


class Lightmeter(Component):
    """Reads the light falling on it, in the selected unit, while current flows."""

    kind = ComponentKind.LIGHTMETER
    default_resistance = LOW_RESISTANCE

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.units = LightUnit.NORMAL

    def change_units(self, step: int = 1) -> LightUnit:
        units = list(LightUnit)
        self.units = units[(units.index(self.units) + step) % len(units)]
        return self.units

    def toggle(self, net: "NetworkModel") -> LightUnit:
        return self.change_units(1)

    def reading(self):
        """Light received in ``units``, or None while the meter is off."""
        if not self.is_on():
            return None
        return self.light_received * _LUMEN_SCALE[self.units]

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["reading"] = self.reading()
        info["units"] = self.units.value
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["units"] = self.units.value
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        if "units" in data:
            try:
                self.units = LightUnit(data["units"])
            except ValueError:
                raise ComponentError(f"Unknown lightmeter units {data['units']!r}") from None
