"""
Component catalogue - Maps type names to component classes.

Type names are matched ignoring case, spaces, hyphens and underscores, so
"Two-Way Switch", "two_way_switch" and "TwoWaySwitch" are the same type.
"""

from circuitlab.errors import ComponentError

from .capacitor import Capacitor
from .component import Component, ComponentKind
from .connector import Connector, TwoWaySwitch
from .consumers import (
    Ammeter,
    Bulb,
    Buzzer,
    Fuse,
    Heater,
    Lightmeter,
    MaterialContainer,
    Motor,
    PhotoResistor,
    Resistor,
    Thermistor,
    Thermometer,
    VariableResistor,
    Voltmeter,
    WireContainer,
)
from .diode import Diode, LightEmittingDiode
from .sources import ACPowerSupply, Battery, Cell, DCPowerSupply
from .switches import PushSwitch, Switch

COMPONENT_CLASSES: dict[ComponentKind, type[Component]] = {
    cls.kind: cls
    for cls in (
        Cell, Battery, DCPowerSupply, ACPowerSupply,
        Resistor, VariableResistor, PhotoResistor, Thermistor,
        MaterialContainer, WireContainer,
        Bulb, Fuse, Motor, Heater, Buzzer,
        Ammeter, Voltmeter, Thermometer, Lightmeter,
        Switch, PushSwitch, Connector, TwoWaySwitch,
        Diode, LightEmittingDiode, Capacitor,
    )
}

# Display names in catalogue order
COMPONENT_TYPES = [kind.value for kind in COMPONENT_CLASSES]

_ALIASES = {
    "led": ComponentKind.LIGHT_EMITTING_DIODE,
    "dc": ComponentKind.DC_POWER_SUPPLY,
    "ac": ComponentKind.AC_POWER_SUPPLY,
    "twoway": ComponentKind.TWO_WAY_SWITCH,
    "ldr": ComponentKind.PHOTO_RESISTOR,
    "rheostat": ComponentKind.VARIABLE_RESISTOR,
}


def _normalize(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


_LOOKUP: dict[str, ComponentKind] = dict(_ALIASES)
for _kind, _cls in COMPONENT_CLASSES.items():
    _LOOKUP[_normalize(_kind.value)] = _kind
    _LOOKUP[_normalize(_cls.__name__)] = _kind


def resolve_kind(type_name) -> ComponentKind:
    """Resolve a type name (or kind) to its ComponentKind."""
    if isinstance(type_name, ComponentKind):
        return type_name
    if not isinstance(type_name, str):
        raise ComponentError(f"Component type must be a string, got {type(type_name).__name__}")
    kind = _LOOKUP.get(_normalize(type_name))
    if kind is None:
        raise ComponentError(f"Unknown component type '{type_name}'")
    return kind


def create_component(type_name, component_id: int, circuit_id: int,
                     position: tuple[float, float] = (0.0, 0.0)) -> Component:
    """Build a component of the named type; it is not yet registered anywhere."""
    cls = COMPONENT_CLASSES[resolve_kind(type_name)]
    return cls(component_id, circuit_id, position)
