"""
Capacitor - RC charge and discharge driven by the tick counter.

Each tick the capacitor decides its state from reachability: it charges
while the head power source can reach it, and discharges through any other
loop once it is cut off. Time is the capacitor's own charge-frame counter
converted to seconds with the tick rate.
"""

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .component import (
    INFINITE_RESISTANCE,
    ZERO_RESISTANCE,
    Capability,
    Component,
    ComponentKind,
    as_number,
)
from .tracing import trace

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)


class CapacitorState(Enum):
    NULL = "null"
    FULL = "full"
    CHARGING = "charging"
    DISCHARGING = "discharging"


class Capacitor(Component):
    """
    Attributes:
        stored_voltage: Voltage currently held.
        charge_frames: Frames spent charging, minus frames spent discharging.
        state: State decided on the last evaluate.
    """

    kind = ComponentKind.CAPACITOR
    base_capabilities = Capability.TIME_DEPENDENT
    FULL_PERCENTAGE = 99.3

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self._capacitance = 2200.0  # micro farads
        self._target_voltage = 5.0
        self.stored_voltage = 0.0
        self.charge_frames = 0
        self.state = CapacitorState.NULL
        self._discharge_from: Optional[float] = None
        self._time_constant = 0.0

    @property
    def capacitance(self) -> float:
        """Capacitance in micro farads."""
        return self._capacitance

    @capacitance.setter
    def capacitance(self, micro_farads: float) -> None:
        micro_farads = float(micro_farads)
        if math.isfinite(micro_farads) and micro_farads > 0:
            self._capacitance = micro_farads

    @property
    def farads(self) -> float:
        return self._capacitance * 1e-6

    @property
    def target_voltage(self) -> float:
        return self._target_voltage

    @target_voltage.setter
    def target_voltage(self, volts: float) -> None:
        volts = abs(float(volts))
        if math.isfinite(volts) and volts > 0:
            self._target_voltage = volts

    def percentage(self) -> float:
        return self.stored_voltage / self._target_voltage * 100

    def get_voltage(self, net: "NetworkModel") -> float:
        return self.stored_voltage

    def charge_time(self) -> float:
        """Seconds to charge fully (5 RC) along the last path found."""
        return 5 * self._time_constant

    # --- Paths ---

    def charging_path(self, net: "NetworkModel", head: Optional[Component]) -> Optional[list[Component]]:
        """Components between the head and this capacitor, or None if cut off."""
        if head is None:
            return None
        if trace(net, self, head, True, False) is None:
            return None
        return trace(net, head, self, True, True)

    def discharge_path(self, net: "NetworkModel") -> Optional[list[Component]]:
        return trace(net, self, self, True, False)

    def determine_state(self, net: "NetworkModel", head: Optional[Component]):
        """Return (state, path) for the current wiring."""
        path = self.charging_path(net, head)
        if path is not None:
            if self.percentage() >= self.FULL_PERCENTAGE:
                return CapacitorState.FULL, path
            return CapacitorState.CHARGING, path
        if self.stored_voltage > 0:
            loop = self.discharge_path(net)
            if loop is not None:
                return CapacitorState.DISCHARGING, loop
        return CapacitorState.NULL, None

    # --- Transient ---

    def time_constant(self, net: "NetworkModel", path: list[Component]) -> float:
        """T = R * C for the resistance summed along ``path``."""
        resistance = sum(component.get_resistance(net) for component in path)
        return max(ZERO_RESISTANCE, resistance) * self.farads

    def voltage_after(self, seconds: float, time_constant: float, charging: bool = True) -> float:
        """V(t) = V * (1 - e^(-t/T)), toward the target or from the discharge start."""
        base = self._target_voltage if charging else (self._discharge_from or 0.0)
        value = base * (1 - math.exp(-seconds / time_constant))
        if math.isnan(value):
            return 0.0
        if math.isinf(value):
            return INFINITE_RESISTANCE
        return max(0.0, value)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        head = net.components.get(ctx.head_id) if ctx.head_id is not None else None
        state, path = self.determine_state(net, head)
        if state is not self.state:
            logger.debug("%s is now %s", self, state.value)
        self.state = state

        if state is CapacitorState.CHARGING:
            self._discharge_from = None
            self.charge_frames += 1
            self._time_constant = self.time_constant(net, path)
            seconds = ctx.frames_to_seconds(self.charge_frames)
            self.stored_voltage = self.voltage_after(seconds, self._time_constant)
        elif state is CapacitorState.DISCHARGING:
            if self._discharge_from is None:
                self._discharge_from = self.stored_voltage
            self.charge_frames = max(0, self.charge_frames - 1)
            self._time_constant = self.time_constant(net, path)
            seconds = ctx.frames_to_seconds(self.charge_frames)
            self.stored_voltage = self.voltage_after(seconds, self._time_constant, charging=False)
            for component in path:
                resistance = max(ZERO_RESISTANCE, component.get_resistance(net))
                component.current = self.stored_voltage / resistance
            net.light_dirty = True
        elif state is CapacitorState.NULL:
            self._discharge_from = None

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["percentage"] = self.percentage()
        info["state"] = self.state.value
        info["charge_time"] = self.charge_time()
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["capacitance"] = self._capacitance
        data["target_voltage"] = self._target_voltage
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.capacitance = as_number(data, "capacitance", self._capacitance)
        self.target_voltage = as_number(data, "target_voltage", self._target_voltage)
