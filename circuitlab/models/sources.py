"""
Power sources - Cells, batteries and supplies.

Power sources must live in the root circuit. Their signed voltage is summed
to give the root circuit's voltage; the sign encodes polarity, so flipping a
source negates it.
"""

import logging
import math
from typing import TYPE_CHECKING

from circuitlab.errors import ComponentError

from .component import Capability, Component, ComponentKind, Direction, as_number

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)


class PowerSource(Component):
    """Base class for anything that drives current around the root circuit."""

    base_capabilities = Capability.POWER_SOURCE
    default_voltage = 1.5

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self._voltage = self.default_voltage

    @property
    def voltage(self) -> float:
        return self._voltage

    @voltage.setter
    def voltage(self, value: float) -> None:
        value = float(value)
        if math.isfinite(value):
            self._voltage = value

    @property
    def direction(self) -> Direction:
        return Direction.RIGHT if self._voltage < 0 else Direction.LEFT

    def get_voltage(self, net: "NetworkModel") -> float:
        return self._voltage

    def flip(self, net: "NetworkModel") -> Direction:
        """Reverse polarity; diodes get a chance to unlock afterwards."""
        self.voltage = -self._voltage
        logger.debug("%s flipped to %gV", self, self._voltage)
        if net.circuits[self.circuit_id].depth == 0:
            net.unlock_all_diodes()
        return self.direction

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        if net.circuits[self.circuit_id].depth != 0:
            raise ComponentError(f"{self} must be in the top-level circuit")

    def get_data(self) -> dict:
        data = super().get_data()
        data["voltage"] = self._voltage
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.voltage = as_number(data, "voltage", self._voltage)


class Cell(PowerSource):
    kind = ComponentKind.CELL


class Battery(PowerSource):
    """A stack of identical cells."""

    kind = ComponentKind.BATTERY
    MIN_CELLS = 1
    MAX_CELLS = 10

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self._cells = 1
        self._cell_voltage = 1.5
        self._sync_voltage()

    def _sync_voltage(self) -> None:
        sign = -1 if self._voltage < 0 else 1
        self._voltage = sign * self._cells * self._cell_voltage

    @property
    def cells(self) -> int:
        return self._cells

    @cells.setter
    def cells(self, count: int) -> None:
        self._cells = max(self.MIN_CELLS, min(self.MAX_CELLS, int(count)))
        self._sync_voltage()

    @property
    def cell_voltage(self) -> float:
        return self._cell_voltage

    @cell_voltage.setter
    def cell_voltage(self, value: float) -> None:
        value = abs(float(value))
        if math.isfinite(value):
            self._cell_voltage = value
            self._sync_voltage()

    def get_data(self) -> dict:
        data = super().get_data()
        data["cells"] = self._cells
        data["cell_voltage"] = self._cell_voltage
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self._cells = max(self.MIN_CELLS, min(self.MAX_CELLS, int(as_number(data, "cells", self._cells))))
        self._cell_voltage = abs(as_number(data, "cell_voltage", self._cell_voltage))
        self._sync_voltage()


class DCPowerSupply(PowerSource):
    """Adjustable supply, clamped to +/- max_voltage."""

    kind = ComponentKind.DC_POWER_SUPPLY

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.max_voltage = 230.0
        self.delta = 0.1

    @PowerSource.voltage.setter
    def voltage(self, value: float) -> None:
        value = float(value)
        if math.isfinite(value):
            self._voltage = max(-self.max_voltage, min(self.max_voltage, value))

    def increase(self) -> float:
        self.voltage = self._voltage + self.delta
        return self._voltage

    def decrease(self) -> float:
        self.voltage = self._voltage - self.delta
        return self._voltage

    def get_data(self) -> dict:
        data = super().get_data()
        data["max_voltage"] = self.max_voltage
        data["delta"] = self.delta
        return data

    def apply_data(self, data: dict) -> None:
        self.max_voltage = abs(as_number(data, "max_voltage", self.max_voltage))
        self.delta = as_number(data, "delta", self.delta)
        super().apply_data(data)


class ACPowerSupply(DCPowerSupply):
    """Supply that reverses polarity every ``frame_interval`` frames."""

    kind = ComponentKind.AC_POWER_SUPPLY
    base_capabilities = Capability.POWER_SOURCE | Capability.TIME_DEPENDENT

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self._frame_interval = 8
        self._last_flip_frame = -1

    @property
    def frame_interval(self) -> int:
        return self._frame_interval

    @frame_interval.setter
    def frame_interval(self, frames: int) -> None:
        self._frame_interval = max(1, round(frames))

    def hertz(self, fps: int) -> float:
        """Full polarity cycles per second at the given tick rate."""
        return fps / (2 * self._frame_interval)

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        super().on_evaluate(net, ctx, circuit_broken)
        if ctx.frame != self._last_flip_frame and ctx.frame % self._frame_interval == 0:
            self._last_flip_frame = ctx.frame
            self.flip(net)

    def get_data(self) -> dict:
        data = super().get_data()
        data["frame_interval"] = self._frame_interval
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        self.frame_interval = as_number(data, "frame_interval", self._frame_interval)
