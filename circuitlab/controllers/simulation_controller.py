"""
SimulationController - Drives the network frame by frame.

This module contains no drawing code. It owns the frame counter, picks
the head power source, validates the network, runs one evaluation cascade
per tick and keeps the environment (light, heat) up to date.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from circuitlab.errors import SimulationError, StructuralError
from circuitlab.models.component import Component
from circuitlab.models.network import NetworkModel
from circuitlab.models.tick import TickContext
from circuitlab.models.tracing import trace

logger = logging.getLogger(__name__)


@dataclass
class TickRecord:
    """Snapshot of the network taken after one tick."""

    frame: int
    evaluated: bool
    circuit: dict = field(default_factory=dict)
    components: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SimulationResult:
    """Result of a simulation run."""

    success: bool
    frames: int = 0
    data: Any = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    faults: list[str] = field(default_factory=list)
    error: str = ""


class SimulationController:
    """
    Controller for the tick loop.

    Coordinates: validate -> start -> (evaluate -> snapshot) per frame
    """

    def __init__(self, model: Optional[NetworkModel] = None, circuit_ctrl=None):
        self.model = model or NetworkModel()
        self.circuit_ctrl = circuit_ctrl
        self.running = False
        self.frame = 0
        self.last_error = ""
        self.faults: list[str] = []
        self._torn_down = False

    def _notify(self, event: str, data: Any) -> None:
        if self.circuit_ctrl:
            self.circuit_ctrl._notify(event, data)

    def _check_alive(self) -> None:
        if self._torn_down:
            raise SimulationError("Simulation has been torn down")

    @property
    def head(self) -> Optional[Component]:
        """The power source evaluation starts from (first one created)."""
        return self.model.head()

    def validate_network(self) -> SimulationResult:
        """
        Validate the network before simulation.

        Returns a SimulationResult with success=False and errors if invalid.
        """
        from circuitlab.simulation import validate_network

        is_valid, errors, warnings = validate_network(self.model)
        return SimulationResult(
            success=is_valid,
            errors=errors,
            warnings=warnings,
            error="; ".join(errors) if errors else "",
        )

    # --- Lifecycle ---

    def start(self) -> None:
        self._check_alive()
        self.running = True
        self.last_error = ""
        self.model.update_light_levels()
        self.model.update_temperatures()
        self._notify("simulation_started", None)

    def stop(self) -> None:
        """Stop ticking and zero every current."""
        self.running = False
        self.model.zero_currents()
        self.model.light_dirty = True
        self._notify("simulation_stopped", None)

    def teardown(self) -> None:
        """Stop, drop the whole network and refuse any further evaluation."""
        self.running = False
        self.model.clear()
        self.frame = 0
        self.faults = []
        self._torn_down = True
        logger.debug("Simulation torn down")

    # --- Ticking ---

    def evaluate(self) -> bool:
        """
        Evaluate one frame.

        Returns False (and changes nothing) when the simulation is stopped,
        the network is empty or has no power source, or the head has no
        round trip back to itself.

        Raises:
            SimulationError: If called after teardown().
        """
        self._check_alive()
        if not self.running or not self.model.components:
            return False
        head = self.head
        if head is None:
            return False
        frame = self.frame + 1
        try:
            if trace(self.model, head, head, False, False) is None:
                return False
            root_id = self.model.root_id
            current = self.model.circuit_current(root_id)
            if current != self.model.root.current:
                self.model.light_dirty = True
            self.model.set_circuit_current(root_id, current)
            ctx = TickContext(frame=frame, fps=self.model.settings.fps, head_id=head.component_id)
            head.evaluate(self.model, ctx)
        except StructuralError as e:
            self._halt(e)
            return False
        self.frame = frame

        if self.model.light_dirty:
            self.model.update_light_levels()
        if self.model.temperature_dirty:
            self.model.update_temperatures()

        for fault in self.model.drain_faults():
            self.faults.append(fault.message)
            self._notify("component_blown", fault)
        return True

    def _halt(self, error: Exception) -> None:
        self.running = False
        self.last_error = str(error)
        logger.error("Simulation halted on frame %d: %s", self.frame + 1, error)
        self._notify("simulation_failed", self.last_error)

    def snapshot(self, evaluated: bool = True) -> TickRecord:
        return TickRecord(
            frame=self.frame,
            evaluated=evaluated,
            circuit=self.model.describe_circuit(self.model.root_id),
            components=[c.describe(self.model) for c in self.model.components.values()],
        )

    def tick(self) -> TickRecord:
        """Evaluate one frame and record the readings."""
        evaluated = self.evaluate()
        try:
            record = self.snapshot(evaluated)
        except StructuralError as e:
            if not self.last_error:
                self._halt(e)
            record = TickRecord(frame=self.frame, evaluated=evaluated)
        self._notify("tick_completed", record)
        return record

    def run(self, frames: int) -> SimulationResult:
        """
        Run the full pipeline for ``frames`` ticks.

        Steps: validate -> start -> tick * frames

        Structural errors met while ticking stop the run early; they are
        reported on the result, never raised.
        """
        self._check_alive()
        if frames < 0:
            raise ValueError(f"Frame count must be non-negative, got {frames}")

        validation = self.validate_network()
        if not validation.success:
            self._notify("simulation_completed", validation)
            return validation

        if not self.running:
            self.start()
        fault_count = len(self.faults)
        records = []
        for _ in range(frames):
            records.append(self.tick())
            if self.last_error:
                break

        result = SimulationResult(
            success=not self.last_error,
            frames=len(records),
            data=records,
            errors=[self.last_error] if self.last_error else [],
            warnings=validation.warnings,
            faults=self.faults[fault_count:],
            error=self.last_error,
        )
        self._notify("simulation_completed", result)
        return result
