"""
NetworkModel - Central data store for the component graph and circuit tree.

This module contains no drawing code. Components, wires and circuits live
in id-keyed tables, and every relation between them (a component's
circuit, a circuit's parent, a connector's branches) is an id lookup into
those tables. The model implements the structural rules for connecting
components and the series/parallel solver over the circuit tree.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Optional

from circuitlab.config import SimulationSettings
from circuitlab.errors import BranchLookupError, ComponentError, WiringError

from .catalog import create_component
from .circuit import CircuitData, combine_resistances
from .component import ZERO_RESISTANCE, Capability, Component
from .wire import DEFAULT_MATERIAL, DEFAULT_RADIUS, WireData

logger = logging.getLogger(__name__)

# Radius of influence per degree emitted by a heat source (px)
TEMPERATURE_RADIUS_PER_DEGREE = 5


@dataclass
class FaultNotice:
    """One-shot notice that a component blew."""

    component_id: int
    message: str


@dataclass
class NetworkModel:
    """
    Arena holding all network state.

    Components are kept in creation order. Circuits form a tree rooted at
    ``root_id``; only Connector branches create child circuits.
    """

    settings: SimulationSettings = field(default_factory=SimulationSettings)
    components: dict[int, Component] = field(default_factory=dict)
    wires: dict[int, WireData] = field(default_factory=dict)
    circuits: dict[int, CircuitData] = field(default_factory=dict)
    root_id: int = 0

    # Set when the environment must be recomputed before the next reading
    light_dirty: bool = False
    temperature_dirty: bool = False
    pending_faults: list[FaultNotice] = field(default_factory=list)

    rng: Optional[random.Random] = field(default=None, repr=False)

    _next_component_id: int = field(default=1, repr=False)
    _next_wire_id: int = field(default=1, repr=False)
    _next_circuit_id: int = field(default=0, repr=False)

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random(self.settings.seed)
        if not self.circuits:
            self.root_id = self._new_circuit(None).circuit_id

    @property
    def root(self) -> CircuitData:
        return self.circuits[self.root_id]

    def clear(self) -> None:
        """Drop every component, wire and circuit and start a fresh root."""
        self.components = {}
        self.wires = {}
        self.circuits = {}
        self.pending_faults = []
        self.light_dirty = False
        self.temperature_dirty = False
        self._next_component_id = 1
        self._next_wire_id = 1
        self._next_circuit_id = 0
        self.root_id = self._new_circuit(None).circuit_id

    def replace_with(self, other: "NetworkModel") -> None:
        """Take over another model's state, keeping this instance's identity."""
        self.settings = other.settings
        self.rng = other.rng
        self.components = other.components
        self.wires = other.wires
        self.circuits = other.circuits
        self.root_id = other.root_id
        self.pending_faults = []
        self._next_component_id = other._next_component_id
        self._next_wire_id = other._next_wire_id
        self._next_circuit_id = other._next_circuit_id
        self.light_dirty = True
        self.temperature_dirty = True

    # --- Lookups ---

    def get_component(self, component_id: int) -> Component:
        try:
            return self.components[component_id]
        except KeyError:
            raise ComponentError(f"No component with id {component_id}") from None

    def head(self) -> Optional[Component]:
        """The first power source in creation order."""
        for component in self.components.values():
            if component.is_power_source:
                return component
        return None

    def members(self, circuit_id: int) -> list[Component]:
        return [self.components[cid] for cid in self.circuits[circuit_id].component_ids]

    def descendants(self, circuit_id: int) -> list[int]:
        """Ids of ``circuit_id`` and every circuit below it."""
        found = [circuit_id]
        for circuit in self.circuits.values():
            if circuit.parent_id == circuit_id:
                found.extend(self.descendants(circuit.circuit_id))
        return found

    # --- Component operations ---

    def add_component(self, component_type, position: tuple[float, float] = (0.0, 0.0),
                      data: Optional[dict] = None) -> Component:
        """
        Create a component and attach it to the root circuit.

        Raises:
            ComponentError: If the type is unknown or ``data`` is invalid.
        """
        component = create_component(component_type, self._next_component_id, self.root_id, position)
        component.randomize(self.rng)
        component.external_temperature = self.settings.ambient_temperature
        component.light_received = self.settings.ambient_light
        if data:
            component.apply_data(data)

        self._next_component_id += 1
        self.components[component.component_id] = component
        self.root.component_ids.append(component.component_id)
        self.light_dirty = True
        return component

    def remove_component(self, component_id: int) -> list[int]:
        """
        Remove a component with all its wires.

        Circuits it had broken are released. Returns the removed wire ids.
        """
        component = self.get_component(component_id)
        removed = []
        for wire_id in list(component.inputs) + list(component.outputs):
            if wire_id in self.wires:
                self.remove_wire(wire_id)
                removed.append(wire_id)

        for circuit in self.circuits.values():
            if circuit.broken_by == component_id:
                self.break_circuit(circuit.circuit_id, None)

        self.circuits[component.circuit_id].component_ids.remove(component_id)
        del self.components[component_id]
        self.light_dirty = True
        self.temperature_dirty = True
        return removed

    def _move(self, component: Component, circuit_id: int) -> None:
        if component.circuit_id == circuit_id:
            return
        self.circuits[component.circuit_id].component_ids.remove(component.component_id)
        self.circuits[circuit_id].component_ids.append(component.component_id)
        component.circuit_id = circuit_id

    # --- Wire operations ---

    def connect(self, source_id: int, target_id: int,
                path: Optional[list[tuple[float, float]]] = None,
                wire_options: Optional[dict] = None,
                merge: Optional[bool] = None) -> WireData:
        """
        Wire ``source``'s output to ``target``'s input.

        A split Connector puts the target into a new child circuit. A
        component inside a branch that feeds a Connector makes it an end,
        merging back into the parent circuit; pass ``merge=False`` to feed a
        nested split Connector instead. Otherwise the target joins the
        source's circuit.

        All checks run before anything changes.

        Raises:
            WiringError: Self or duplicate connection, no capacity left.
            ComponentError: Unknown id, or a power source pushed below depth 0.
            BranchLookupError: The circuit to merge back into is missing.
        """
        source = self.get_component(source_id)
        target = self.get_component(target_id)
        if source is target:
            raise WiringError(f"Cannot connect {source} to itself")
        if any(self.wires[wire_id].target_id == target_id for wire_id in source.outputs):
            raise WiringError(f"{source} is already connected to {target}")

        options = wire_options or {}
        wire = WireData(
            wire_id=self._next_wire_id,
            source_id=source_id,
            target_id=target_id,
            path=list(path or []),
            has_resistance=bool(options.get("has_resistance", False)),
            material=options.get("material", DEFAULT_MATERIAL),
            radius=options.get("radius", DEFAULT_RADIUS),
            merge=merge,
        )
        source_circuit = self.circuits[source.circuit_id]
        target_is_end = target.is_connector and target.is_end

        if source.is_connector and not source.is_end and not target_is_end and merge is not True:
            slot = source.free_branch_slot()
            if slot is None or len(source.outputs) >= source.max_outputs:
                raise WiringError(f"{source} has no free branch for {target}")
            self._check_inputs(target, target.max_inputs)
            self._check_depth(target, source_circuit.depth + 1)

            branch = self._new_circuit(source_circuit.circuit_id)
            self._move(target, branch.circuit_id)
            source.attach_branch(slot, branch.circuit_id, wire.wire_id)
            logger.debug("%s opened branch circuit %d for %s", source, branch.circuit_id, target)

        elif (target.is_connector and source_circuit.depth > 0
              and (not source.is_connector or source.is_end) and merge is not False):
            parent_id = source_circuit.parent_id
            if parent_id is None or parent_id not in self.circuits:
                raise BranchLookupError(f"Original circuit of {source} could not be found")
            if target.has_branches:
                raise WiringError(f"{target} already splits into branches and cannot merge them")
            self._check_outputs(source)
            self._check_inputs(target, 2)

            target.make_end()
            self._move(target, parent_id)
            logger.debug("%s merges circuit %d back into %d", target, source_circuit.circuit_id, parent_id)

        else:
            self._check_outputs(source)
            self._check_inputs(target, target.max_inputs)
            self._check_depth(target, source_circuit.depth)
            self._move(target, source_circuit.circuit_id)

        self._next_wire_id += 1
        self.wires[wire.wire_id] = wire
        source.outputs.append(wire.wire_id)
        target.inputs.append(wire.wire_id)
        return wire

    def _check_outputs(self, source: Component) -> None:
        if len(source.outputs) >= source.max_outputs:
            raise WiringError(f"{source} cannot drive more than {source.max_outputs} component(s)")

    def _check_inputs(self, target: Component, limit: int) -> None:
        if len(target.inputs) >= limit:
            raise WiringError(f"{target} cannot be driven by more than {limit} component(s)")

    def _check_depth(self, target: Component, depth: int) -> None:
        if target.is_power_source and depth != 0:
            raise ComponentError(f"{target} must be in the top-level circuit")

    def remove_wire(self, wire_id: int) -> WireData:
        """Detach a wire from both ends; a branch it opened is released."""
        try:
            wire = self.wires.pop(wire_id)
        except KeyError:
            raise WiringError(f"No wire with id {wire_id}") from None
        source = self.components[wire.source_id]
        target = self.components[wire.target_id]
        source.outputs.remove(wire_id)
        target.inputs.remove(wire_id)
        if source.is_connector:
            branch_id = source.release_branch(wire_id)
            if branch_id is not None and branch_id in self.circuits:
                self._collapse_branch(branch_id)
        return wire

    def _collapse_branch(self, circuit_id: int) -> None:
        """Fold a released branch circuit, and its members, into its parent."""
        circuit = self.circuits.pop(circuit_id)
        parent = self.circuits[circuit.parent_id]
        for component_id in circuit.component_ids:
            self.components[component_id].circuit_id = parent.circuit_id
            parent.component_ids.append(component_id)
        for child in self.circuits.values():
            if child.parent_id == circuit_id:
                child.parent_id = parent.circuit_id
        self._reset_depths(parent.circuit_id)
        self.light_dirty = True
        logger.debug("Branch circuit %d folded into circuit %d", circuit_id, parent.circuit_id)

    def _reset_depths(self, circuit_id: int) -> None:
        depth = self.circuits[circuit_id].depth
        for child in self.circuits.values():
            if child.parent_id == circuit_id:
                child.depth = depth + 1
                self._reset_depths(child.circuit_id)

    def wire_resistance(self, wire: WireData) -> float:
        source = self.components[wire.source_id]
        target = self.components[wire.target_id]
        return wire.get_resistance(source.position, target.position, self.settings.pixels_per_cm)

    # --- Circuit tree & solver ---

    def _new_circuit(self, parent_id: Optional[int]) -> CircuitData:
        depth = 0 if parent_id is None else self.circuits[parent_id].depth + 1
        circuit = CircuitData(circuit_id=self._next_circuit_id, depth=depth, parent_id=parent_id)
        self._next_circuit_id += 1
        self.circuits[circuit.circuit_id] = circuit
        return circuit

    def is_broken(self, circuit_id: int) -> bool:
        """True if this circuit or any ancestor is broken."""
        circuit = self.circuits[circuit_id]
        while circuit is not None:
            if circuit.broken:
                return True
            circuit = self.circuits.get(circuit.parent_id) if circuit.parent_id is not None else None
        return False

    def broken_by(self, circuit_id: int, component_id: int) -> bool:
        """True if this circuit's own break was caused by the given component."""
        circuit = self.circuits[circuit_id]
        return circuit.broken and circuit.broken_by == component_id

    def break_circuit(self, circuit_id: int, component_id: Optional[int] = None) -> bool:
        """
        Break a circuit, or clear its break when ``component_id`` is None.

        A circuit that is already broken keeps its original cause. Returns
        whether the circuit's own flag is set afterwards.
        """
        circuit = self.circuits[circuit_id]
        if component_id is not None:
            if not circuit.broken:
                circuit.broken = True
                circuit.broken_by = component_id
                for sub_id in self.descendants(circuit_id):
                    self.set_circuit_current(sub_id, 0.0)
                self.light_dirty = True
                logger.debug("Circuit %d broken by component %d", circuit_id, component_id)
        elif circuit.broken:
            circuit.broken = False
            circuit.broken_by = None
            self.light_dirty = True
            logger.debug("Circuit %d restored", circuit_id)
        return circuit.broken

    def set_circuit_current(self, circuit_id: int, current: float) -> None:
        circuit = self.circuits[circuit_id]
        circuit.current = current
        for component in self.members(circuit_id):
            component.current = 0.0 if self.is_broken(component.circuit_id) else current

    def circuit_resistance(self, circuit_id: int) -> float:
        """
        Combined resistance of a circuit's members.

        Wire resistance only counts when both ends are in this circuit.
        """
        circuit = self.circuits[circuit_id]
        resistances = []
        for component in self.members(circuit_id):
            resistance = component.get_resistance(self)
            if resistance > ZERO_RESISTANCE:
                resistances.append(resistance)
            for wire_id in component.outputs:
                wire = self.wires[wire_id]
                if self.components[wire.target_id].circuit_id != circuit_id:
                    continue
                wire_resistance = self.wire_resistance(wire)
                if wire_resistance > ZERO_RESISTANCE:
                    resistances.append(wire_resistance)
        return combine_resistances(circuit.mode, resistances)

    def circuit_voltage(self, circuit_id: int) -> float:
        """
        Voltage across a circuit.

        The root sums its power sources; a branch takes the share of the
        root voltage proportional to its share of the root resistance.
        """
        if self.is_broken(circuit_id):
            return 0.0
        if self.circuits[circuit_id].depth == 0:
            return sum(c.get_voltage(self) for c in self.members(circuit_id) if c.is_power_source)
        root_resistance = self.circuit_resistance(self.root_id)
        return self.circuit_resistance(circuit_id) / root_resistance * self.circuit_voltage(self.root_id)

    def circuit_current(self, circuit_id: int) -> float:
        if self.is_broken(circuit_id):
            return 0.0
        return self.circuit_voltage(circuit_id) / self.circuit_resistance(circuit_id)

    def circuit_power(self, circuit_id: int) -> float:
        return self.circuit_voltage(circuit_id) * self.circuit_current(circuit_id)

    def describe_circuit(self, circuit_id: int) -> dict:
        circuit = self.circuits[circuit_id]
        return {
            "id": circuit_id,
            "depth": circuit.depth,
            "size": len(circuit),
            "mode": circuit.mode.value,
            "is_broken": self.is_broken(circuit_id),
            "broken_by": circuit.broken_by,
            "resistance": self.circuit_resistance(circuit_id),
            "voltage": self.circuit_voltage(circuit_id),
            "current": self.circuit_current(circuit_id),
            "power": self.circuit_power(circuit_id),
        }

    def unlock_all_diodes(self) -> None:
        for component in self.components.values():
            if component.has(Capability.DIODE):
                component.unlock(self)

    def zero_currents(self) -> None:
        for circuit in self.circuits.values():
            circuit.current = 0.0
        for component in self.components.values():
            component.current = 0.0

    # --- Faults ---

    def report_fault(self, component_id: int, message: str) -> None:
        self.pending_faults.append(FaultNotice(component_id, message))

    def drain_faults(self) -> list[FaultNotice]:
        faults, self.pending_faults = self.pending_faults, []
        return faults

    # --- Environment ---

    def update_light_levels(self) -> None:
        """Recompute the light each component receives from luminous neighbours."""
        ambient = self.settings.ambient_light
        emitters = [(c.position, c.luminosity(self)) for c in self.components.values()
                    if c.has(Capability.LUMINOUS)]
        for component in self.components.values():
            received = ambient
            for position, lumens in emitters:
                distance = math.dist(component.position, position)
                if lumens > 0 and distance < lumens:
                    received += ambient + (lumens - distance) / lumens * lumens
            component.light_received = received
        self.light_dirty = False

    def update_temperatures(self) -> None:
        """Recompute the temperature each component feels from heat emitters."""
        ambient = self.settings.ambient_temperature
        emitters = [(c.position, c.emitted_temperature()) for c in self.components.values()
                    if c.has(Capability.HEAT_EMITTING)]
        for component in self.components.values():
            temperature = ambient
            for position, degrees in emitters:
                radius = degrees * TEMPERATURE_RADIUS_PER_DEGREE
                distance = math.dist(component.position, position)
                if radius > 0 and distance < radius:
                    temperature = max(temperature, ambient + (radius - distance) / radius * degrees)
            component.external_temperature = temperature
        self.temperature_dirty = False

    # --- Serialization ---

    def flow_order(self) -> list[int]:
        """Component ids walked from the head along outputs, then the rest."""
        order: list[int] = []
        seen: set[int] = set()
        head = self.head()

        def visit(component_id: int) -> None:
            if component_id in seen:
                return
            seen.add(component_id)
            order.append(component_id)
            for wire_id in self.components[component_id].outputs:
                target_id = self.wires[wire_id].target_id
                if head is not None and target_id == head.component_id:
                    continue
                visit(target_id)

        if head is not None:
            visit(head.component_id)
        for component_id in self.components:
            visit(component_id)
        return order

    def to_dict(self) -> dict:
        """
        Serialize the network.

        Components are emitted in flow order. Each connection records the
        order its wire was made in, since the circuit tree depends on it.
        """
        order = self.flow_order()
        index = {component_id: i for i, component_id in enumerate(order)}
        rank = {wire_id: i for i, wire_id in enumerate(sorted(self.wires))}
        components = []
        for component_id in order:
            component = self.components[component_id]
            components.append({
                "type": component.type_name,
                "position": list(component.position),
                "angle": component.angle,
                "data": component.get_data(),
                "connections": [
                    self.wires[wire_id].to_dict(index[self.wires[wire_id].target_id], rank[wire_id])
                    for wire_id in component.outputs
                ],
            })
        return {
            "components": components,
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkModel":
        """
        Rebuild a network from to_dict() output.

        All components are created first, then connections are replayed in
        the order their wires were originally made. Connections without a
        recorded order follow, in the order they were emitted.

        Raises:
            StructuralError: If the saved wiring breaks a connection rule.
        """
        model = cls(settings=SimulationSettings.from_dict(data.get("settings")))
        entries = data.get("components", [])
        created = []
        for entry in entries:
            x, y = entry.get("position", (0.0, 0.0))
            component = model.add_component(entry["type"], (x, y), entry.get("data"))
            component.angle = float(entry.get("angle", 0.0))
            created.append(component)

        pending = []
        for component, entry in zip(created, entries):
            for conn in entry.get("connections", []):
                pending.append((conn.get("order", math.inf), component, conn))
        pending.sort(key=lambda item: item[0])

        for _, component, conn in pending:
            target = created[conn["target_index"]]
            model.connect(
                component.component_id,
                target.component_id,
                path=conn.get("path"),
                wire_options=conn.get("wire_options"),
                merge=conn.get("merge"),
            )
        return model
