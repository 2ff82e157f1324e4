"""
Connector family - Branch junctions and the two-way switch.

A Connector splits its circuit into up to two child circuits, one per
output wire. The matching "end" Connector merges the branches back into the
parent circuit. Connectors own their child circuits by id only; the circuits
themselves live in the NetworkModel.
"""

import logging
import random
from enum import Enum
from typing import TYPE_CHECKING, Optional

from circuitlab.errors import ComponentError

from .circuit import resistance_in_parallel
from .component import Capability, Component, ComponentKind

if TYPE_CHECKING:
    from .network import NetworkModel
    from .tick import TickContext

logger = logging.getLogger(__name__)


class BranchMode(Enum):
    ALL = "all"
    ONLY_FIRST = "first"
    ONLY_SECOND = "second"


class Connector(Component):
    """
    Splitting (or, once made an end, merging) junction.

    Attributes:
        is_end: True once the connector merges branches (2 in, 1 out).
        branches: Child circuit ids, one slot per output; None when unused.
        branch_wires: Id of the wire that established each branch.
        mode: Which branches carry current.
    """

    kind = ComponentKind.CONNECTOR
    base_capabilities = Capability.CONNECTOR
    max_inputs = 1
    max_outputs = 2

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.is_end = False
        self.branches: list[Optional[int]] = [None, None]
        self.branch_wires: list[Optional[int]] = [None, None]
        self.mode = BranchMode.ALL

    def make_end(self) -> None:
        self.is_end = True
        self.max_inputs = 2
        self.max_outputs = 1

    @property
    def has_branches(self) -> bool:
        return any(circuit_id is not None for circuit_id in self.branches)

    def free_branch_slot(self) -> Optional[int]:
        for slot, circuit_id in enumerate(self.branches):
            if circuit_id is None:
                return slot
        return None

    def attach_branch(self, slot: int, circuit_id: int, wire_id: int) -> None:
        self.branches[slot] = circuit_id
        self.branch_wires[slot] = wire_id

    def release_branch(self, wire_id: int) -> Optional[int]:
        """Free the branch slot established by ``wire_id``; returns its circuit id."""
        for slot, branch_wire in enumerate(self.branch_wires):
            if branch_wire == wire_id:
                circuit_id = self.branches[slot]
                self.branches[slot] = None
                self.branch_wires[slot] = None
                return circuit_id
        return None

    def _is_alive(self, net: "NetworkModel", circuit_id: Optional[int]) -> bool:
        return circuit_id is not None and not net.is_broken(circuit_id)

    def get_resistance(self, net: "NetworkModel") -> float:
        if self.is_end:
            return 0.0
        first, second = self.branches
        if not self._is_alive(net, first):
            return net.circuit_resistance(second) if second is not None else 0.0
        if not self._is_alive(net, second):
            return net.circuit_resistance(first)
        return resistance_in_parallel(net.circuit_resistance(first), net.circuit_resistance(second))

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        if self.is_end:
            return
        alive = [circuit_id for circuit_id in self.branches if self._is_alive(net, circuit_id)]
        for circuit_id in self.branches:
            if circuit_id is not None and circuit_id not in alive:
                net.set_circuit_current(circuit_id, 0.0)

        if len(alive) == 2:
            voltage = self.get_voltage(net)
            for circuit_id in alive:
                net.set_circuit_current(circuit_id, voltage / net.circuit_resistance(circuit_id))
        elif alive:
            net.set_circuit_current(alive[0], self.current)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["is_end"] = self.is_end
        return info

    def get_data(self) -> dict:
        # is_end is re-derived when connections are restored
        data = super().get_data()
        data["is_end"] = self.is_end
        return data


class TwoWaySwitch(Connector):
    """
    Connector that routes current through exactly one branch.

    The inactive branch is broken with the switch as the cause, so its
    members carry no current and traces do not enter it.
    """

    kind = ComponentKind.TWO_WAY_SWITCH
    base_capabilities = Capability.CONNECTOR | Capability.SWITCHING

    def __init__(self, component_id, circuit_id, position=(0.0, 0.0)):
        super().__init__(component_id, circuit_id, position)
        self.mode = BranchMode.ONLY_FIRST
        self.original_mode = BranchMode.ONLY_FIRST

    def randomize(self, rng: random.Random) -> None:
        self.mode = rng.choice((BranchMode.ONLY_FIRST, BranchMode.ONLY_SECOND))
        self.original_mode = self.mode

    def _slots(self) -> tuple[int, int]:
        if self.mode is BranchMode.ONLY_FIRST:
            return 0, 1
        if self.mode is BranchMode.ONLY_SECOND:
            return 1, 0
        raise ComponentError(f"{self} cannot have both branches active")

    @property
    def active_branch(self) -> Optional[int]:
        return self.branches[self._slots()[0]]

    @property
    def inactive_branch(self) -> Optional[int]:
        return self.branches[self._slots()[1]]

    def toggle(self, net: "NetworkModel") -> BranchMode:
        if self.mode is BranchMode.ONLY_FIRST:
            self.mode = BranchMode.ONLY_SECOND
        else:
            self.mode = BranchMode.ONLY_FIRST
        logger.debug("%s now routes through %s branch", self, self.mode.value)
        if not self.is_end:
            self._select(net)
        return self.mode

    def _select(self, net: "NetworkModel") -> None:
        active, inactive = self.active_branch, self.inactive_branch
        if active is not None and net.broken_by(active, self.component_id):
            net.break_circuit(active, None)
        if inactive is not None:
            net.break_circuit(inactive, self.component_id)

    def get_resistance(self, net: "NetworkModel") -> float:
        if self.is_end:
            return 0.0
        active = self.active_branch
        return net.circuit_resistance(active) if active is not None else 0.0

    def on_evaluate(self, net: "NetworkModel", ctx: "TickContext", circuit_broken: bool) -> None:
        if self.is_end:
            return
        self._select(net)
        active = self.active_branch
        if active is not None:
            net.set_circuit_current(active, self.current)

    def describe(self, net: "NetworkModel") -> dict:
        info = super().describe(net)
        info["mode"] = self.mode.value
        return info

    def get_data(self) -> dict:
        data = super().get_data()
        data["mode"] = self.mode.value
        data["original_mode"] = self.original_mode.value
        return data

    def apply_data(self, data: dict) -> None:
        super().apply_data(data)
        for key in ("mode", "original_mode"):
            if key not in data:
                continue
            try:
                mode = BranchMode(data[key])
            except ValueError:
                raise ComponentError(f"Unknown two-way switch mode {data[key]!r}") from None
            if mode is BranchMode.ALL:
                raise ComponentError(f"{self} cannot have both branches active")
            setattr(self, key, mode)
