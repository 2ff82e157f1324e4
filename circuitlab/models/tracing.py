"""
Reachability search over the wire graph.

Used by the coordinator to check that the head power source has a round
trip, and by capacitors to find their charge and discharge paths.
"""

from typing import TYPE_CHECKING, Optional

from .component import Capability, Component

if TYPE_CHECKING:
    from .network import NetworkModel


def trace(net: "NetworkModel", start: Component, target: Component,
          check_passable: bool = True, restrained: bool = True) -> Optional[list[Component]]:
    """
    Find the shortest wire path from ``start`` to ``target``.

    The search is depth first along output wires, and also back along input
    wires when ``restrained`` is False. A wire is never crossed twice on
    one path. When several paths exist the one with the fewest hops wins,
    ties going to the first found.

    Args:
        net: Network the components belong to.
        start: Component the search begins at. If it is also ``target`` the
            search looks for a loop back to it.
        target: Component to reach.
        check_passable: Stop at components that are blown or that caused
            their own circuit's break.
        restrained: Only follow wires forwards.

    Returns:
        The components strictly between start and target (empty when the
        target is adjacent), or None when the target is unreachable.
    """
    return _trace(net, start, target, check_passable, restrained, 0, set())


def _trace(net, component, target, check_passable, restrained, depth, scanned):
    if depth != 0 and component is target:
        return []
    if check_passable and not component.is_passable(net):
        return None

    steps = [(wire_id, net.wires[wire_id].target_id) for wire_id in component.outputs]
    if not restrained:
        steps += [(wire_id, net.wires[wire_id].source_id) for wire_id in component.inputs]

    # A two-way switch only leads into its active branch
    blocked_circuit = None
    if component.has(Capability.SWITCHING) and not component.is_end:
        blocked_circuit = component.inactive_branch

    shortest = None
    for wire_id, neighbour_id in steps:
        if wire_id in scanned:
            continue
        neighbour = net.components[neighbour_id]
        if blocked_circuit is not None and neighbour.circuit_id == blocked_circuit:
            continue
        scanned.add(wire_id)
        path = _trace(net, neighbour, target, check_passable, restrained, depth + 1, set(scanned))
        if path is not None and (shortest is None or len(path) < len(shortest)):
            shortest = path

    if shortest is None:
        return None
    return shortest if depth == 0 else [component, *shortest]
