"""
simulation/network_validator.py

Pre-simulation network validation.
"""

from circuitlab.models.tracing import trace


def validate_network(model):
    """
    Validate a network before simulation.

    Args:
        model: NetworkModel to check

    Returns:
        (is_valid, errors, warnings) where:
            is_valid: bool - False if any errors found
            errors: list[str] - problems that block simulation
            warnings: list[str] - non-blocking issues
    """
    errors = []
    warnings = []

    # 1. Network must have components
    if not model.components:
        errors.append("Network has no components. Add a power source and a load to simulate.")
        return False, errors, warnings

    # 2. Must have a power source to start evaluation from
    head = model.head()
    if head is None:
        errors.append("Network has no power source. Add a cell, battery or power supply.")
        return False, errors, warnings

    # 3. Power sources must sit in the top-level circuit
    for component in model.components.values():
        if component.is_power_source and model.circuits[component.circuit_id].depth != 0:
            errors.append(f"{component} is inside a branch. Power sources must be in the top-level circuit.")

    # 4. The head must have a round trip back to itself
    if trace(model, head, head, False, False) is None:
        errors.append(f"Network is open. There is no path from {head} back to itself.")

    # 5. Components the head never reaches will not be evaluated
    reached = {head.component_id}
    pending = [head]
    while pending:
        component = pending.pop()
        for wire_id in component.outputs:
            target = model.components[model.wires[wire_id].target_id]
            if target.component_id not in reached:
                reached.add(target.component_id)
                pending.append(target)
    for component in model.components.values():
        if component.component_id in reached:
            continue
        if not component.inputs and not component.outputs:
            warnings.append(f"{component} has no connections.")
        else:
            warnings.append(f"{component} is not reachable from {head} and will not be evaluated.")

    # 6. Non-blocking state checks
    for component in model.components.values():
        if component.is_connector and not component.is_end and len(component.outputs) == 1:
            warnings.append(f"{component} only has one branch.")
        if component.blown:
            warnings.append(f"{component} is blown.")
    for circuit in model.circuits.values():
        if circuit.broken and circuit.broken_by in model.components:
            warnings.append(
                f"Circuit {circuit.circuit_id} is broken by {model.components[circuit.broken_by]}."
            )

    is_valid = len(errors) == 0
    return is_valid, errors, warnings
