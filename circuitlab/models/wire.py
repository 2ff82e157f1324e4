"""
WireData - Directed connection from one component's output to another's input.

Waypoints are stored as plain (x, y) tuples. A wire only carries resistance
when ``has_resistance`` is enabled, in which case it depends on its material,
radius and length.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from circuitlab.errors import WiringError

from .component import ZERO_RESISTANCE

# Electrical resistivity at 20 degrees C, in ohm metres
MATERIALS = {
    "aluminium": 2.82e-8,
    "brass": 0.75e-7,
    "cadmium": 6e-8,
    "constantan": 4.9e-7,
    "copper": 1.68e-8,
    "gold": 2.44e-8,
    "iron": 1.0e-7,
    "lead": 2.2e-7,
    "manganin": 4.20e-7,
    "nichrome": 1.10e-6,
    "nickel": 6.99e-8,
    "platinum": 1.06e-7,
    "silver": 1.56e-8,
    "tin": 1.09e-7,
    "titanium": 4.20e-7,
    "tungsten": 5.60e-8,
    "zinc": 5.90e-8,
}

DEFAULT_MATERIAL = "copper"
DEFAULT_RADIUS = 1.5  # px
MIN_RADIUS = 0.4
MAX_RADIUS = 15.0


@dataclass
class WireData:
    """A wire between ``source_id`` (output side) and ``target_id`` (input side)."""

    wire_id: int
    source_id: int
    target_id: int

    path: list[tuple[float, float]] = field(default_factory=list)
    has_resistance: bool = False
    material: str = DEFAULT_MATERIAL
    radius: float = DEFAULT_RADIUS
    # Explicit split/merge choice made when connecting, None for automatic
    merge: Optional[bool] = None

    def __post_init__(self):
        self.material = str(self.material).lower()
        if self.material not in MATERIALS:
            raise WiringError(f"Unknown wire material '{self.material}'")
        try:
            self.radius = max(MIN_RADIUS, min(MAX_RADIUS, float(self.radius)))
        except (TypeError, ValueError):
            raise WiringError(f"Wire radius must be a number, got {self.radius!r}") from None
        try:
            self.path = [(float(x), float(y)) for x, y in self.path]
        except (TypeError, ValueError):
            raise WiringError(f"Wire path must be a list of (x, y) points, got {self.path!r}") from None

    def connects_component(self, component_id: int) -> bool:
        """Check if this wire is attached to the given component."""
        return self.source_id == component_id or self.target_id == component_id

    def length(self, start: tuple[float, float], end: tuple[float, float]) -> float:
        """Polyline length in px from ``start`` through the waypoints to ``end``."""
        points = [start, *self.path, end]
        return sum(math.dist(a, b) for a, b in zip(points, points[1:]))

    def get_resistance(self, start: tuple[float, float], end: tuple[float, float],
                       pixels_per_cm: float) -> float:
        """
        Resistance of the wire, R = rho * L / A.

        Lengths are converted from px to metres using ``pixels_per_cm``.
        Returns 0 when the wire has resistance disabled.
        """
        if not self.has_resistance:
            return 0.0
        metres_per_px = 1 / (pixels_per_cm * 100)
        length = self.length(start, end) * metres_per_px
        area = math.pi * (self.radius * metres_per_px) ** 2
        return max(ZERO_RESISTANCE, MATERIALS[self.material] * length / area)

    def options(self) -> dict:
        return {
            "has_resistance": self.has_resistance,
            "material": self.material,
            "radius": self.radius,
        }

    def to_dict(self, target_index: int, order: Optional[int] = None) -> dict:
        """
        Serialize as a connection entry of the source component.

        ``order`` is the wire's position among all wires by creation.
        """
        entry = {
            "target_index": target_index,
            "path": [list(point) for point in self.path],
            "wire_options": self.options(),
        }
        if order is not None:
            entry["order"] = order
        if self.merge is not None:
            entry["merge"] = self.merge
        return entry

    def __repr__(self) -> str:
        return f"WireData({self.source_id} -> {self.target_id})"
