"""
SimulationSettings - Tunable parameters for a network simulation.

Settings travel with the network (they are part of its saved data) so a
reloaded network ticks at the same rate in the same environment.
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Optional

MIN_FPS = 1
MAX_FPS = 60


@dataclass
class SimulationSettings:
    """Simulation rate and environment defaults."""

    fps: int = 20
    pixels_per_cm: float = 2.5
    ambient_light: float = 0.0
    ambient_temperature: float = 20.0
    seed: Optional[int] = None

    def __post_init__(self):
        self.fps = clamp_fps(self.fps)
        if self.pixels_per_cm <= 0:
            self.pixels_per_cm = SimulationSettings.pixels_per_cm

    def frames_to_seconds(self, frames: int) -> float:
        return frames / self.fps

    def seconds_to_frames(self, seconds: float) -> int:
        return math.ceil(seconds * self.fps)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SimulationSettings":
        """Build settings from a dict, ignoring unknown keys and bad values."""
        if not data:
            return cls()
        kwargs = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name == "seed":
                if value is None or (isinstance(value, int) and not isinstance(value, bool)):
                    kwargs["seed"] = value
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value):
                continue
            kwargs[f.name] = int(value) if f.name == "fps" else float(value)
        return cls(**kwargs)


def clamp_fps(fps) -> int:
    """Clamp a tick rate into the supported range."""
    try:
        fps = int(fps)
    except (TypeError, ValueError):
        return SimulationSettings.fps
    return max(MIN_FPS, min(MAX_FPS, fps))
