"""Per-tick evaluation context passed down the evaluation cascade."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TickContext:
    """
    State shared by every component evaluated during one tick.

    Attributes:
        frame: Frame number being evaluated (1 for the first tick).
        fps: Tick rate used to turn frame counts into seconds.
        head_id: Id of the power source evaluation started from.
        visited: Ids of components already evaluated this tick.
    """

    frame: int
    fps: int
    head_id: Optional[int] = None
    visited: set[int] = field(default_factory=set)

    def frames_to_seconds(self, frames: int) -> float:
        return frames / self.fps
