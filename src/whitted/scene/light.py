"""Point light sources."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from whitted.core.vector import Vector3


@dataclass(frozen=True)
class Light:
    """An immutable point light.

    The intensity is applied as-is to every surface it reaches; there is no
    distance falloff.

    Attributes:
        position: Light position in world space.
        intensity: Positive scalar brightness.
    """

    position: Vector3
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", Vector3.of(self.position))
        if not math.isfinite(self.intensity) or self.intensity <= 0.0:
            raise ValueError(f"Light intensity must be positive, got {self.intensity}")
        object.__setattr__(self, "intensity", float(self.intensity))


def make_light(position: Vector3 | Sequence[float], intensity: float) -> Light:
    """Create a light from a position tuple and intensity."""
    return Light(position=Vector3.of(position), intensity=intensity)
