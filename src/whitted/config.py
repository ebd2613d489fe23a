"""Render configuration.

RenderConfig bundles everything the frame generator needs besides the
scene: raster size, field of view, recursion bound, background color and eye
position. Values are validated once at construction.

Example:
    >>> from whitted.config import RenderConfig
    >>> config = RenderConfig(width=320, height=240, max_depth=3)
    >>> config.aspect_ratio
    1.3333333333333333
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from whitted.camera.pinhole import PinholeCamera
from whitted.core.caster import (
    BACKGROUND_COLOR,
    DEFAULT_MAX_DEPTH,
    as_color,
    check_depth,
)
from whitted.core.vector import Vector3

DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768

# Horizontal field of view in degrees (about 1 radian vertically at 4:3)
DEFAULT_FOV = 72.0


@dataclass(frozen=True)
class RenderConfig:
    """Configuration for rendering one frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal field of view in degrees, in (0, 180).
        max_depth: Recursion bound for reflection/refraction rays.
        background: Color of rays that escape the scene, as (R, G, B).
        eye: Camera position; the camera always looks down -z.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    fov: float = DEFAULT_FOV
    max_depth: int = DEFAULT_MAX_DEPTH
    background: tuple[int, int, int] = BACKGROUND_COLOR
    eye: Vector3 = field(default_factory=Vector3.zero)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")
        object.__setattr__(self, "max_depth", check_depth(self.max_depth))
        object.__setattr__(self, "background", as_color(self.background))
        object.__setattr__(self, "eye", Vector3.of(self.eye))

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def camera(self) -> PinholeCamera:
        """Build the pinhole camera described by this configuration."""
        return PinholeCamera(width=self.width, height=self.height, hfov=self.fov, eye=self.eye)

    def with_size(self, width: int, height: int) -> RenderConfig:
        """Return a copy with a different raster size."""
        return replace(self, width=width, height=height)
