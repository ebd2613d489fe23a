"""Pinhole camera model for perspective projection ray generation.

The camera sits at a fixed eye position looking down -z with +y up. The
image plane is at unit distance; its half-width is tan(hfov / 2) and its
half-height follows from the aspect ratio. For the pixel in column i and
row j (row 0 at the top) of a W x H image:

    x = (2 * (i + 0.5) / W - 1) * tan(hfov / 2)
    y = -(2 * (j + 0.5) / H - 1) * tan(hfov / 2) * H / W
    z = -1

The direction (x, y, z) is normalized. Rays go through pixel centers only;
there is no jitter.

Example:
    >>> from whitted.camera.pinhole import PinholeCamera
    >>> camera = PinholeCamera(width=1, height=1, hfov=60.0)
    >>> camera.ray_direction(0, 0).z
    -1.0
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from whitted.core.ray import normalize
from whitted.core.vector import Vector3

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        hfov: Horizontal field of view in degrees, in (0, 180).
        eye: Camera position in world space.
    """

    width: int
    height: int
    hfov: float
    eye: Vector3 = field(default_factory=Vector3.zero)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.hfov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.hfov}")
        object.__setattr__(self, "eye", Vector3.of(self.eye))

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def tan_half_fov(self) -> float:
        """Half-width of the image plane at unit distance."""
        return math.tan(math.radians(self.hfov) / 2.0)

    def ray_direction(self, i: int, j: int) -> Vector3:
        """Compute the unit direction through the center of pixel (i, j).

        Host-side mirror of camera_ray_direction(), for tests and picking.

        Args:
            i: Pixel column (0 = left).
            j: Pixel row (0 = top).
        """
        scale = self.tan_half_fov
        x = (2.0 * (i + 0.5) / self.width - 1.0) * scale
        y = -(2.0 * (j + 0.5) / self.height - 1.0) * scale / self.aspect_ratio
        return Vector3(x, y, -1.0).normalize()


def make_camera(
    width: int,
    height: int,
    hfov: float,
    eye: Vector3 | Sequence[float] = (0.0, 0.0, 0.0),
) -> PinholeCamera:
    """Create a camera from plain values."""
    return PinholeCamera(width=width, height=height, hfov=hfov, eye=Vector3.of(eye))


@ti.func
def camera_ray_direction(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    tan_half_fov: ti.f32,
) -> vec3:
    """Generate the unit direction through the center of a pixel.

    This function is designed to be called from within Taichi kernels.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        tan_half_fov: tan(hfov / 2) for the horizontal field of view.

    Returns:
        The normalized camera-space ray direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    x = (2.0 * (ti.cast(pixel_i, ti.f32) + 0.5) / w - 1.0) * tan_half_fov
    y = -(2.0 * (ti.cast(pixel_j, ti.f32) + 0.5) / h - 1.0) * tan_half_fov * h / w
    return normalize(vec3(x, y, -1.0))
