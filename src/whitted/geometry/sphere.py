"""Sphere primitive with projection-based ray-sphere intersection.

The intersection projects the origin-to-center vector onto the ray
direction and compares the perpendicular distance against the radius:

    L = center - origin
    proj_len = dot(L, D)          (D normalized)
    d = |L - proj_len * D|        (closest approach of the ray to the center)

If the center lies behind the origin (proj_len < 0) only an origin inside
or on the sphere can hit, at the exit point. Otherwise the ray hits when
d <= radius: at the entry point from outside, at the exit point from inside.

Comparisons against the radius use RADIUS_EPSILON rather than exact float
equality, so grazing and on-surface origins are classified stably.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import Sphere
    >>> from whitted.materials import IVORY
    >>> sphere = Sphere(center=(0.0, 0.0, -5.0), radius=1.0, material=IVORY)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from whitted.core.ray import dot, length, normalize
from whitted.core.vector import Vector3
from whitted.geometry.entity import EntityKind
from whitted.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Tolerance for "on the surface" / "tangent" comparisons, in scene units
RADIUS_EPSILON = 1e-4


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
        material: Surface material.
    """

    center: Vector3
    radius: float
    material: Material

    kind = EntityKind.SPHERE

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", Vector3.of(self.center))
        if not math.isfinite(self.radius) or self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", float(self.radius))

    def normal_at(self, point: Vector3 | Sequence[float]) -> Vector3:
        """Return the outward unit normal at a point on the surface."""
        return (Vector3.of(point) - self.center).normalize()


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
):
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray. Need not be normalized; it
            is normalized here and the returned distance is measured along
            the unit direction.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        A tuple (hit, distance). hit is 1 when the ray meets the sphere at a
        non-negative distance, 0 otherwise; distance is only valid on a hit.
    """
    direction = normalize(ray_direction)
    to_center = center - ray_origin
    proj_len = dot(to_center, direction)
    center_dist = length(to_center)

    hit = 0
    distance = 0.0

    if proj_len < 0.0:
        # Center is behind the origin: only an origin inside or on the sphere can hit
        if ti.abs(center_dist - radius) <= RADIUS_EPSILON:
            hit = 1
            distance = 0.0
        elif center_dist < radius:
            perp_sq = tm.max(center_dist * center_dist - proj_len * proj_len, 0.0)
            hit = 1
            distance = proj_len + ti.sqrt(tm.max(radius * radius - perp_sq, 0.0))
    else:
        closest = direction * proj_len
        perp = length(to_center - closest)
        if ti.abs(perp - radius) <= RADIUS_EPSILON:
            # Tangent
            hit = 1
            distance = proj_len
        elif perp < radius:
            offset = ti.sqrt(radius * radius - perp * perp)
            hit = 1
            if center_dist < radius - RADIUS_EPSILON:
                # Origin inside: exit point
                distance = proj_len + offset
            else:
                distance = tm.max(proj_len - offset, 0.0)

    return hit, distance


@ti.func
def sphere_normal(center: vec3, point: vec3) -> vec3:
    """Compute the outward unit normal of a sphere at a surface point."""
    return normalize(point - center)
