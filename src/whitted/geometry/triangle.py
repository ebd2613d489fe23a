"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

A triangle is defined by three vertices. Its normal is the plane normal

    normalize(cross(v1 - v0, v2 - v1))

and is not flipped toward the incoming ray, so the winding order decides
which side counts as "outside" for refraction.

Ray-triangle intersection uses the Moller-Trumbore test, which solves

    origin + t * D = v0 + u * (v1 - v0) + v * (v2 - v0)

for (t, u, v) with Cramer's rule and accepts the hit when u >= 0, v >= 0,
u + v <= 1 and t >= 0.

Example:
    >>> from whitted.geometry.triangle import Triangle
    >>> from whitted.materials import RED_RUBBER
    >>> floor = Triangle(((-1, 0, 0), (1, 0, 0), (0, 0, -1)), RED_RUBBER)
    >>> floor.normal_at((0, 0, -0.5))
    Vector3(x=0.0, y=1.0, z=0.0)
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from whitted.core.ray import cross, dot, normalize
from whitted.core.vector import Vector3
from whitted.geometry.entity import EntityKind
from whitted.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Determinant threshold below which the ray is treated as parallel
PARALLEL_EPSILON = 1e-8


@dataclass(frozen=True)
class Triangle:
    """A triangle defined by three vertices and a material.

    Attributes:
        vertices: The vertices (v0, v1, v2) in winding order.
        material: Surface material.
    """

    vertices: tuple[Vector3, Vector3, Vector3]
    material: Material

    kind = EntityKind.TRIANGLE

    def __post_init__(self) -> None:
        if len(self.vertices) != 3:
            raise ValueError(f"Triangle needs 3 vertices, got {len(self.vertices)}")
        vertices = tuple(Vector3.of(v) for v in self.vertices)
        object.__setattr__(self, "vertices", vertices)
        if self._plane_normal().length_squared() == 0.0:
            raise ValueError(f"Degenerate triangle (collinear vertices): {vertices}")

    def _plane_normal(self) -> Vector3:
        v0, v1, v2 = self.vertices
        return (v1 - v0).cross(v2 - v1)

    def normal_at(self, point: Vector3 | Sequence[float] | None = None) -> Vector3:
        """Return the unit plane normal; the same for every point."""
        return self._plane_normal().normalize()


@ti.func
def intersect_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
):
    """Test for ray-triangle intersection (Moller-Trumbore).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray. Normalized here so the
            returned distance is measured along the unit direction.
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.

    Returns:
        A tuple (hit, distance). hit is 1 when the ray meets the triangle at
        a non-negative distance, 0 otherwise (including parallel rays).
    """
    direction = normalize(ray_direction)
    edge1 = v1 - v0
    edge2 = v2 - v0

    h = cross(direction, edge2)
    det = dot(edge1, h)

    hit = 0
    distance = 0.0

    if ti.abs(det) >= PARALLEL_EPSILON:
        inv_det = 1.0 / det
        s = ray_origin - v0
        u = inv_det * dot(s, h)

        if u >= 0.0 and u <= 1.0:
            q = cross(s, edge1)
            v = inv_det * dot(direction, q)

            if v >= 0.0 and u + v <= 1.0:
                t = inv_det * dot(edge2, q)
                if t >= 0.0:
                    hit = 1
                    distance = t

    return hit, distance


@ti.func
def triangle_normal(v0: vec3, v1: vec3, v2: vec3) -> vec3:
    """Compute the unit plane normal of a triangle."""
    return normalize(cross(v1 - v0, v2 - v1))
