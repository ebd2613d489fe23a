"""Ray data structure and vector utilities for kernel-side ray tracing.

This module provides the Ray dataclass and the vector helpers used inside
Taichi kernels: dot and cross products, lengths, normalization, mirror
reflection, Snell refraction and the origin offset that keeps secondary rays
from re-hitting the surface they leave.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance secondary and shadow ray origins are pushed off the surface
PERTURB = 1e-3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Normalized by
            every producer in this package.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector, without the square root."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Kernels cannot raise, so a zero-length input yields the zero vector
    instead of NaN. Host entry points reject zero directions before any
    kernel is launched.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = length_squared(v)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 (incident . normal) normal. The normal should be
    unit length for correct results; the result is not renormalized.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, refractive_index: ti.f32):
    """Refract an incident vector through a surface using Snell's law.

    The outside medium is vacuum (index 1.0). When the ray starts inside the
    material (incident and outward normal point the same way) the normal is
    flipped and the two indices are swapped.

    Args:
        incident: The incoming direction vector.
        normal: The outward surface normal.
        refractive_index: Index of refraction of the material.

    Returns:
        A tuple (direction, refracted) where direction is the normalized
        transmitted direction and refracted is 0 on total internal
        reflection (direction is then the zero vector).
    """
    inc = normalize(incident)
    n = normalize(normal)
    cos_i = -dot(inc, n)
    eta_i = 1.0
    eta_t = refractive_index

    if cos_i < 0.0:
        # Ray leaves the material
        cos_i = -cos_i
        swap = eta_i
        eta_i = eta_t
        eta_t = swap
        n = -n

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)

    direction = vec3(0.0, 0.0, 0.0)
    refracted = 0
    if k >= 0.0:
        direction = normalize(eta * inc + (eta * cos_i - ti.sqrt(k)) * n)
        refracted = 1
    return direction, refracted


@ti.func
def offset_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a ray origin to avoid self-intersection.

    Pushes the point by PERTURB along the normal when the new ray leaves on
    the normal's side, and against it otherwise.

    Args:
        point: The intersection point.
        normal: The surface normal at the point.
        direction: The direction of the ray that will start at the point.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + PERTURB * offset_dir
