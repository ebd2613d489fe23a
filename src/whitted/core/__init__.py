"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: Host-side Vector3 used to describe scenes
    ray: Ray data structure and kernel-side vector helpers
    caster: Whitted-style recursive ray caster (unrolled ray tree)
    frame: Band-parallel frame generator and the render() entry point

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    PERTURB,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    normalize,
    offset_origin,
    ray_at,
    reflect,
    refract,
    vec3,
)
from .vector import Vector3

# Note: caster and frame are NOT imported here to avoid circular imports.
# Import directly from whitted.core.caster or whitted.core.frame when needed.

__all__ = [
    "Vector3",
    "Ray",
    "ray_at",
    "vec3",
    "PERTURB",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "refract",
    "offset_origin",
]
