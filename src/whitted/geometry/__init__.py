"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection routines:

Components:
    entity: EntityKind tags and the host-side Entity protocol
    sphere: Sphere primitive with projection-based ray-sphere intersection
    triangle: Triangle primitive with Moller-Trumbore intersection

Host classes are immutable scene descriptions validated at construction.
The intersection and normal routines are Taichi functions (@ti.func) called
from the scene query inside rendering kernels. Each intersection follows the
pattern:
    hit, distance = intersect_shape(ray_origin, ray_direction, shape_data...)
"""

from .entity import Entity, EntityKind
from .sphere import RADIUS_EPSILON, Sphere, intersect_sphere, sphere_normal
from .triangle import Triangle, intersect_triangle, triangle_normal

__all__ = [
    "Entity",
    "EntityKind",
    "Sphere",
    "intersect_sphere",
    "sphere_normal",
    "RADIUS_EPSILON",
    "Triangle",
    "intersect_triangle",
    "triangle_normal",
]
