"""Whitted-style recursive ray tracer built on Taichi.

This package renders static scenes of spheres and triangles lit by point
lights into 8-bit RGB images, with support for:
- Hard shadows and local diffuse + specular (Phong) illumination
- Recursive mirror reflection and Snell refraction up to a bounded depth
- Band-parallel frame generation with cancellation and progress callbacks

Subpackages:
    core: Vector algebra, kernel ray helpers, the ray caster and frame generator
    geometry: Sphere and triangle primitives with intersection routines
    materials: Material parameters and named presets
    scene: Lights, immutable scene description and device-side scene query
    camera: Pinhole camera ray generation
    preview: Image export utilities

Taichi must be initialized by the caller before rendering::

    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.frame import render
"""

__version__ = "0.1.0"
