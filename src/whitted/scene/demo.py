"""Demo scene: four spheres of different materials lit by three lights.

The layout places an ivory sphere, a glass sphere in front of it, a red
rubber sphere behind and a large mirror sphere up and to the right, viewed
from the origin looking down -z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.config import RenderConfig
    >>> from whitted.core.frame import render_scene
    >>> from whitted.scene.demo import create_demo_scene
    >>> image = render_scene(create_demo_scene(), RenderConfig(width=320, height=240))
"""

from __future__ import annotations

from whitted.core.vector import Vector3
from whitted.geometry.sphere import Sphere
from whitted.materials.material import GLASS, IVORY, MIRROR, RED_RUBBER
from whitted.scene.light import Light
from whitted.scene.scene import Scene


def create_demo_scene() -> Scene:
    """Create the four-sphere demo scene.

    Returns:
        A Scene with spheres (ivory, glass, red rubber, mirror) and three
        lights with intensities 1.5, 1.8 and 1.7.
    """
    entities = [
        Sphere(Vector3(-3.0, 0.0, -16.0), 2.0, IVORY),
        Sphere(Vector3(-1.0, -1.5, -12.0), 2.0, GLASS),
        Sphere(Vector3(1.5, -0.5, -18.0), 3.0, RED_RUBBER),
        Sphere(Vector3(7.0, 5.0, -18.0), 4.0, MIRROR),
    ]
    lights = [
        Light(Vector3(-20.0, 20.0, 20.0), 1.5),
        Light(Vector3(30.0, 50.0, -25.0), 1.8),
        Light(Vector3(30.0, 20.0, 30.0), 1.7),
    ]
    return Scene(entities=tuple(entities), lights=tuple(lights))
