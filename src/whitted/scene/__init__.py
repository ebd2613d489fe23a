"""Scene module for scene description and ray-scene queries.

This module handles scene representation and nearest-hit queries:

Components:
    light: Point light sources
    scene: Immutable ordered collections of entities and lights
    intersection: SceneData, the Taichi field upload plus nearest-hit query
    demo: The four-sphere demo scene

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout for geometric data
    - A tagged entity table (kind, kind-local index, material ID)
    - A deduplicated material table
"""

from .demo import create_demo_scene
from .intersection import T_MAX, SceneData
from .light import Light, make_light
from .scene import Scene

__all__ = [
    "Light",
    "make_light",
    "Scene",
    "SceneData",
    "T_MAX",
    "create_demo_scene",
]
