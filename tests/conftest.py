"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def ivory_sphere_scene():
    """A single ivory-like sphere in front of the camera with one light above."""
    from whitted.core.vector import Vector3
    from whitted.geometry.sphere import Sphere
    from whitted.materials.material import IVORY
    from whitted.scene.light import Light
    from whitted.scene.scene import Scene

    return Scene(
        entities=(Sphere(Vector3(0.0, 0.0, -5.0), 1.0, IVORY),),
        lights=(Light(Vector3(0.0, 5.0, 0.0), 1.0),),
    )
