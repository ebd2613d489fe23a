"""Unit tests for lights, the Scene container and the demo scene.

Tests cover:
- Light validation
- Scene entry type checks and ordering
- Material deduplication in first-use order
- Demo scene layout
"""

import pytest

from whitted.core.vector import Vector3
from whitted.geometry.entity import EntityKind
from whitted.geometry.sphere import Sphere
from whitted.geometry.triangle import Triangle
from whitted.materials import GLASS, IVORY, MIRROR, RED_RUBBER
from whitted.scene import Light, Scene, create_demo_scene, make_light


class TestLight:
    """Tests for point lights."""

    def test_make_light(self):
        light = make_light((1, 2, 3), 1.5)
        assert light.position == Vector3(1.0, 2.0, 3.0)
        assert light.intensity == 1.5

    @pytest.mark.parametrize("intensity", [0.0, -1.0, float("inf")])
    def test_invalid_intensity_raises(self, intensity):
        with pytest.raises(ValueError, match="intensity"):
            Light((0.0, 0.0, 0.0), intensity)


class TestScene:
    """Tests for the immutable Scene."""

    def test_empty_scene(self):
        scene = Scene()
        assert scene.entities == ()
        assert scene.lights == ()
        assert scene.materials() == []

    def test_lists_become_tuples(self):
        sphere = Sphere((0, 0, -5), 1.0, IVORY)
        scene = Scene(entities=[sphere], lights=[make_light((0, 5, 0), 1.0)])
        assert scene.entities == (sphere,)
        assert isinstance(scene.lights, tuple)

    def test_build(self):
        sphere = Sphere((0, 0, -5), 1.0, IVORY)
        scene = Scene.build(iter([sphere]), iter([]))
        assert scene.entities == (sphere,)

    def test_non_entity_raises(self):
        with pytest.raises(TypeError, match="entity 0"):
            Scene(entities=["sphere"])

    def test_tagged_object_is_not_an_entity(self):
        """An object with a kind tag but no geometry is rejected up front."""

        class FakeSphere:
            kind = EntityKind.SPHERE

        with pytest.raises(TypeError, match="entity 0"):
            Scene(entities=[FakeSphere()])

    def test_entity_without_material_raises(self):
        with pytest.raises(TypeError, match="Material"):
            Scene(entities=[Sphere((0, 0, -5), 1.0, "ivory")])

    def test_non_light_raises(self):
        with pytest.raises(TypeError, match="light 0"):
            Scene(lights=[(0.0, 5.0, 0.0)])

    def test_materials_deduplicated_in_first_use_order(self):
        scene = Scene(
            entities=[
                Sphere((0, 0, -5), 1.0, GLASS),
                Sphere((3, 0, -5), 1.0, IVORY),
                Triangle(((0, 0, -9), (1, 0, -9), (0, 1, -9)), GLASS),
            ]
        )
        assert scene.materials() == [GLASS, IVORY]

    def test_count(self):
        scene = Scene(
            entities=[
                Sphere((0, 0, -5), 1.0, GLASS),
                Triangle(((0, 0, -9), (1, 0, -9), (0, 1, -9)), GLASS),
                Triangle(((0, 0, -8), (1, 0, -8), (0, 1, -8)), IVORY),
            ]
        )
        assert scene.count(EntityKind.SPHERE) == 1
        assert scene.count(EntityKind.TRIANGLE) == 2


class TestDemoScene:
    """Tests for the four-sphere demo scene."""

    def test_layout(self):
        scene = create_demo_scene()
        assert len(scene.entities) == 4
        assert [e.material for e in scene.entities] == [IVORY, GLASS, RED_RUBBER, MIRROR]
        assert [light.intensity for light in scene.lights] == [1.5, 1.8, 1.7]

    def test_all_entities_in_front_of_camera(self):
        scene = create_demo_scene()
        assert all(e.center.z < 0.0 for e in scene.entities)
