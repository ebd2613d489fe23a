"""Immutable scene description: ordered entities and ordered lights.

A Scene is built once before rendering and never mutated. Entity order is
significant: when two entities are hit at exactly the same distance, the
earlier one wins.

Example:
    >>> from whitted.scene.scene import Scene
    >>> from whitted.scene.light import Light
    >>> from whitted.geometry.sphere import Sphere
    >>> from whitted.materials import IVORY
    >>> scene = Scene(
    ...     entities=[Sphere((0, 0, -5), 1.0, IVORY)],
    ...     lights=[Light((0, 5, 0), 1.0)],
    ... )
    >>> len(scene.entities), len(scene.lights)
    (1, 1)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from whitted.geometry.entity import Entity, EntityKind
from whitted.geometry.sphere import Sphere
from whitted.geometry.triangle import Triangle
from whitted.materials.material import Material
from whitted.scene.light import Light


@dataclass(frozen=True)
class Scene:
    """Ordered, read-only collections of entities and lights.

    Attributes:
        entities: Primitives in scene order (spheres and triangles).
        lights: Point lights in scene order.
    """

    entities: tuple[Entity, ...] = field(default_factory=tuple)
    lights: tuple[Light, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        entities = tuple(self.entities)
        lights = tuple(self.lights)
        for i, entity in enumerate(entities):
            if not isinstance(entity, (Sphere, Triangle)):
                raise TypeError(f"Scene entity {i} is not a Sphere or Triangle: {entity!r}")
            if not isinstance(entity.material, Material):
                raise TypeError(f"Scene entity {i} has no Material: {entity.material!r}")
        for i, light in enumerate(lights):
            if not isinstance(light, Light):
                raise TypeError(f"Scene light {i} is not a Light: {light!r}")
        object.__setattr__(self, "entities", entities)
        object.__setattr__(self, "lights", lights)

    @classmethod
    def build(cls, entities: Iterable[Entity], lights: Iterable[Light]) -> Scene:
        return cls(entities=tuple(entities), lights=tuple(lights))

    def materials(self) -> list[Material]:
        """Return the distinct materials in first-use order.

        The position of a material in this list is its material ID.
        """
        seen: dict[Material, int] = {}
        for entity in self.entities:
            seen.setdefault(entity.material, len(seen))
        return list(seen)

    def count(self, kind: EntityKind) -> int:
        """Return the number of entities of the given kind."""
        return sum(1 for entity in self.entities if entity.kind == kind)
