"""Entity kinds shared by the host scene description and device dispatch.

Every primitive carries a kind tag. The scene upload stores the tag and a
kind-local index per entity, and the scene query dispatches on the tag, so
adding a primitive means adding a kind, a host class and its two kernel
functions (intersect and normal) without touching the caster.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol, runtime_checkable

from whitted.core.vector import Vector3
from whitted.materials.material import Material


class EntityKind(IntEnum):
    """Enumeration of supported primitive kinds.

    Used for intersection and normal dispatch in the scene query.
    """

    SPHERE = 0
    TRIANGLE = 1


@runtime_checkable
class Entity(Protocol):
    """Host-side capabilities every primitive provides.

    Ray intersection runs on the device; see intersect_sphere and
    intersect_triangle.
    """

    kind: EntityKind
    material: Material

    def normal_at(self, point: Vector3) -> Vector3: ...
