"""Device-side scene storage and nearest-hit queries.

SceneData uploads an immutable Scene into Taichi fields and provides the
nearest-hit query used by the ray caster. Entities are stored as a tagged
variant: each entity index has a kind (EntityKind), an index into the
kind-specific geometry arrays, and a material ID into the deduplicated
material table.

Geometry and material data use a Structure-of-Arrays layout. The query is a
linear scan over every entity in scene order, keeping the smallest strictly
positive distance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.intersection import SceneData
    >>> from whitted.scene.demo import create_demo_scene
    >>> data = SceneData(create_demo_scene())
    >>> data.query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))  # (hit_point, entity) or None
"""

import logging
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from whitted.core.ray import Ray, normalize, ray_at
from whitted.core.vector import Vector3
from whitted.geometry.entity import Entity, EntityKind
from whitted.geometry.sphere import intersect_sphere, sphere_normal
from whitted.geometry.triangle import intersect_triangle, triangle_normal
from whitted.scene.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound for hit distances ("no hit yet")
T_MAX = 1e30

# Entity kind tags as plain ints for kernel dispatch
SPHERE_KIND = int(EntityKind.SPHERE)
TRIANGLE_KIND = int(EntityKind.TRIANGLE)

# Default field capacities; a larger first scene raises them
MAX_SPHERES = 256
MAX_TRIANGLES = 1024
MAX_LIGHTS = 64


@ti.data_oriented
class SceneData:
    """Taichi field storage for a scene plus the nearest-hit query.

    Fields are allocated once at a fixed capacity. load() replaces the
    uploaded scene in place, so one SceneData (and every kernel compiled
    against it) can be reused across renders.

    Attributes:
        scene: The host-side scene currently uploaded.
        materials: Distinct materials, indexed by material ID.
        max_spheres: Sphere capacity.
        max_triangles: Triangle capacity.
        max_lights: Light capacity.
    """

    def __init__(
        self,
        scene: Scene | None = None,
        max_spheres: int = MAX_SPHERES,
        max_triangles: int = MAX_TRIANGLES,
        max_lights: int = MAX_LIGHTS,
    ) -> None:
        """Allocate fields and upload the scene, if one is given.

        Capacities are raised to fit the given scene.

        Args:
            scene: The scene to upload. Taichi must already be initialized.
            max_spheres: Minimum sphere capacity.
            max_triangles: Minimum triangle capacity.
            max_lights: Minimum light capacity.
        """
        if scene is None:
            scene = Scene()

        # Taichi fields cannot have zero extent
        self.max_spheres = max(1, max_spheres, scene.count(EntityKind.SPHERE))
        self.max_triangles = max(1, max_triangles, scene.count(EntityKind.TRIANGLE))
        self.max_lights = max(1, max_lights, len(scene.lights))
        max_entities = self.max_spheres + self.max_triangles

        # Tagged entity table
        self.num_entities = ti.field(dtype=ti.i32, shape=())
        self.entity_kinds = ti.field(dtype=ti.i32, shape=max_entities)
        self.entity_indices = ti.field(dtype=ti.i32, shape=max_entities)
        self.entity_material_ids = ti.field(dtype=ti.i32, shape=max_entities)

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=self.max_spheres)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=self.max_spheres)

        # Triangle storage
        self.triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=self.max_triangles)
        self.triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=self.max_triangles)
        self.triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=self.max_triangles)

        # Material table; every entity can have its own material
        self.material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=max_entities)
        self.material_albedo = ti.Vector.field(4, dtype=ti.f32, shape=max_entities)
        self.material_specular_exponent = ti.field(dtype=ti.f32, shape=max_entities)
        self.material_refractive_index = ti.field(dtype=ti.f32, shape=max_entities)

        # Lights
        self.num_lights = ti.field(dtype=ti.i32, shape=())
        self.light_positions = ti.Vector.field(3, dtype=ti.f32, shape=self.max_lights)
        self.light_intensities = ti.field(dtype=ti.f32, shape=self.max_lights)

        # Host query results
        self._query_entity = ti.field(dtype=ti.i32, shape=())
        self._query_point = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.load(scene)

    def fits(self, scene: Scene) -> bool:
        """Return True if the scene fits the allocated capacities."""
        return (
            scene.count(EntityKind.SPHERE) <= self.max_spheres
            and scene.count(EntityKind.TRIANGLE) <= self.max_triangles
            and len(scene.lights) <= self.max_lights
        )

    def load(self, scene: Scene) -> None:
        """Replace the uploaded scene.

        Args:
            scene: The scene to upload.

        Raises:
            RuntimeError: If the scene exceeds the allocated capacities.
        """
        if not self.fits(scene):
            raise RuntimeError(
                f"Scene exceeds capacity ({self.max_spheres} spheres, "
                f"{self.max_triangles} triangles, {self.max_lights} lights)"
            )
        self.scene = scene
        self.materials = scene.materials()

        spheres = [e for e in scene.entities if e.kind == EntityKind.SPHERE]
        triangles = [e for e in scene.entities if e.kind == EntityKind.TRIANGLE]
        self._upload(spheres, triangles)

        logger.debug(
            "Uploaded scene: %d spheres, %d triangles, %d materials, %d lights",
            len(spheres),
            len(triangles),
            len(self.materials),
            len(scene.lights),
        )

    def _upload(self, spheres: list[Entity], triangles: list[Entity]) -> None:
        """Copy the host scene into the Taichi fields."""
        material_ids = {material: i for i, material in enumerate(self.materials)}
        for i, material in enumerate(self.materials):
            self.material_diffuse[i] = list(material.diffuse_color)
            self.material_albedo[i] = list(material.albedo)
            self.material_specular_exponent[i] = material.specular_exponent
            self.material_refractive_index[i] = material.refractive_index

        for i, sphere in enumerate(spheres):
            self.sphere_centers[i] = list(sphere.center)
            self.sphere_radii[i] = sphere.radius

        for i, triangle in enumerate(triangles):
            v0, v1, v2 = triangle.vertices
            self.triangle_v0[i] = list(v0)
            self.triangle_v1[i] = list(v1)
            self.triangle_v2[i] = list(v2)

        kind_counters = {EntityKind.SPHERE: 0, EntityKind.TRIANGLE: 0}
        for i, entity in enumerate(self.scene.entities):
            self.entity_kinds[i] = int(entity.kind)
            self.entity_indices[i] = kind_counters[entity.kind]
            self.entity_material_ids[i] = material_ids[entity.material]
            kind_counters[entity.kind] += 1
        self.num_entities[None] = len(self.scene.entities)

        for i, light in enumerate(self.scene.lights):
            self.light_positions[i] = list(light.position)
            self.light_intensities[i] = light.intensity
        self.num_lights[None] = len(self.scene.lights)

    # =========================================================================
    # Entity dispatch (kernel side)
    # =========================================================================

    @ti.func
    def intersect_entity(self, entity: ti.i32, ray_origin: vec3, ray_direction: vec3):
        """Intersect a ray with one entity, dispatching on its kind.

        Returns:
            A tuple (hit, distance) as returned by the primitive routine.
        """
        kind = self.entity_kinds[entity]
        idx = self.entity_indices[entity]

        hit = 0
        distance = 0.0
        if kind == SPHERE_KIND:
            hit, distance = intersect_sphere(
                ray_origin, ray_direction, self.sphere_centers[idx], self.sphere_radii[idx]
            )
        elif kind == TRIANGLE_KIND:
            hit, distance = intersect_triangle(
                ray_origin,
                ray_direction,
                self.triangle_v0[idx],
                self.triangle_v1[idx],
                self.triangle_v2[idx],
            )
        return hit, distance

    @ti.func
    def normal_at(self, entity: ti.i32, point: vec3) -> vec3:
        """Compute the unit surface normal of an entity at a point."""
        kind = self.entity_kinds[entity]
        idx = self.entity_indices[entity]

        normal = vec3(0.0, 0.0, 0.0)
        if kind == SPHERE_KIND:
            normal = sphere_normal(self.sphere_centers[idx], point)
        elif kind == TRIANGLE_KIND:
            normal = triangle_normal(
                self.triangle_v0[idx], self.triangle_v1[idx], self.triangle_v2[idx]
            )
        return normal

    @ti.func
    def material_of(self, entity: ti.i32) -> ti.i32:
        """Return the material ID of an entity."""
        return self.entity_material_ids[entity]

    @ti.func
    def nearest_hit(self, ray_origin: vec3, ray_direction: vec3):
        """Find the closest entity hit by a ray.

        Tests every entity in scene order and keeps the smallest strictly
        positive distance.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction of the ray (normalized here).

        Returns:
            A tuple (entity, point). entity is -1 on a miss; point is
            origin + direction * distance and only valid on a hit.
        """
        direction = normalize(ray_direction)
        closest = T_MAX
        entity = -1

        for e in range(self.num_entities[None]):
            hit, distance = self.intersect_entity(e, ray_origin, direction)
            if hit == 1 and distance > 0.0 and distance < closest:
                closest = distance
                entity = e

        point = vec3(0.0, 0.0, 0.0)
        if entity >= 0:
            point = ray_at(Ray(origin=ray_origin, direction=direction), closest)
        return entity, point

    # =========================================================================
    # Host queries
    # =========================================================================

    @ti.kernel
    def _query_kernel(
        self,
        ox: ti.f32,
        oy: ti.f32,
        oz: ti.f32,
        dx: ti.f32,
        dy: ti.f32,
        dz: ti.f32,
    ):
        # Single-iteration outer loop keeps the entity scan serial
        for _ in range(1):
            entity, point = self.nearest_hit(vec3(ox, oy, oz), vec3(dx, dy, dz))
            self._query_entity[None] = entity
            self._query_point[None] = point

    def query(
        self,
        origin: Vector3 | Sequence[float],
        direction: Vector3 | Sequence[float],
    ) -> tuple[Vector3, Entity] | None:
        """Run the nearest-hit query for a single ray from Python.

        Useful for testing and picking. Rendering calls nearest_hit() from
        inside kernels instead.

        Args:
            origin: Ray origin.
            direction: Ray direction (any non-zero length).

        Returns:
            (hit_point, entity) for the closest hit, or None on a miss.

        Raises:
            ValueError: If the direction is the zero vector.
        """
        o = Vector3.of(origin)
        d = Vector3.of(direction).normalize()
        self._query_kernel(o.x, o.y, o.z, d.x, d.y, d.z)

        entity = int(self._query_entity[None])
        if entity < 0:
            return None
        p = self._query_point[None]
        return Vector3(float(p[0]), float(p[1]), float(p[2])), self.scene.entities[entity]
