"""Whitted-style recursive ray caster.

This module implements the shading core: for a ray it finds the nearest hit,
shades it with hard shadows and Phong diffuse + specular lighting from every
point light, and blends in the colors returned by a reflected and a refracted
secondary ray, each traced with one less level of depth.

Taichi functions cannot recurse, so the recursion is unrolled into an
explicit binary ray tree per pixel, stored heap-style in scratch fields:

    node 0            the primary ray (depth = max depth)
    node 2k + 1       the reflection ray spawned by node k
    node 2k + 2       the refraction ray spawned by node k

A tree for depth d has 2^(d+1) - 1 nodes. A top-down pass traces every
pending node in index order (parents before children) and stores its local
shading and blend weights. A bottom-up pass then composites each hit node
from its children:

    color = diffuse_color * diffuse * albedo[0] + 255 * specular * albedo[1]
          + reflect_color * albedo[2] + refract_color * albedo[3]

clamped to [0, 255] and floored to 8-bit precision at every level. Nodes on
the last level have no children; their secondary rays would start with a
negative depth and return the background color.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.caster import WhittedCaster
    >>> from whitted.scene.demo import create_demo_scene
    >>> from whitted.scene.intersection import SceneData
    >>> caster = WhittedCaster(SceneData(create_demo_scene()), max_depth=4)
    >>> caster.cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from whitted.core.ray import dot, length, normalize, offset_origin, reflect, refract
from whitted.core.vector import Vector3
from whitted.scene.intersection import SceneData

# Type alias for 3D vectors
vec3 = tm.vec3
vec2 = tm.vec2

# =============================================================================
# Rendering Constants
# =============================================================================

# Recursion depth used when none is given
DEFAULT_MAX_DEPTH = 4

# Largest supported depth (511 ray-tree nodes per pixel)
MAX_TRACE_DEPTH = 8

# Sky blue returned by rays that escape the scene
BACKGROUND_COLOR = (51, 179, 204)

# Ray-tree node states
NODE_IDLE = 0  # not part of the current tree
NODE_PENDING = 1  # ray stored, not traced yet
NODE_HIT = 2  # hit a surface; composited in the bottom-up pass
NODE_DONE = 3  # final color already known


def tree_size(depth: int) -> int:
    """Number of ray-tree nodes needed for a given recursion depth."""
    return (1 << (depth + 1)) - 1


def as_color(color: Sequence[int]) -> tuple[int, int, int]:
    """Validate an RGB8 color.

    Raises:
        ValueError: If color does not have three integer channels in [0, 255].
    """
    if len(color) != 3:
        raise ValueError(f"Color needs 3 channels, got {len(color)}")
    for i, channel in enumerate(color):
        if int(channel) != channel or channel < 0 or channel > 255:
            raise ValueError(f"Color channel {i} = {channel} is not an integer in [0, 255]")
    return (int(color[0]), int(color[1]), int(color[2]))


def check_depth(depth: int) -> int:
    """Validate a recursion depth bound.

    Raises:
        ValueError: If depth is outside [0, MAX_TRACE_DEPTH].
    """
    if int(depth) != depth or not 0 <= depth <= MAX_TRACE_DEPTH:
        raise ValueError(f"Depth must be an integer in [0, {MAX_TRACE_DEPTH}], got {depth}")
    return int(depth)


@ti.data_oriented
class WhittedCaster:
    """Recursive ray caster over an uploaded scene.

    The caster owns per-slot ray-tree scratch storage. A slot holds the tree
    of one ray being cast; the frame generator gives every pixel of a band
    its own slot so pixels can be traced in parallel.

    Attributes:
        scene: The uploaded scene data.
        max_depth: Largest depth this caster can trace.
        background: Color of rays that miss every entity, as (R, G, B).
        capacity: Number of rays that can be traced concurrently.
    """

    def __init__(
        self,
        scene: SceneData,
        max_depth: int = DEFAULT_MAX_DEPTH,
        background: Sequence[int] = BACKGROUND_COLOR,
        capacity: int = 1,
    ) -> None:
        """Allocate ray-tree scratch fields.

        Args:
            scene: Scene data to cast against.
            max_depth: Recursion bound in [0, MAX_TRACE_DEPTH].
            background: Background color as (R, G, B) in [0, 255].
            capacity: Number of scratch slots (concurrent rays), >= 1.

        Raises:
            ValueError: If any argument is out of range.
        """
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}")

        self.scene = scene
        self.max_depth = check_depth(max_depth)
        self.background = as_color(background)
        self.capacity = capacity
        self.num_nodes = tree_size(self.max_depth)

        self._background = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.set_background(self.background)

        shape = (capacity, self.num_nodes)
        self.node_state = ti.field(dtype=ti.i32, shape=shape)
        self.node_origin = ti.Vector.field(3, dtype=ti.f32, shape=shape)
        self.node_direction = ti.Vector.field(3, dtype=ti.f32, shape=shape)
        self.node_local = ti.Vector.field(3, dtype=ti.f32, shape=shape)
        self.node_weights = ti.Vector.field(2, dtype=ti.f32, shape=shape)
        self.node_color = ti.Vector.field(3, dtype=ti.f32, shape=shape)

        self._single_color = ti.Vector.field(3, dtype=ti.f32, shape=())

    def set_background(self, background: Sequence[int]) -> None:
        """Change the color of rays that escape the scene.

        Raises:
            ValueError: If background is not a valid RGB8 color.
        """
        self.background = as_color(background)
        self._background[None] = [float(c) for c in self.background]

    # =========================================================================
    # Shading
    # =========================================================================

    @ti.func
    def shade_local(self, point: vec3, normal: vec3, direction: vec3, material: ti.i32) -> vec3:
        """Compute the diffuse and specular part of a surface color.

        Every light is tested with a shadow ray from the offset hit point. A
        light is blocked when the nearest hit toward it is strictly closer
        than the light itself; blocked lights contribute nothing. Light
        intensity is used as-is, with no distance attenuation.

        Args:
            point: The hit point.
            normal: The unit surface normal at the hit point.
            direction: The unit direction of the incoming ray.
            material: Material ID of the hit entity.

        Returns:
            diffuse_color * diffuse * albedo[0] + 255 * specular * albedo[1]
            (unclamped).
        """
        diffuse = 0.0
        specular = 0.0
        exponent = self.scene.material_specular_exponent[material]

        for light in range(self.scene.num_lights[None]):
            to_light = self.scene.light_positions[light] - point
            light_distance = length(to_light)
            light_dir = normalize(to_light)

            shadow_origin = offset_origin(point, normal, light_dir)
            blocker, blocker_point = self.scene.nearest_hit(shadow_origin, light_dir)

            shadowed = 0
            if blocker >= 0:
                if length(blocker_point - shadow_origin) < light_distance:
                    shadowed = 1

            if shadowed == 0:
                intensity = self.scene.light_intensities[light]
                diffuse += intensity * tm.max(0.0, dot(light_dir, normal))
                highlight = tm.max(0.0, dot(-reflect(-light_dir, normal), direction))
                specular += intensity * highlight**exponent

        albedo = self.scene.material_albedo[material]
        diffuse_color = self.scene.material_diffuse[material]
        return diffuse_color * (diffuse * albedo[0]) + vec3(255.0, 255.0, 255.0) * (
            specular * albedo[1]
        )

    # =========================================================================
    # Ray Tree
    # =========================================================================

    @ti.func
    def _trace_node(self, slot: ti.i32, k: ti.i32, num_nodes: ti.i32):
        """Trace node k of a slot's tree and queue its secondary rays."""
        origin = self.node_origin[slot, k]
        direction = self.node_direction[slot, k]
        entity, point = self.scene.nearest_hit(origin, direction)

        if entity < 0:
            self.node_color[slot, k] = self._background[None]
            self.node_state[slot, k] = NODE_DONE
        else:
            material = self.scene.material_of(entity)
            normal = self.scene.normal_at(entity, point)
            albedo = self.scene.material_albedo[material]

            self.node_local[slot, k] = self.shade_local(point, normal, direction, material)
            self.node_weights[slot, k] = vec2(albedo[2], albedo[3])
            self.node_state[slot, k] = NODE_HIT

            left = 2 * k + 1
            right = 2 * k + 2
            if right < num_nodes:
                # Children with a zero blend weight are not traced
                if albedo[2] != 0.0:
                    reflect_dir = normalize(reflect(direction, normal))
                    self.node_origin[slot, left] = offset_origin(point, normal, reflect_dir)
                    self.node_direction[slot, left] = reflect_dir
                    self.node_state[slot, left] = NODE_PENDING
                else:
                    self.node_color[slot, left] = vec3(0.0, 0.0, 0.0)
                    self.node_state[slot, left] = NODE_DONE

                # Refraction child; total internal reflection contributes nothing
                refract_dir, refracted = refract(
                    direction, normal, self.scene.material_refractive_index[material]
                )
                if refracted == 1 and albedo[3] != 0.0:
                    self.node_origin[slot, right] = offset_origin(point, normal, refract_dir)
                    self.node_direction[slot, right] = refract_dir
                    self.node_state[slot, right] = NODE_PENDING
                else:
                    self.node_color[slot, right] = vec3(0.0, 0.0, 0.0)
                    self.node_state[slot, right] = NODE_DONE

    @ti.func
    def trace(self, slot: ti.i32, origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
        """Cast one ray with a recursion bound, using a scratch slot.

        Args:
            slot: Scratch slot index in [0, capacity).
            origin: Ray origin.
            direction: Ray direction (non-zero; normalized here).
            depth: Recursion bound in [0, max_depth]. Depth 0 shades the
                first hit without tracing any secondary ray.

        Returns:
            The RGB color with channels in [0, 255], already floored.
        """
        num_nodes = (1 << (depth + 1)) - 1

        for k in range(self.num_nodes):
            self.node_state[slot, k] = NODE_IDLE
        self.node_origin[slot, 0] = origin
        self.node_direction[slot, 0] = normalize(direction)
        self.node_state[slot, 0] = NODE_PENDING

        # Top-down: parents are always traced before their children
        for k in range(num_nodes):
            if self.node_state[slot, k] == NODE_PENDING:
                self._trace_node(slot, k, num_nodes)

        # Bottom-up: children are always composited before their parents
        background = self._background[None]
        for r in range(num_nodes):
            k = num_nodes - 1 - r
            if self.node_state[slot, k] == NODE_HIT:
                reflect_color = background
                refract_color = background
                if 2 * k + 2 < num_nodes:
                    reflect_color = self.node_color[slot, 2 * k + 1]
                    refract_color = self.node_color[slot, 2 * k + 2]
                weights = self.node_weights[slot, k]
                color = (
                    self.node_local[slot, k]
                    + reflect_color * weights[0]
                    + refract_color * weights[1]
                )
                self.node_color[slot, k] = ti.floor(tm.clamp(color, 0.0, 255.0))

        return self.node_color[slot, 0]

    # =========================================================================
    # Host API
    # =========================================================================

    @ti.kernel
    def _cast_single(
        self,
        ox: ti.f32,
        oy: ti.f32,
        oz: ti.f32,
        dx: ti.f32,
        dy: ti.f32,
        dz: ti.f32,
        depth: ti.i32,
    ):
        # Single-iteration outer loop keeps the ray-tree passes serial
        for _ in range(1):
            self._single_color[None] = self.trace(
                0, vec3(ox, oy, oz), vec3(dx, dy, dz), depth
            )

    def cast_ray(
        self,
        origin: Vector3 | Sequence[float],
        direction: Vector3 | Sequence[float],
        depth: int | None = None,
    ) -> tuple[int, int, int]:
        """Cast a single ray from Python and return its color.

        This is a Python-callable function for testing and picking. For
        production rendering use FrameGenerator, which traces all pixels of
        a band in parallel.

        Args:
            origin: Ray origin.
            direction: Ray direction (any non-zero length).
            depth: Recursion bound. Defaults to max_depth. A negative depth
                returns the background color without tracing.

        Returns:
            The (R, G, B) color, each channel in [0, 255].

        Raises:
            ValueError: If direction is the zero vector or depth exceeds
                max_depth.
        """
        d = Vector3.of(direction).normalize()
        o = Vector3.of(origin)
        if depth is None:
            depth = self.max_depth
        if depth < 0:
            return self.background
        if depth > self.max_depth:
            raise ValueError(f"Depth {depth} exceeds this caster's bound of {self.max_depth}")

        self._cast_single(o.x, o.y, o.z, d.x, d.y, d.z, depth)
        color = self._single_color[None]
        return (int(color[0]), int(color[1]), int(color[2]))
