"""Frame generator: renders a full image band by band.

This module drives the ray caster over a raster:
- One primary ray per pixel, through the pixel center
- Pixels are traced in parallel inside a band of scanlines
- Bands are launched one after another so a render can be cancelled and
  can report progress between launches

Each pixel of a band owns one ray-tree scratch slot of the caster, so band
height is chosen to keep the scratch storage under NODE_BUDGET nodes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from whitted.config import RenderConfig
    >>> from whitted.core.frame import render_scene
    >>> from whitted.scene.demo import create_demo_scene
    >>>
    >>> def progress(rows_done, total_rows):
    ...     print(f"{rows_done}/{total_rows} rows")
    >>> image = render_scene(create_demo_scene(), RenderConfig(), callback=progress)
    >>> image.shape
    (768, 1024, 3)
"""

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.camera.pinhole import PinholeCamera, camera_ray_direction
from whitted.config import RenderConfig
from whitted.core.caster import (
    BACKGROUND_COLOR,
    DEFAULT_MAX_DEPTH,
    WhittedCaster,
    as_color,
    check_depth,
    tree_size,
)
from whitted.core.vector import Vector3
from whitted.scene.intersection import SceneData
from whitted.scene.light import Light
from whitted.scene.scene import Scene

logger = logging.getLogger(__name__)

# Upper bound on ray-tree nodes allocated for one band
NODE_BUDGET = 1 << 19

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class CancelEvent(Protocol):
    """Anything with an is_set() method, such as threading.Event."""

    def is_set(self) -> bool: ...


class RenderCancelled(RuntimeError):
    """Raised when a render is cancelled between bands."""


def band_rows(width: int, height: int, max_depth: int) -> int:
    """Number of scanlines per band for a raster and recursion depth.

    Returns:
        A row count in [1, height].
    """
    rows = NODE_BUDGET // (width * tree_size(max_depth))
    return max(1, min(height, rows))


@ti.data_oriented
class FrameGenerator:
    """Renders a scene through a pinhole camera into an RGB8 image field.

    Attributes:
        camera: The camera the frame is viewed through.
        caster: The ray caster, with one scratch slot per pixel of a band.
        rows_per_band: Scanlines traced per kernel launch.
        image: Output field of shape (height, width), 3 x u8 per pixel.
    """

    def __init__(
        self,
        scene: SceneData,
        camera: PinholeCamera,
        max_depth: int = DEFAULT_MAX_DEPTH,
        background: Sequence[int] = BACKGROUND_COLOR,
        rows_per_band: int | None = None,
    ) -> None:
        """Allocate the output image and ray-tree scratch storage.

        Args:
            scene: Uploaded scene data.
            camera: Camera configuration.
            max_depth: Recursion bound in [0, MAX_TRACE_DEPTH].
            background: Background color as (R, G, B).
            rows_per_band: Band height override. Defaults to the largest
                height that fits NODE_BUDGET.

        Raises:
            ValueError: If max_depth, background or rows_per_band is invalid.
        """
        if rows_per_band is None:
            rows_per_band = band_rows(camera.width, camera.height, max_depth)
        if rows_per_band < 1:
            raise ValueError(f"Rows per band must be at least 1, got {rows_per_band}")

        self.width = camera.width
        self.height = camera.height
        self.rows_per_band = min(rows_per_band, camera.height)

        self.caster = WhittedCaster(
            scene,
            max_depth=max_depth,
            background=background,
            capacity=self.rows_per_band * self.width,
        )

        self._eye = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._tan_half_fov = ti.field(dtype=ti.f32, shape=())
        self.image = ti.Vector.field(3, dtype=ti.u8, shape=(self.height, self.width))
        self.set_view(camera)

    def set_view(self, camera: PinholeCamera) -> None:
        """Move the eye and change the field of view.

        Raises:
            ValueError: If the camera's image size differs from this generator's.
        """
        if (camera.width, camera.height) != (self.width, self.height):
            raise ValueError(
                f"Camera is {camera.width}x{camera.height}, "
                f"generator is {self.width}x{self.height}"
            )
        self.camera = camera
        self._eye[None] = list(camera.eye)
        self._tan_half_fov[None] = camera.tan_half_fov

    @property
    def scene(self) -> SceneData:
        return self.caster.scene

    @property
    def max_depth(self) -> int:
        return self.caster.max_depth

    @property
    def num_bands(self) -> int:
        return -(-self.height // self.rows_per_band)

    @ti.kernel
    def _render_band(self, row_start: ti.i32, row_count: ti.i32):
        # Outermost loop is parallel: one iteration per pixel of the band
        for slot in range(row_count * self.width):
            row = row_start + slot // self.width
            col = slot % self.width
            direction = camera_ray_direction(
                col, row, self.width, self.height, self._tan_half_fov[None]
            )
            color = self.caster.trace(slot, self._eye[None], direction, self.caster.max_depth)
            self.image[row, col] = ti.cast(color, ti.u8)

    def render(
        self,
        cancel: CancelEvent | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render every band and return the image.

        Args:
            cancel: Optional event checked before each band.
            callback: Optional callback invoked after each band with
                (rows_done, total_rows).

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8, row 0
            at the top.

        Raises:
            RenderCancelled: If cancel is set before a band starts.
        """
        logger.debug(
            "Rendering %dx%d at depth %d in %d bands of %d rows",
            self.width,
            self.height,
            self.max_depth,
            self.num_bands,
            self.rows_per_band,
        )
        start = time.perf_counter()

        row = 0
        while row < self.height:
            if cancel is not None and cancel.is_set():
                logger.debug("Render cancelled at row %d of %d", row, self.height)
                raise RenderCancelled(f"Render cancelled at row {row} of {self.height}")

            count = min(self.rows_per_band, self.height - row)
            self._render_band(row, count)
            row += count

            logger.debug("Band done: %d/%d rows", row, self.height)
            if callback is not None:
                callback(row, self.height)

        image = self.image.to_numpy()
        logger.info(
            "Rendered %dx%d image in %.3f s", self.width, self.height, time.perf_counter() - start
        )
        return image

    def __repr__(self) -> str:
        return (
            f"FrameGenerator(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, rows_per_band={self.rows_per_band})"
        )


# One generator per (width, height, max_depth), reused by render() and render_scene()
_generators: dict[tuple[int, int, int], FrameGenerator] = {}


def cached_generator(
    scene: Scene,
    camera: PinholeCamera,
    max_depth: int = DEFAULT_MAX_DEPTH,
    background: Sequence[int] = BACKGROUND_COLOR,
) -> FrameGenerator:
    """Return a generator for the camera's raster and depth, loaded with a scene.

    The first call for a (width, height, max_depth) key allocates fields and
    compiles kernels. Later calls upload the new scene, camera position and
    background into the same fields, so repeated renders neither grow memory
    nor recompile. A scene larger than the cached capacity replaces the entry
    with a bigger one.

    Raises:
        ValueError: If max_depth or background is invalid.
    """
    key = (camera.width, camera.height, check_depth(max_depth))
    background = as_color(background)
    generator = _generators.get(key)

    if generator is not None and generator.scene.fits(scene):
        generator.scene.load(scene)
        generator.set_view(camera)
        generator.caster.set_background(background)
        return generator

    if generator is None:
        data = SceneData(scene)
    else:
        old = generator.scene
        data = SceneData(scene, old.max_spheres, old.max_triangles, old.max_lights)
    logger.debug("Allocating frame generator for %dx%d at depth %d", *key)
    generator = FrameGenerator(data, camera, max_depth, background)
    _generators[key] = generator
    return generator


def clear_generator_cache() -> None:
    """Forget cached generators.

    Call after ti.reset() or a second ti.init(): the cached fields belong to
    the previous Taichi runtime.
    """
    _generators.clear()


def render(
    entities: Iterable,
    lights: Iterable[Light],
    width: int,
    height: int,
    fov: float,
    max_depth: int = DEFAULT_MAX_DEPTH,
    background: Sequence[int] = BACKGROUND_COLOR,
    *,
    eye: Vector3 | Sequence[float] = (0.0, 0.0, 0.0),
    cancel: CancelEvent | None = None,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.uint8]:
    """Render entities and lights into an RGB8 image.

    Taichi must already be initialized with ti.init().

    Args:
        entities: Spheres and triangles, in scene order.
        lights: Point lights.
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal field of view in degrees.
        max_depth: Recursion bound in [0, MAX_TRACE_DEPTH].
        background: Color of rays that escape the scene, as (R, G, B).
        eye: Camera position; the camera looks down -z.
        cancel: Optional event checked between bands.
        callback: Optional progress callback, see FrameGenerator.render().

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8.

    Raises:
        ValueError: If any size, angle, depth or color is out of range.
        TypeError: If an entity or light has the wrong type.
        RenderCancelled: If cancel fires before the last band.
    """
    camera = PinholeCamera(width=width, height=height, hfov=fov, eye=Vector3.of(eye))
    scene = Scene(entities=tuple(entities), lights=tuple(lights))
    generator = cached_generator(scene, camera, max_depth, background)
    return generator.render(cancel=cancel, callback=callback)


def render_scene(
    scene: Scene,
    config: RenderConfig,
    *,
    cancel: CancelEvent | None = None,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a Scene with the settings of a RenderConfig.

    Args:
        scene: The scene to render.
        config: Image size, camera, depth and background settings.
        cancel: Optional event checked between bands.
        callback: Optional progress callback.

    Returns:
        NumPy array of shape (config.height, config.width, 3), dtype uint8.
    """
    generator = cached_generator(scene, config.camera(), config.max_depth, config.background)
    return generator.render(cancel=cancel, callback=callback)
