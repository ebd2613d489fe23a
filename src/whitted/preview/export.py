"""Image export utilities for rendered frames.

The frame generator produces (height, width, 3) uint8 arrays with row 0 at
the top. This module hands them to Pillow; the renderer itself never
imports Pillow.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.config import RenderConfig
    >>> from whitted.core.frame import render_scene
    >>> from whitted.preview.export import save_png
    >>> from whitted.scene.demo import create_demo_scene
    >>>
    >>> image = render_scene(create_demo_scene(), RenderConfig(width=320, height=240))
    >>> save_png(image, "out.png")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def check_buffer(buffer: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Validate a rendered frame buffer.

    Raises:
        ValueError: If the buffer is not a (H, W, 3) uint8 array.
    """
    buffer = np.asarray(buffer)
    if buffer.ndim != 3 or buffer.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {buffer.shape}")
    if buffer.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {buffer.dtype}")
    return buffer


def to_pil_image(buffer: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a rendered frame in an RGB Pillow image.

    Args:
        buffer: Image array of shape (H, W, 3) with dtype uint8.

    Returns:
        A Pillow image of size (W, H) in RGB mode.
    """
    buffer = check_buffer(buffer)
    return PILImage.fromarray(np.ascontiguousarray(buffer))


def save_png(buffer: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save a rendered frame as an 8-bit RGB PNG.

    Args:
        buffer: Image array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the buffer has the wrong shape or dtype.
    """
    to_pil_image(buffer).save(filepath, format="PNG")


def compute_rmse(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
) -> float:
    """Compute root mean squared error between two frames.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value in channel units (0 for identical frames).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
