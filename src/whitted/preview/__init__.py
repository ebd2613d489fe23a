"""Preview module for rendered output.

Components:
    export: PNG export and image comparison utilities (Pillow)

Example:
    >>> from whitted.preview import save_png
    >>> save_png(image, "output.png")
"""

from .export import check_buffer, compute_rmse, save_png, to_pil_image

__all__ = [
    "check_buffer",
    "compute_rmse",
    "save_png",
    "to_pil_image",
]
