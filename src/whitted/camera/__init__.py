"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with a horizontal field of view

Ray generation maps pixel coordinates to directions:
    column i in [0, W): left to right across the image
    row j in [0, H): top to bottom across the image

The host PinholeCamera validates configuration; camera_ray_direction() is the
Taichi function the frame generator calls for every pixel.
"""

from .pinhole import PinholeCamera, camera_ray_direction, make_camera

__all__ = [
    "PinholeCamera",
    "make_camera",
    "camera_ray_direction",
]
