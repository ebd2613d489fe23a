"""Unit tests for the pinhole camera.

Tests cover:
- Camera validation (image size, field of view)
- Pixel-center ray directions (center, corners, orientation)
- Agreement between the host and kernel ray direction routines
"""

import math

import pytest
import taichi as ti

from whitted.camera import PinholeCamera, make_camera
from whitted.core.vector import Vector3


class TestCameraConfig:
    """Tests for camera construction."""

    def test_defaults(self):
        camera = PinholeCamera(width=640, height=480, hfov=90.0)
        assert camera.eye == Vector3.zero()
        assert camera.aspect_ratio == pytest.approx(4.0 / 3.0)
        assert camera.tan_half_fov == pytest.approx(1.0)

    def test_make_camera_coerces_eye(self):
        camera = make_camera(10, 10, 60.0, eye=(1, 2, 3))
        assert camera.eye == Vector3(1.0, 2.0, 3.0)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 10)])
    def test_invalid_size_raises(self, width, height):
        with pytest.raises(ValueError, match="Image size"):
            PinholeCamera(width=width, height=height, hfov=60.0)

    @pytest.mark.parametrize("hfov", [0.0, 180.0, -10.0, 200.0])
    def test_invalid_fov_raises(self, hfov):
        with pytest.raises(ValueError, match="Field of view"):
            PinholeCamera(width=10, height=10, hfov=hfov)


class TestRayDirections:
    """Tests for pixel-center ray directions."""

    def test_single_pixel_looks_forward(self):
        camera = PinholeCamera(width=1, height=1, hfov=60.0)
        d = camera.ray_direction(0, 0)
        assert d.z == pytest.approx(-1.0)
        assert abs(d.x) < 1e-12 and abs(d.y) < 1e-12

    def test_top_left_points_up_and_left(self):
        """Row 0 is the top of the image."""
        camera = PinholeCamera(width=4, height=3, hfov=90.0)
        d = camera.ray_direction(0, 0)
        assert d.x < 0.0
        assert d.y > 0.0
        assert d.z < 0.0

    def test_bottom_right_points_down_and_right(self):
        camera = PinholeCamera(width=4, height=3, hfov=90.0)
        d = camera.ray_direction(3, 2)
        assert d.x > 0.0
        assert d.y < 0.0

    def test_horizontal_extent_matches_fov(self):
        """The pixel-center offsets follow tan(hfov / 2) horizontally."""
        camera = PinholeCamera(width=2, height=2, hfov=90.0)
        d = camera.ray_direction(1, 0)
        # x = 0.5 * tan(45), y = 0.5 * tan(45) * H / W, z = -1
        expected = Vector3(0.5, 0.5, -1.0).normalize()
        assert d.x == pytest.approx(expected.x)
        assert d.y == pytest.approx(expected.y)
        assert d.z == pytest.approx(expected.z)

    def test_directions_are_unit(self):
        camera = PinholeCamera(width=7, height=5, hfov=72.0)
        for i, j in [(0, 0), (6, 4), (3, 2), (1, 3)]:
            assert math.isclose(camera.ray_direction(i, j).length(), 1.0, rel_tol=1e-12)

    def test_kernel_matches_host(self):
        from whitted.camera.pinhole import camera_ray_direction

        camera = PinholeCamera(width=8, height=6, hfov=72.0)
        result = ti.Vector.field(3, dtype=ti.f32, shape=(6, 8))

        @ti.kernel
        def test_kernel(tan_half_fov: ti.f32):
            for j, i in result:
                result[j, i] = camera_ray_direction(i, j, 8, 6, tan_half_fov)

        test_kernel(camera.tan_half_fov)
        for i, j in [(0, 0), (7, 5), (4, 2), (2, 4)]:
            expected = camera.ray_direction(i, j)
            got = result[j, i]
            assert abs(got[0] - expected.x) < 1e-5
            assert abs(got[1] - expected.y) < 1e-5
            assert abs(got[2] - expected.z) < 1e-5
