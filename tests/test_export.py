"""Tests for image export.

Tests cover:
- Buffer validation (shape and dtype)
- Pillow conversion keeps size, mode and pixel order
- PNG files read back with the same pixels
- RMSE comparison helper
"""

import numpy as np
import pytest
from PIL import Image as PILImage

from whitted.preview import check_buffer, compute_rmse, save_png, to_pil_image


def gradient(height=4, width=6):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[..., 0] = np.arange(width, dtype=np.uint8) * 40
    image[..., 1] = (np.arange(height, dtype=np.uint8) * 60)[:, None]
    image[..., 2] = 7
    return image


class TestBufferValidation:
    """Tests for check_buffer."""

    def test_accepts_rgb8(self):
        image = gradient()
        assert check_buffer(image) is image

    @pytest.mark.parametrize("shape", [(4, 6), (4, 6, 4), (4, 6, 3, 1)])
    def test_rejects_wrong_shape(self, shape):
        with pytest.raises(ValueError, match="shape"):
            check_buffer(np.zeros(shape, dtype=np.uint8))

    def test_rejects_float_buffer(self):
        with pytest.raises(ValueError, match="uint8"):
            check_buffer(np.zeros((4, 6, 3), dtype=np.float32))


class TestPillowExport:
    """Tests for to_pil_image and save_png."""

    def test_to_pil_image(self):
        image = gradient()
        pil_image = to_pil_image(image)
        assert pil_image.mode == "RGB"
        assert pil_image.size == (6, 4)
        # Pillow indexes (x, y); row 0 is the top
        assert pil_image.getpixel((5, 3)) == (200, 180, 7)

    def test_save_png_round_trip(self, tmp_path):
        image = gradient()
        path = tmp_path / "frame.png"
        save_png(image, path)

        with PILImage.open(path) as loaded:
            assert loaded.format == "PNG"
            assert np.array_equal(np.asarray(loaded.convert("RGB")), image)

    def test_save_png_accepts_string_path(self, tmp_path):
        path = tmp_path / "frame.png"
        save_png(gradient(), str(path))
        assert path.exists()

    def test_save_png_rejects_bad_buffer(self, tmp_path):
        with pytest.raises(ValueError):
            save_png(np.zeros((4, 6), dtype=np.uint8), tmp_path / "bad.png")


class TestRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        assert compute_rmse(gradient(), gradient()) == 0.0

    def test_constant_offset(self):
        a = np.zeros((2, 2, 3), dtype=np.uint8)
        b = np.full((2, 2, 3), 3, dtype=np.uint8)
        assert compute_rmse(a, b) == pytest.approx(3.0)

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(gradient(4, 6), gradient(6, 4))
