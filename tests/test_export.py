"""Tests for image quantization and file export."""

import numpy as np
import pytest
from PIL import Image


class TestQuantization:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.0, 0), (0.25, 128), (1.0, 255), (4.0, 255), (-1.0, 0)],
    )
    def test_image_to_uint8(self, value, expected):
        from spheretracer.output.export import image_to_uint8

        image = np.full((1, 1, 3), value, dtype=np.float32)
        assert image_to_uint8(image)[0, 0, 0] == expected

    def test_gamma_correct_is_square_root(self):
        from spheretracer.output.export import gamma_correct

        image = np.array([[[0.0, 0.04, 0.81]]], dtype=np.float32)
        np.testing.assert_allclose(gamma_correct(image), [[[0.0, 0.2, 0.9]]], atol=1e-6)


class TestPPM:
    def test_format(self):
        from spheretracer.output.export import format_ppm

        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)
        image[1, 2] = (1, 2, 3)

        lines = format_ppm(image).split("\n")
        assert lines[:3] == ["P3", "3 2", "255"]
        assert lines[3] == "255 0 0"
        assert lines[8] == "1 2 3"
        # One line per pixel plus the header and a trailing newline
        assert len(lines) == 3 + 6 + 1
        assert lines[-1] == ""

    def test_rejects_bad_shape(self):
        from spheretracer.output.export import format_ppm

        with pytest.raises(ValueError):
            format_ppm(np.zeros((4, 4), dtype=np.uint8))

    def test_write_ppm(self, tmp_path):
        from spheretracer.output.export import write_ppm

        path = tmp_path / "out.ppm"
        write_ppm(np.full((2, 2, 3), 7, dtype=np.uint8), path)
        assert path.read_text().startswith("P3\n2 2\n255\n7 7 7\n")


class TestSaveImage:
    def test_png_round_trip(self, tmp_path):
        from spheretracer.output.export import image_to_uint8, save_image

        rng = np.random.default_rng(0)
        image = rng.random((5, 7, 3)).astype(np.float32)
        path = tmp_path / "out.png"
        save_image(image, path)

        with Image.open(path) as png:
            assert png.size == (7, 5)
            np.testing.assert_array_equal(np.asarray(png), image_to_uint8(image))

    def test_ppm_by_suffix(self, tmp_path):
        from spheretracer.output.export import save_image

        path = tmp_path / "OUT.PPM"
        save_image(np.zeros((2, 2, 3), dtype=np.float32), path)
        assert path.read_text().startswith("P3\n")

    def test_unknown_suffix(self, tmp_path):
        from spheretracer.output.export import save_image

        with pytest.raises(ValueError, match="Unsupported image format"):
            save_image(np.zeros((2, 2, 3), dtype=np.float32), tmp_path / "out.bmp")


class TestRMSE:
    def test_identical_images(self):
        from spheretracer.output.export import compute_rmse

        image = np.ones((3, 3, 3), dtype=np.float32)
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from spheretracer.output.export import compute_rmse

        a = np.zeros((2, 2, 3), dtype=np.float32)
        b = np.full((2, 2, 3), 0.5, dtype=np.float32)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from spheretracer.output.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
