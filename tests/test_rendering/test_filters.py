"""Tests for the canvas post-processing filters."""

import numpy as np
import pytest

from temsim.rendering.filters import (
    add_noise,
    apply_contrast,
    clip,
    clip_range,
    gaussian_blur,
    invert,
    new_canvas,
    quantise,
)


class TestGaussianBlur:
    @pytest.mark.parametrize("sigma", [0.0, -1.0, 0.3])
    def test_small_sigma_is_identity(self, sigma):
        canvas = np.arange(16, dtype=np.float32).reshape(4, 4)
        assert gaussian_blur(canvas, sigma) is canvas

    def test_spreads_a_point(self):
        canvas = np.zeros((21, 21), dtype=np.float32)
        canvas[10, 10] = 100.0
        blurred = gaussian_blur(canvas, 1.5)
        assert blurred[10, 10] < 100.0
        assert blurred[10, 11] > 0.0
        assert blurred.sum() == pytest.approx(100.0, rel=1e-4)
        np.testing.assert_allclose(blurred, blurred.T, atol=1e-6)

    def test_flat_canvas_unchanged(self):
        canvas = new_canvas((12, 8), 127.0)
        np.testing.assert_allclose(gaussian_blur(canvas, 2.0), 127.0, atol=1e-4)


class TestAddNoise:
    def test_zero_stddev_is_identity(self):
        canvas = new_canvas((4, 4), 127.0)
        assert add_noise(canvas, 0.0) is canvas

    def test_seeded_noise_is_reproducible(self):
        canvas = new_canvas((32, 32), 127.0)
        a = add_noise(canvas, 5.0, np.random.default_rng(7))
        b = add_noise(canvas, 5.0, np.random.default_rng(7))
        np.testing.assert_array_equal(a, b)

    def test_noise_statistics(self):
        noisy = add_noise(new_canvas((256, 256), 0.0), 5.0, np.random.default_rng(1))
        assert abs(noisy.mean()) < 0.2
        assert noisy.std() == pytest.approx(5.0, rel=0.05)


class TestPointOperations:
    def test_contrast_scales_deviation(self):
        canvas = np.array([[127.0, 137.0, 117.0]])
        np.testing.assert_allclose(apply_contrast(canvas, 2.0, 127.0), [[127.0, 147.0, 107.0]])

    def test_unit_contrast_is_identity(self):
        canvas = np.array([[1.0, 2.0]])
        assert apply_contrast(canvas, 1.0, 127.0) is canvas

    def test_invert_mirrors_about_background(self):
        canvas = np.array([[127.0, 100.0, 200.0]])
        np.testing.assert_allclose(invert(canvas, 127.0), [[127.0, 154.0, 54.0]])

    @pytest.mark.parametrize("low, high, expected", [
        (None, None, None),
        (10.0, None, (10.0, 255.0)),
        (None, 50.0, (0.0, 50.0)),
        (200.0, 50.0, (50.0, 200.0)),
    ])
    def test_clip_range(self, low, high, expected):
        assert clip_range(low, high) == expected

    def test_clip(self):
        canvas = np.array([[-10.0, 100.0, 300.0]])
        np.testing.assert_array_equal(clip(canvas, 20.0, 150.0), [[20.0, 100.0, 150.0]])
        assert clip(canvas, None, None) is canvas


class TestQuantise:
    def test_rounds_and_saturates(self):
        canvas = np.array([-5.0, 0.4, 0.6, 254.6, 300.0, np.nan, np.inf, -np.inf])
        out = quantise(canvas)
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out, [0, 0, 1, 255, 255, 0, 255, 0])
