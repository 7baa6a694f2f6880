"""Post-processing filters applied to the float canvas."""

from __future__ import annotations

import math

import numpy as np
from scipy.ndimage import gaussian_filter


def new_canvas(image_size: tuple[int, int], background: float) -> np.ndarray:
    """A float32 canvas of shape *image_size* filled with *background*."""
    return np.full(image_size, background, dtype=np.float32)


def gaussian_blur(canvas: np.ndarray, sigma: float) -> np.ndarray:
    """Separable Gaussian blur with edge-clamped borders.

    The kernel is truncated at ``floor(3 * sigma)`` pixels.  Sigmas
    too small to give a kernel wider than one pixel (and non-positive
    sigmas) return the canvas unchanged.
    """
    if not sigma > 0:
        return canvas
    radius = int(math.floor(3.0 * sigma))
    if radius < 1:
        return canvas
    return gaussian_filter(canvas, sigma=sigma, mode="nearest", radius=radius)


def add_noise(
    canvas: np.ndarray,
    stddev: float,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Add zero-mean Gaussian noise of the given standard deviation."""
    if stddev <= 0:
        return canvas
    rng = rng if rng is not None else np.random.default_rng()
    return canvas + stddev * rng.standard_normal(canvas.shape, dtype=np.float32)


def apply_contrast(canvas: np.ndarray, contrast: float, background: float) -> np.ndarray:
    """Scale deviations from *background* by *contrast*."""
    if contrast == 1.0:
        return canvas
    return (canvas - background) * contrast + background


def invert(canvas: np.ndarray, background: float) -> np.ndarray:
    """Mirror intensities around *background*."""
    return 2.0 * background - canvas


def clip_range(
    low: float | None, high: float | None,
) -> tuple[float, float] | None:
    """Resolve optional clip bounds to an ordered ``(low, high)`` pair.

    ``None`` when neither bound is set.  A missing bound defaults to
    ``0`` (low) or ``255`` (high); reversed bounds are swapped.
    """
    if low is None and high is None:
        return None
    lo = 0.0 if low is None else float(low)
    hi = 255.0 if high is None else float(high)
    return (min(lo, hi), max(lo, hi))


def clip(canvas: np.ndarray, low: float | None, high: float | None) -> np.ndarray:
    """Clip intensities to the bounds given by :func:`clip_range`."""
    bounds = clip_range(low, high)
    if bounds is None:
        return canvas
    return np.clip(canvas, bounds[0], bounds[1])


def quantise(canvas: np.ndarray) -> np.ndarray:
    """Round to the nearest integer and saturate to ``uint8``.

    Non-finite values are mapped to ``0`` (NaN), ``0`` (-inf) or
    ``255`` (+inf).
    """
    values = np.nan_to_num(canvas, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)
