"""Projection of atom positions onto the pixel grid."""

from __future__ import annotations

import numpy as np

from temsim.model import Atoms


def round_half_up(values: np.ndarray | float) -> np.ndarray:
    """Round to the nearest integer, with halves rounded towards +inf.

    :func:`numpy.rint` rounds halves to even, which would make the
    pixel an atom lands on depend on the parity of its coordinate.
    """
    return np.floor(np.asarray(values, dtype=float) + 0.5)


def compute_pixel_coords(
    atoms: Atoms,
    image_size: tuple[int, int],
    angstroms_per_pixel: float,
) -> tuple[np.ndarray, float]:
    """Project atoms orthographically along z onto the image plane.

    The x/y centroid of the finite atoms is mapped to the image centre
    ``(W // 2, H // 2)`` and each atom to
    ``round((coord - centroid) / angstroms_per_pixel + centre)``.
    Pixel x runs along columns, pixel y along rows.

    Args:
        atoms: Atoms to project.
        image_size: ``(height, width)`` in pixels.
        angstroms_per_pixel: Physical size of one pixel.

    Returns:
        Tuple of ``(pixels, scale)``.  *pixels* has shape
        ``(n_atoms, 2)`` holding integral ``(x, y)`` values as floats,
        with NaN rows for atoms that have non-finite coordinates.
        *scale* is pixels per angstrom.
    """
    height, width = image_size
    scale = 1.0 / max(angstroms_per_pixel, 1e-9)
    pixels = np.full((len(atoms), 2), np.nan)

    finite = atoms.finite
    if not finite.any():
        return pixels, scale

    xy = atoms.coords[finite, :2]
    centroid = xy.mean(axis=0)
    centre = np.array([width // 2, height // 2], dtype=float)
    pixels[finite] = round_half_up((xy - centroid) * scale + centre)
    return pixels, scale
