"""Crystallographic helpers: cell vectors, fractional/cartesian maps, minimum image.

Pure math with no domain state.  Basis matrices are ``(3, 3)`` arrays
whose rows are the lattice vectors **a**, **b**, **c**.
"""

from __future__ import annotations

import numpy as np

_DEGENERATE_DET = 1e-10


def cell_vectors(
    a: float,
    b: float,
    c: float,
    alpha: float = 90.0,
    beta: float = 90.0,
    gamma: float = 90.0,
) -> np.ndarray:
    """Build lattice vectors from cell parameters.

    Uses the standard crystallographic convention: **a** along x,
    **b** in the xy-plane, **c** completed from the angle relations.
    The z component of **c** is clamped at zero before the square
    root so that numerical noise on near-planar cells cannot produce
    a NaN.

    Args:
        a: Length of **a** in angstroms.
        b: Length of **b** in angstroms.
        c: Length of **c** in angstroms.
        alpha: Angle between **b** and **c** in degrees.
        beta: Angle between **a** and **c** in degrees.
        gamma: Angle between **a** and **b** in degrees.

    Returns:
        Basis matrix of shape ``(3, 3)`` with the vectors as rows.
    """
    ar, br, gr = np.radians([alpha, beta, gamma])

    vx = [a, 0.0, 0.0]
    vy = [b * np.cos(gr), b * np.sin(gr), 0.0]

    cx = c * np.cos(br)
    cy = c * (np.cos(ar) - np.cos(br) * np.cos(gr)) / max(1e-12, np.sin(gr))
    cz = np.sqrt(max(0.0, c * c - cx * cx - cy * cy))

    return np.array([vx, vy, [cx, cy, cz]], dtype=float)


def frac_to_cart(frac: np.ndarray, basis: np.ndarray) -> np.ndarray:
    """Convert fractional coordinates to cartesian.

    *frac* may be a single ``(3,)`` vector or an ``(..., 3)`` array.
    """
    return np.asarray(frac, dtype=float) @ np.asarray(basis, dtype=float)


def tile_shift(ix: int, iy: int, iz: int, basis: np.ndarray) -> np.ndarray:
    """Cartesian translation for the periodic tile ``(ix, iy, iz)``."""
    return frac_to_cart(np.array([ix, iy, iz], dtype=float), basis)


def inverse_basis(basis: np.ndarray) -> np.ndarray | None:
    """Invert a basis matrix with the triple-product formula.

    The rows of the result are ``(b x c)/det``, ``(c x a)/det`` and
    ``(a x b)/det``, so that ``inv @ v`` gives the fractional
    coordinates of the cartesian vector ``v``.

    Returns:
        The ``(3, 3)`` inverse, or ``None`` when the basis contains
        non-finite values or its determinant is effectively zero.
    """
    basis = np.asarray(basis, dtype=float)
    if basis.shape != (3, 3) or not np.all(np.isfinite(basis)):
        return None

    a, b, c = basis
    bxc = np.cross(b, c)
    cxa = np.cross(c, a)
    axb = np.cross(a, b)
    det = float(np.dot(a, bxc))

    if not np.isfinite(det) or abs(det) < _DEGENERATE_DET:
        return None
    return np.array([bxc, cxa, axb]) / det


def minimum_image(displacement: np.ndarray, basis: np.ndarray | None) -> np.ndarray:
    """Apply the minimum image convention to cartesian displacements.

    Each fractional component is reduced by its nearest integer
    (halves round up), which wraps it into ``[-0.5, 0.5)``, and the
    result is mapped back to cartesian space.

    Args:
        displacement: A ``(3,)`` vector or an ``(..., 3)`` array.
        basis: Lattice vectors as rows, or ``None``.

    Returns:
        The wrapped displacement(s).  When *basis* is ``None`` or
        degenerate the input is returned unchanged: periodic handling
        is disabled rather than raising.
    """
    displacement = np.asarray(displacement, dtype=float)
    if basis is None:
        return displacement
    inv = inverse_basis(basis)
    if inv is None:
        return displacement

    frac = displacement @ inv.T
    frac = frac - np.floor(frac + 0.5)
    return frac @ np.asarray(basis, dtype=float)
