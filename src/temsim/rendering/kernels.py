"""Analytic intensity kernels for atoms and bonds.

All functions draw into a caller-owned float canvas of shape ``(H, W)``
in place.  Kernel footprints are clipped to the canvas; atoms and bonds
with non-finite pixel positions, or atomic numbers below 1, are skipped.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import numpy as np

from temsim.elements import DEFAULT_PROVIDER, ChemistryProvider, resolve_radius
from temsim.model import Bond, BondOrder, RenderConfig
from temsim.rendering.projection import round_half_up

logger = logging.getLogger(__name__)

# Line contributions at or below these values are dropped.
_LINE_FLOOR = 0.25
_GLOW_FLOOR = 0.5
_GLOW_SCALE = 0.85


def _patch(
    canvas: np.ndarray, x0: int, y0: int, radius: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray] | None:
    """Clipped square window around ``(x0, y0)``.

    Returns ``(view, dx, dy)`` where *view* is a writable slice of the
    canvas and *dx*/*dy* the column/row offsets from the centre, or
    ``None`` when the window misses the canvas entirely.
    """
    h, w = canvas.shape
    xlo, xhi = max(0, x0 - radius), min(w - 1, x0 + radius)
    ylo, yhi = max(0, y0 - radius), min(h - 1, y0 + radius)
    if xlo > xhi or ylo > yhi:
        return None
    view = canvas[ylo:yhi + 1, xlo:xhi + 1]
    dx = np.arange(xlo, xhi + 1) - x0
    dy = np.arange(ylo, yhi + 1) - y0
    return view, dx, dy


def atom_sigma(radius: float, scale: float, config: RenderConfig) -> float:
    """Gaussian width (pixels) of an atom's dark body."""
    return max(
        1e-6,
        radius ** config.atom_size_exponent * scale * config.atom_size_multiplier,
    )


def draw_atoms(
    canvas: np.ndarray,
    numbers: np.ndarray,
    pixels: np.ndarray,
    scale: float,
    config: RenderConfig,
    *,
    provider: ChemistryProvider | None = None,
    visible: np.ndarray | None = None,
) -> int:
    """Draw atoms as dark Gaussian bodies with a bright additive core.

    The body ``background + I * exp(-d^2 / 2 sigma^2)`` with
    ``I = -Z**atom_dark_exponent * atom_dark_multiplier`` is composited
    by pointwise minimum, so overlapping atoms do not darken each other
    beyond the darker of the two.  The core, ``core_sigma_relative``
    times narrower, is then added with intensity
    ``Z**atom_dark_exponent * core_relative / (1 + (Z / core_z0)**2)``;
    the falloff keeps heavy atoms from all showing the same white dot.

    Args:
        canvas: Float canvas, modified in place.
        numbers: Atomic numbers, shape ``(n,)``.
        pixels: Pixel positions from
            :func:`~temsim.rendering.projection.compute_pixel_coords`.
        scale: Pixels per angstrom.
        config: Kernel shaping constants and background level.
        provider: Source of covalent radii.
        visible: Optional boolean mask of atoms to draw.

    Returns:
        The number of atoms drawn.
    """
    provider = provider if provider is not None else DEFAULT_PROVIDER
    bg = config.background_gray
    drawn = 0

    for i, (z, (px, py)) in enumerate(zip(numbers, pixels)):
        if visible is not None and not visible[i]:
            continue
        if not (math.isfinite(px) and math.isfinite(py)):
            continue
        z = int(z)
        if z < 1:
            continue
        x0, y0 = int(px), int(py)

        sigma = atom_sigma(resolve_radius(provider, z), scale, config)
        base_z = z ** config.atom_dark_exponent
        intensity = -base_z * config.atom_dark_multiplier

        patch = _patch(canvas, x0, y0, math.ceil(3.0 * sigma))
        if patch is None:
            continue
        view, dx, dy = patch
        d2 = dy[:, np.newaxis] ** 2 + dx[np.newaxis, :] ** 2
        body = bg + intensity * np.exp(-d2 / (2.0 * sigma * sigma))
        np.minimum(view, body, out=view)
        drawn += 1

        core_sigma = sigma * config.core_sigma_relative
        falloff = 1.0 / (1.0 + (z / config.core_z0) ** 2)
        core_intensity = base_z * config.core_relative * falloff
        patch = _patch(canvas, x0, y0, math.ceil(3.0 * core_sigma))
        if patch is None:
            continue
        view, dx, dy = patch
        d2 = dy[:, np.newaxis] ** 2 + dx[np.newaxis, :] ** 2
        view += core_intensity * np.exp(-d2 / (2.0 * core_sigma * core_sigma))

    return drawn


def _stamp(
    canvas: np.ndarray,
    centres: np.ndarray,
    kernel: np.ndarray,
    radius: int,
) -> None:
    """Add *kernel* at every row of *centres*, accumulating overlaps."""
    h, w = canvas.shape
    offsets = np.arange(-radius, radius + 1)
    sy, sx = np.meshgrid(offsets, offsets, indexing="ij")
    weights = kernel.ravel()
    keep = weights != 0.0
    sx, sy, weights = sx.ravel()[keep], sy.ravel()[keep], weights[keep]

    xs = (centres[:, 0:1] + sx[np.newaxis, :]).ravel()
    ys = (centres[:, 1:2] + sy[np.newaxis, :]).ravel()
    vals = np.broadcast_to(weights, (len(centres), len(weights))).ravel()
    inside = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
    np.add.at(canvas, (ys[inside], xs[inside]), vals[inside])


def draw_gaussian_line(
    canvas: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    intensity: float,
    halfwidth: float,
) -> None:
    """Add a raised-cosine line profile between two pixel positions.

    The endpoints are rounded, then the line is sampled at unit steps.
    At each step every pixel within the half width of the axis gets
    ``intensity * cos(pi/2 * d/halfwidth)**2``, where *d* is its
    perpendicular distance.  Contributions of 0.25 or less are dropped.
    """
    x1, y1 = round_half_up(p1)
    x2, y2 = round_half_up(p2)
    dx, dy = x2 - x1, y2 - y1
    length = int(math.hypot(dx, dy))
    if length <= 0:
        return

    ux, uy = dx / length, dy / length
    nx, ny = -uy, ux
    radius = math.ceil(halfwidth)

    offsets = np.arange(-radius, radius + 1, dtype=float)
    sy, sx = np.meshgrid(offsets, offsets, indexing="ij")
    s = np.abs(sx * nx + sy * ny) / max(halfwidth, 1e-6)
    kernel = intensity * np.cos(0.5 * np.pi * np.minimum(s, 1.0)) ** 2
    kernel[(s > 1.0) | (kernel <= _LINE_FLOOR)] = 0.0

    steps = np.arange(length + 1)
    centres = np.column_stack([
        round_half_up(x1 + ux * steps), round_half_up(y1 + uy * steps),
    ]).astype(int)
    _stamp(canvas, centres, kernel, radius)


def draw_glow_line(
    canvas: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    intensity: float,
    sigma: float,
) -> None:
    """Add an isotropic Gaussian halo along a line.

    Kernel support is ``max(1, floor(3 sigma))``; contributions of 0.5
    or less are dropped.
    """
    x1, y1 = round_half_up(p1)
    x2, y2 = round_half_up(p2)
    dx, dy = x2 - x1, y2 - y1
    length = int(math.hypot(dx, dy))
    if length == 0:
        return

    radius = max(1, math.floor(3.0 * sigma))
    offsets = np.arange(-radius, radius + 1, dtype=float)
    sy, sx = np.meshgrid(offsets, offsets, indexing="ij")
    kernel = intensity * np.exp(-(sx * sx + sy * sy) / (2.0 * sigma * sigma))
    kernel[kernel <= _GLOW_FLOOR] = 0.0

    steps = np.arange(length + 1)
    centres = np.column_stack([
        round_half_up(x1 + dx * steps / length),
        round_half_up(y1 + dy * steps / length),
    ]).astype(int)
    _stamp(canvas, centres, kernel, radius)


def line_offsets(order: int, direction: np.ndarray, offset_base: float) -> list[np.ndarray]:
    """Perpendicular displacements of the parallel lines of a bond.

    One centred line for single and aromatic bonds, two at
    ``+/- offset_base`` for double bonds, and three (centre and
    ``+/- 1.2 * offset_base``) for triple bonds.
    """
    length = math.hypot(direction[0], direction[1]) or 1.0
    normal = np.array([-direction[1], direction[0]]) / length
    if order == BondOrder.DOUBLE:
        return [normal * offset_base, -normal * offset_base]
    if order == BondOrder.TRIPLE:
        return [normal * 1.2 * offset_base, np.zeros(2), -normal * 1.2 * offset_base]
    return [np.zeros(2)]


def draw_bonds(
    canvas: np.ndarray,
    numbers: np.ndarray,
    pixels: np.ndarray,
    bonds: Iterable[Bond],
    config: RenderConfig,
) -> int:
    """Draw bonds as bright raised-cosine lines with a soft glow.

    Line intensity scales with the mean atomic number ``Zavg`` of the
    two atoms as ``min(255, Zavg**0.9) * bond_amplitude`` and the glow
    as ``min(255, 2 * Zavg**1.2) * bond_amplitude``, both capped at
    255; the glow is further scaled by 0.85.  Multiple bonds are drawn
    as parallel lines (see :func:`line_offsets`); the glow follows
    the undisplaced centre line only, so double bonds have none.

    Bonds that reference atoms outside *pixels*, atoms without a
    finite pixel position or atoms with an atomic number below 1 are
    skipped.

    Returns:
        The number of bonds drawn.
    """
    n = len(pixels)
    halfw = max(1.0, 0.5 * config.bond_width_px)
    offset_base = max(1.0, 0.8 * halfw)
    glow_sigma = max(0.5, 0.6 * halfw)
    amp = config.bond_amplitude
    drawn = skipped = 0

    for bond in bonds:
        i, j = bond.index_a, bond.index_b
        if not (0 <= i < n and 0 <= j < n):
            skipped += 1
            continue
        p1, p2 = pixels[i], pixels[j]
        if not (np.all(np.isfinite(p1)) and np.all(np.isfinite(p2))):
            skipped += 1
            continue
        if numbers[i] < 1 or numbers[j] < 1:
            skipped += 1
            continue

        z_avg = 0.5 * (int(numbers[i]) + int(numbers[j]))
        line_intensity = min(255.0, min(255.0, z_avg ** 0.9) * amp)
        glow_intensity = min(255.0, min(255.0, z_avg ** 1.2 * 2.0) * amp)

        for off in line_offsets(bond.order, p2 - p1, offset_base):
            draw_gaussian_line(canvas, p1 + off, p2 + off, line_intensity, halfw)
            if not off.any():
                draw_glow_line(
                    canvas, p1, p2, glow_intensity * _GLOW_SCALE, glow_sigma,
                )
        drawn += 1

    if skipped:
        logger.debug("skipped %d bond(s) with invalid endpoints", skipped)
    return drawn
