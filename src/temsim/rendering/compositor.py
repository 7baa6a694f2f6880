"""Raster compositing of a full synthetic micrograph."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
from matplotlib.axes import Axes

from temsim.construction.bonds import infer_bonds
from temsim.construction.config_io import resolve_config
from temsim.elements import ChemistryProvider
from temsim.model import (
    UNKNOWN_BONDS,
    Atoms,
    Bond,
    BondTopology,
    PeriodicCell,
    RenderConfig,
    UnknownBonds,
    as_topology,
)
from temsim.rendering.filters import (
    add_noise,
    apply_contrast,
    clip,
    gaussian_blur,
    invert,
    new_canvas,
    quantise,
)
from temsim.rendering.kernels import draw_atoms, draw_bonds
from temsim.rendering.projection import compute_pixel_coords
from temsim.rendering.scale_bar import draw_scale_bar

logger = logging.getLogger(__name__)

DOF_SLICES = 12
_FRONT_TOLERANCE = 1e-9


def _as_atoms(atoms: Atoms | Sequence[Mapping[str, float]] | None) -> Atoms:
    if atoms is None:
        return Atoms.empty()
    if isinstance(atoms, Atoms):
        return atoms
    return Atoms.from_records(atoms)


def resolve_bonds(
    atoms: Atoms,
    topology: BondTopology,
    config: RenderConfig,
    cell: PeriodicCell | None = None,
    provider: ChemistryProvider | None = None,
) -> list[Bond]:
    """The bonds a render will draw.

    Nothing when *config* disables bonds.  Unknown topologies are
    inferred with :func:`~temsim.construction.bonds.infer_bonds`;
    explicit ones are used as given, even when empty.
    """
    if not config.draw_bonds:
        return []
    if isinstance(topology, UnknownBonds):
        return infer_bonds(atoms, cell, provider=provider)
    return list(topology)


def _in_slice(values: np.ndarray, lo: float, hi: float, last: bool) -> np.ndarray:
    upper = (values <= hi) if last else (values < hi)
    return (values >= lo) & upper


def _composite_single(
    canvas: np.ndarray,
    atoms: Atoms,
    pixels: np.ndarray,
    scale: float,
    bonds: list[Bond],
    config: RenderConfig,
    focal_z: float,
    provider: ChemistryProvider | None,
) -> None:
    visible = None
    if config.hide_front:
        with np.errstate(invalid="ignore"):
            visible = ~(atoms.z > focal_z + _FRONT_TOLERANCE)
    n_atoms = draw_atoms(
        canvas, atoms.numbers, pixels, scale, config,
        provider=provider, visible=visible,
    )
    n_bonds = draw_bonds(canvas, atoms.numbers, pixels, bonds, config)
    logger.debug("single pass: %d atom(s), %d bond(s)", n_atoms, n_bonds)


def _composite_slices(
    canvas: np.ndarray,
    atoms: Atoms,
    pixels: np.ndarray,
    scale: float,
    bonds: list[Bond],
    config: RenderConfig,
    focal_z: float,
    provider: ChemistryProvider | None,
) -> None:
    bg = config.background_gray
    z = atoms.z
    finite = atoms.finite
    z_min, z_max = float(z[finite].min()), float(z[finite].max())
    n_slices = DOF_SLICES if z_max > z_min else 1
    edges = z_min + (z_max - z_min) * np.arange(n_slices + 1) / n_slices

    n = len(atoms)
    bonds = [b for b in bonds if 0 <= b.index_a < n and 0 <= b.index_b < n]
    bond_z = np.array(
        [0.5 * (z[b.index_a] + z[b.index_b]) for b in bonds], dtype=float,
    )

    drawn = 0
    for k in range(n_slices):
        z_lo, z_hi = edges[k], edges[k + 1]
        z_c = 0.5 * (z_lo + z_hi)
        if config.hide_front and z_c > focal_z + _FRONT_TOLERANCE:
            continue
        last = k == n_slices - 1

        with np.errstate(invalid="ignore"):
            members = finite & _in_slice(z, z_lo, z_hi, last)
            bond_hit = _in_slice(bond_z, z_lo, z_hi, last) if bonds else np.zeros(0, bool)
        slice_bonds = [
            b for b, hit in zip(bonds, bond_hit)
            if hit and members[b.index_a] and members[b.index_b]
        ]
        if not members.any() and not slice_bonds:
            continue

        layer = new_canvas(config.image_size, bg)
        draw_atoms(
            layer, atoms.numbers, pixels, scale, config,
            provider=provider, visible=members,
        )
        draw_bonds(layer, atoms.numbers, pixels, slice_bonds, config)

        sigma_px = abs(z_c - focal_z) * config.dof_strength / max(
            config.angstroms_per_pixel, 1e-9,
        )
        canvas += gaussian_blur(layer - np.float32(bg), sigma_px)
        drawn += 1

    logger.debug(
        "depth of field: %d of %d slice(s) drawn, focal plane at %.3f",
        drawn, n_slices, focal_z,
    )


def composite(
    atoms: Atoms,
    bonds: list[Bond],
    config: RenderConfig,
    *,
    rng: np.random.Generator | None = None,
    provider: ChemistryProvider | None = None,
) -> np.ndarray:
    """Draw *atoms* and *bonds* and run the post-processing chain.

    Returns:
        The quantised ``uint8`` image of shape ``(H, W)``, without a
        scale bar.
    """
    bg = config.background_gray
    canvas = new_canvas(config.image_size, bg)
    if not atoms.finite.any():
        logger.debug("no drawable atoms; returning flat background")
        return quantise(canvas)

    pixels, scale = compute_pixel_coords(
        atoms, config.image_size, config.angstroms_per_pixel,
    )
    focal_z = config.resolve_focal_z(atoms.z)

    if config.dof_enabled:
        _composite_slices(canvas, atoms, pixels, scale, bonds, config, focal_z, provider)
    else:
        _composite_single(canvas, atoms, pixels, scale, bonds, config, focal_z, provider)

    canvas = gaussian_blur(canvas, config.blur_sigma)
    canvas = add_noise(canvas, config.noise_stddev, rng)
    canvas = apply_contrast(canvas, config.contrast, bg)
    if config.invert:
        canvas = invert(canvas, bg)
    canvas = clip(canvas, config.low_clip, config.high_clip)
    return quantise(canvas)


def to_rgba(gray: np.ndarray) -> np.ndarray:
    """Expand a ``(H, W)`` gray image to opaque ``(H, W, 4)`` RGBA."""
    gray = np.asarray(gray, dtype=np.uint8)
    alpha = np.full(gray.shape, 255, dtype=np.uint8)
    return np.stack([gray, gray, gray, alpha], axis=-1)


def paint_surface(surface: np.ndarray | Axes, gray: np.ndarray) -> None:
    """Show *gray* on a display surface.

    Args:
        surface: A caller-owned ``uint8`` array of shape ``(H, W, 4)``,
            filled in place, or a matplotlib :class:`~matplotlib.axes.Axes`.

    Raises:
        ValueError: If an array surface has the wrong shape.
        TypeError: If *surface* is neither an array nor an Axes.
    """
    if isinstance(surface, np.ndarray):
        expected = (*gray.shape, 4)
        if surface.shape != expected:
            raise ValueError(
                f"surface must have shape {expected}, got {surface.shape}"
            )
        surface[...] = to_rgba(gray)
    elif isinstance(surface, Axes):
        surface.imshow(
            gray, cmap="gray", vmin=0, vmax=255, interpolation="nearest",
        )
        surface.set_axis_off()
    else:
        raise TypeError(
            f"surface must be a numpy array or a matplotlib Axes, "
            f"got {type(surface).__name__}"
        )


def save_image(path: str | Path, gray: np.ndarray) -> None:
    """Write *gray* to *path* as a grayscale image (format from suffix)."""
    import matplotlib.pyplot as plt

    plt.imsave(Path(path), gray, cmap="gray", vmin=0, vmax=255)


def render_image(
    atoms: Atoms | Sequence[Mapping[str, float]] | None,
    bonds: BondTopology | Sequence | None = UNKNOWN_BONDS,
    config: RenderConfig | None = None,
    *,
    cell: PeriodicCell | None = None,
    surface: np.ndarray | Axes | None = None,
    output: str | Path | None = None,
    rng: np.random.Generator | None = None,
    provider: ChemistryProvider | None = None,
    **config_kwargs: Any,
) -> np.ndarray:
    """Render a synthetic grayscale micrograph of a structure.

    Atoms are projected along z, drawn as dark Gaussian bodies with a
    bright core, and joined by bright bond lines.  With a non-zero
    ``dof_strength`` the structure is cut into depth slices that are
    blurred by their distance from the focal plane.  The result then
    goes through blur, noise, contrast, inversion and clipping before
    being quantised, and an optional scale bar is burned in.

    Bond semantics: :data:`~temsim.model.UNKNOWN_BONDS` (or ``None``)
    lets bonds be inferred from geometry; any explicit list, including
    an empty one, is drawn exactly as given.

    Args:
        atoms: An :class:`~temsim.model.Atoms` or a sequence of
            ``{"Z", "x", "y", "z"}`` records.  ``None`` or no atoms
            gives a uniform background.
        bonds: Bond topology.
        config: Render settings.  ``None`` uses the defaults.
        cell: Optional periodic cell used when inferring bonds.
        surface: Optional display target, see :func:`paint_surface`.
        output: Optional file path to save the image to.
        rng: Random generator for the noise step.  Pass a seeded
            generator for reproducible noise.
        provider: Source of covalent radii.  Defaults to the built-in
            tables.
        **config_kwargs: Overrides for individual
            :class:`~temsim.model.RenderConfig` fields.

    Returns:
        The ``uint8`` image of shape ``(H, W)``.

    Raises:
        TypeError: If a keyword override is not a ``RenderConfig``
            field, or *bonds* is not a valid bond topology.
    """
    resolved = resolve_config(config, **config_kwargs)
    structure = _as_atoms(atoms)
    topology = as_topology(bonds)

    bond_list = resolve_bonds(structure, topology, resolved, cell, provider)
    image = composite(structure, bond_list, resolved, rng=rng, provider=provider)

    if resolved.show_scale_bar:
        draw_scale_bar(
            image,
            resolved.angstroms_per_pixel,
            corner=resolved.scale_bar_corner,
            margin=resolved.scale_bar_margin_px,
            invert=resolved.invert,
        )
    if surface is not None:
        paint_surface(surface, image)
    if output is not None:
        save_image(output, image)
    return image
