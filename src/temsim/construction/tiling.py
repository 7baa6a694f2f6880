"""Supercell tiling of a unit cell's atoms and bonds."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from temsim.lattice import tile_shift
from temsim.model import Atoms, Bond, BondTopology, ExplicitBonds, UnknownBonds

logger = logging.getLogger(__name__)


def normalise_size(size: Sequence[int] | str | None) -> tuple[int, int, int]:
    """Coerce a supercell size to three positive integers.

    ``None``, ``"auto"`` and anything that is not a three-element
    sequence give ``(1, 1, 1)``; zero or negative entries become ``1``.
    """
    if size is None or isinstance(size, str):
        return (1, 1, 1)
    try:
        values = [int(v) for v in size]
    except (TypeError, ValueError):
        return (1, 1, 1)
    if len(values) != 3:
        return (1, 1, 1)
    return tuple(v if v > 0 else 1 for v in values)  # type: ignore[return-value]


def tile_supercell(
    atoms: Atoms,
    basis: np.ndarray,
    size: Sequence[int] | str | None,
    bonds: BondTopology,
) -> tuple[Atoms, BondTopology]:
    """Replicate unit-cell atoms (and explicit bonds) over a supercell.

    Tiles are visited with *ix* outermost and *iz* innermost; tile
    ``t`` holds atoms ``t * n_unit`` to ``(t + 1) * n_unit - 1``, each
    shifted by ``ix*a + iy*b + iz*c``.  Explicit bonds are copied into
    every tile with their indices offset by ``t * n_unit``.  Unknown
    bonds stay unknown so the caller can infer them over the whole
    supercell.

    Args:
        atoms: Atoms of one unit cell.
        basis: Lattice vectors as the rows of a ``(3, 3)`` array.
        size: Repetitions ``(nx, ny, nz)``; see :func:`normalise_size`.
        bonds: Bond topology of the unit cell.

    Returns:
        A ``(atoms, bonds)`` tuple for the supercell.
    """
    nx, ny, nz = normalise_size(size)
    n_unit = len(atoms)

    shifts = np.array([
        tile_shift(ix, iy, iz, basis)
        for ix in range(nx)
        for iy in range(ny)
        for iz in range(nz)
    ])
    n_tiles = len(shifts)
    if n_tiles == 1:
        return atoms.copy(), bonds

    coords = (atoms.coords[np.newaxis, :, :] + shifts[:, np.newaxis, :]).reshape(-1, 3)
    numbers = np.tile(atoms.numbers, n_tiles)
    tiled_atoms = Atoms(numbers=numbers, coords=coords)

    if isinstance(bonds, UnknownBonds) or n_unit == 0 or len(bonds) == 0:
        tiled_bonds: BondTopology = bonds
    else:
        tiled_bonds = ExplicitBonds(tuple(
            Bond(b.index_a + t * n_unit, b.index_b + t * n_unit, b.order)
            for t in range(n_tiles)
            for b in bonds
        ))

    logger.debug(
        "tiled %d atom(s) over %dx%dx%d supercell", n_unit, nx, ny, nz,
    )
    return tiled_atoms, tiled_bonds
