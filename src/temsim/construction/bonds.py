"""Bond inference from bare geometry."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import numpy as np

from temsim.elements import (
    DEFAULT_PROVIDER,
    ChemistryProvider,
    max_degree,
    resolve_radius,
)
from temsim.lattice import minimum_image
from temsim.model import Atoms, Bond, PeriodicCell

logger = logging.getLogger(__name__)

_HYDROGEN = 1
_MIN_DIST_SQ = 1e-6
_MIN_THRESHOLD = 0.6
_HYDROGEN_CAP = 1.25
_NOISY_PAIR_CAP = 2.0
# Unordered (low Z, high Z) pairs whose contacts are often non-covalent:
# O-O, N-O, C-O and C-N.
_NOISY_PAIRS = ((8, 8), (7, 8), (6, 8), (6, 7))
# Upper bound on the pairs held in memory at once during inference.
_PAIR_BLOCK = 1_000_000


def infer_bonds(
    atoms: Atoms,
    cell: PeriodicCell | None = None,
    *,
    scale_factor: float = 1.25,
    max_absolute_distance: float = 2.3,
    provider: ChemistryProvider | None = None,
) -> list[Bond]:
    """Guess covalent bonds from interatomic distances.

    Every unordered pair of atoms (except hydrogen-hydrogen) whose
    distance is within a per-pair threshold becomes a candidate.  The
    threshold is ``scale_factor * (r_i + r_j)`` plus a small pad
    (0.15 angstrom when hydrogen is involved, 0.2 otherwise), capped at
    *max_absolute_distance* and further at 1.25 for pairs with
    hydrogen and 2.0 for O-O, N-O, C-O and C-N pairs, with a floor of
    0.6.

    Candidates are ranked by ``distance / (r_i + r_j)`` with ties
    broken by distance, then accepted greedily while both atoms are
    below their maximum degree (see :func:`~temsim.elements.max_degree`).
    Hydrogen never takes more than one bond.  The ranking makes the
    result independent of input quirks: the same atoms always give the
    same bonds.

    When *cell* is given and not degenerate, distances use the minimum
    image convention.  Atoms with non-finite coordinates, and pairs at
    (near) zero separation, are skipped.

    Args:
        atoms: The atoms to connect.
        cell: Optional periodic cell.
        scale_factor: Multiplier on the covalent radius sum.
        max_absolute_distance: Global cap on any bond length.
        provider: Source of covalent radii.  Defaults to the built-in
            tables.

    Returns:
        Bonds of order 1, each pair at most once, with
        ``index_a < index_b``.
    """
    n_atoms = len(atoms)
    if n_atoms < 2:
        return []

    provider = provider if provider is not None else DEFAULT_PROVIDER
    numbers = atoms.numbers
    coords = atoms.coords

    radius_by_z = {int(z): resolve_radius(provider, int(z)) for z in np.unique(numbers)}
    radii = np.array([radius_by_z[int(z)] for z in numbers])
    max_deg = np.array([max_degree(int(z)) for z in numbers])

    basis = None
    if cell is not None:
        if cell.is_degenerate:
            logger.debug("degenerate periodic cell; periodic inference disabled")
        else:
            basis = cell.vectors

    chunks = [
        _candidates(
            ii, jj, numbers, coords, radii, basis,
            scale_factor, max_absolute_distance,
        )
        for ii, jj in _pair_blocks(n_atoms, _PAIR_BLOCK)
    ]
    ii, jj, dist, score = (np.concatenate(parts) for parts in zip(*chunks))

    # Primary key score, secondary key distance; lexsort is stable so
    # exact ties keep (i, j) enumeration order.
    ranking = np.lexsort((dist, score))

    degree = np.zeros(n_atoms, dtype=int)
    is_h = numbers == _HYDROGEN
    seen: set[tuple[int, int]] = set()
    bonds: list[Bond] = []

    for k in ranking:
        i, j = int(ii[k]), int(jj[k])
        if degree[i] >= max_deg[i] or degree[j] >= max_deg[j]:
            continue
        if (is_h[i] and degree[i] >= 1) or (is_h[j] and degree[j] >= 1):
            continue
        if (i, j) in seen:
            continue
        seen.add((i, j))
        bonds.append(Bond(i, j, 1))
        degree[i] += 1
        degree[j] += 1

    logger.debug(
        "inferred %d bond(s) from %d candidate(s) over %d atom(s)%s",
        len(bonds), len(ranking), n_atoms,
        " (periodic)" if basis is not None else "",
    )
    return bonds


def _pair_blocks(n_atoms: int, block: int) -> Iterator[tuple[np.ndarray, np.ndarray]]:
    """Yield ``(i, j)`` index arrays for all pairs ``i < j``.

    Rows are grouped so that each block holds roughly *block* pairs,
    and pairs come out in the same order as ``np.triu_indices``.
    """
    rows_per_block = max(1, block // n_atoms)
    cols = np.arange(n_atoms)
    for start in range(0, n_atoms - 1, rows_per_block):
        rows = np.arange(start, min(start + rows_per_block, n_atoms - 1))
        ii, jj = np.nonzero(cols > rows[:, None])
        yield ii + start, jj


def _candidates(
    ii: np.ndarray,
    jj: np.ndarray,
    numbers: np.ndarray,
    coords: np.ndarray,
    radii: np.ndarray,
    basis: np.ndarray | None,
    scale_factor: float,
    max_absolute_distance: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Filter one block of pairs down to those within bonding range.

    Returns ``(i, j, distance, score)`` for the surviving pairs.
    """
    zi, zj = numbers[ii], numbers[jj]
    with np.errstate(invalid="ignore", over="ignore"):
        diff = coords[jj] - coords[ii]
        if basis is not None:
            diff = minimum_image(diff, basis)
        dist_sq = np.einsum("ij,ij->i", diff, diff)

    usable = (
        ~((zi == _HYDROGEN) & (zj == _HYDROGEN))
        & np.all(np.isfinite(diff), axis=1)
        & np.isfinite(dist_sq)
        & (dist_sq >= _MIN_DIST_SQ)
    )
    ii, jj, zi, zj = ii[usable], jj[usable], zi[usable], zj[usable]
    dist = np.sqrt(dist_sq[usable])

    r_sum = radii[ii] + radii[jj]
    has_h = (zi == _HYDROGEN) | (zj == _HYDROGEN)
    pad = np.where(has_h, 0.15, 0.2)
    cap = _pair_caps(zi, zj, has_h, max_absolute_distance)
    threshold = np.maximum(
        np.minimum(scale_factor * r_sum + pad, cap), _MIN_THRESHOLD,
    )

    hit = dist <= threshold
    return ii[hit], jj[hit], dist[hit], dist[hit] / np.maximum(1e-6, r_sum[hit])


def _pair_caps(
    zi: np.ndarray,
    zj: np.ndarray,
    has_h: np.ndarray,
    max_absolute_distance: float,
) -> np.ndarray:
    """Per-pair upper bound on the bonding threshold."""
    lo = np.minimum(zi, zj)
    hi = np.maximum(zi, zj)
    noisy = np.zeros(lo.shape, dtype=bool)
    for a, b in _NOISY_PAIRS:
        noisy |= (lo == a) & (hi == b)

    cap = np.full(lo.shape, float(max_absolute_distance))
    cap = np.where(noisy, min(max_absolute_distance, _NOISY_PAIR_CAP), cap)
    cap = np.where(has_h, min(max_absolute_distance, _HYDROGEN_CAP), cap)
    return cap


def bond_degrees(bonds: Iterable[Bond], n_atoms: int) -> np.ndarray:
    """Number of bonds each atom takes part in."""
    degree = np.zeros(n_atoms, dtype=int)
    for bond in bonds:
        degree[bond.index_a] += 1
        degree[bond.index_b] += 1
    return degree
