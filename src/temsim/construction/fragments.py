"""Connected components and 2-D layout helpers for molecular fragments."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from temsim.model import Atoms, Bond

logger = logging.getLogger(__name__)


def adjacency(bonds: Iterable[Bond], n_atoms: int) -> list[list[int]]:
    """Neighbour lists indexed by atom.

    Bonds referencing atoms outside ``range(n_atoms)`` are ignored.
    """
    neighbours: list[list[int]] = [[] for _ in range(n_atoms)]
    for bond in bonds:
        i, j = bond.index_a, bond.index_b
        if 0 <= i < n_atoms and 0 <= j < n_atoms:
            neighbours[i].append(j)
            neighbours[j].append(i)
    return neighbours


def connected_components(
    bonds: Iterable[Bond], n_atoms: int,
) -> list[list[int]]:
    """Group atoms into connected components of the bond graph.

    Traversal uses an explicit stack, so arbitrarily large fragments
    never hit the recursion limit.  Components are returned in order of
    their lowest atom index; isolated atoms form single-atom
    components.

    Args:
        bonds: The bonds defining the graph.
        n_atoms: Total number of atoms.

    Returns:
        A list of components, each a sorted list of atom indices.
    """
    neighbours = adjacency(bonds, n_atoms)
    seen = np.zeros(n_atoms, dtype=bool)
    components: list[list[int]] = []

    for start in range(n_atoms):
        if seen[start]:
            continue
        seen[start] = True
        stack = [start]
        members: list[int] = []
        while stack:
            v = stack.pop()
            members.append(v)
            for u in neighbours[v]:
                if not seen[u]:
                    seen[u] = True
                    stack.append(u)
        components.append(sorted(members))

    return components


def separate_fragments(
    atoms: Atoms, bonds: Iterable[Bond], gap: float = 8.0,
) -> Atoms:
    """Lay disconnected fragments out side by side along x.

    Each fragment is centred on its own x/y centroid and then shifted
    by ``k * gap`` along x, where ``k`` is the fragment's position in
    :func:`connected_components` order.  z is left unchanged.  A single
    fragment (or no atoms) is returned as an unchanged copy.

    Args:
        atoms: Atoms to arrange.
        bonds: Bonds defining the fragments.
        gap: Spacing in angstroms between successive fragment centres.

    Returns:
        A new :class:`~temsim.model.Atoms` with rearranged coordinates.
    """
    result = atoms.copy()
    components = connected_components(bonds, len(atoms))
    if len(components) <= 1:
        return result

    for k, members in enumerate(components):
        idx = np.asarray(members, dtype=int)
        centroid = result.coords[idx, :2].mean(axis=0)
        result.coords[idx, :2] -= centroid
        result.coords[idx, 0] += k * gap

    logger.debug("separated %d fragments with gap %.2f", len(components), gap)
    return result


def is_degenerate_layout(atoms: Atoms, eps: float = 1e-6) -> bool:
    """Whether the atoms have no usable 2-D extent.

    True for fewer than two atoms, any non-finite x or y, or when every
    atom sits on the same x/y point to within *eps*.
    """
    if len(atoms) < 2:
        return True
    xy = atoms.coords[:, :2]
    if not np.all(np.isfinite(xy)):
        return True
    extent = xy.max(axis=0) - xy.min(axis=0)
    return bool(np.all(extent < eps))


def circle_layout(atoms: Atoms, radius: float = 3.0) -> Atoms:
    """Place atoms evenly on a circle in the z = 0 plane.

    A last-resort layout for structures whose coordinates could not be
    generated.  Atomic numbers are kept.
    """
    n = len(atoms)
    if n == 0:
        return atoms.copy()
    t = 2.0 * np.pi * np.arange(n) / n
    coords = np.column_stack([
        radius * np.cos(t), radius * np.sin(t), np.zeros(n),
    ])
    return Atoms(numbers=atoms.numbers.copy(), coords=coords)
