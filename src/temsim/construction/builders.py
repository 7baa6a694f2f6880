"""Convenience constructors for StructureSystem."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from temsim.construction.bonds import infer_bonds
from temsim.construction.contract import (
    ContractError,
    is_diagnostic_mode,
    validate_system,
)
from temsim.construction.tiling import normalise_size, tile_supercell
from temsim.model import (
    UNKNOWN_BONDS,
    Atoms,
    Bond,
    BondTopology,
    ExplicitBonds,
    PeriodicCell,
    StructureSystem,
    UnknownBonds,
)

if TYPE_CHECKING:
    from pymatgen.core import Structure

logger = logging.getLogger(__name__)

ERROR_TITLE = "ERROR"

# Bond inference parameters for crystals, tighter than the molecular
# defaults.
CRYSTAL_SCALE_FACTOR = 1.22
CRYSTAL_MAX_DISTANCE = 2.1


def _error_system(reason: str) -> StructureSystem:
    logger.debug("malformed build result: %s", reason)
    return StructureSystem(
        atoms=Atoms.empty(), bonds=UNKNOWN_BONDS, title=ERROR_TITLE,
        warnings=[reason],
    )


def _coerce_atoms(raw: Any, strict: bool) -> Atoms | None:
    if isinstance(raw, Atoms):
        return raw.copy()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        return None

    records: list[Mapping] = []
    for k, rec in enumerate(raw):
        try:
            z = int(rec["Z"])
        except (KeyError, TypeError, ValueError):
            if strict:
                raise ContractError(
                    f"[temsim][build] system validation failed: "
                    f"atom[{k}] has missing/invalid Z"
                ) from None
            logger.debug("skipping atom record %d without a valid Z", k)
            continue
        records.append({**rec, "Z": z})
    return Atoms.from_records(records)


def _coerce_bonds(raw: Any, strict: bool) -> BondTopology:
    if raw is None:
        return UNKNOWN_BONDS
    if isinstance(raw, (UnknownBonds, ExplicitBonds)):
        return raw
    if isinstance(raw, np.ndarray):
        raw = raw.tolist()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        if strict:
            raise ContractError(
                "[temsim][build] system validation failed: "
                "bonds must be None or a sequence"
            )
        logger.debug("ignoring bonds of type %s", type(raw).__name__)
        return UNKNOWN_BONDS

    bonds: list[Bond] = []
    for k, rec in enumerate(raw):
        try:
            bonds.append(rec if isinstance(rec, Bond) else Bond.from_sequence(rec))
        except (TypeError, ValueError) as exc:
            if strict:
                raise ContractError(
                    f"[temsim][build] system validation failed: "
                    f"bond[{k}] is malformed ({exc})"
                ) from None
            logger.debug("skipping malformed bond record %d: %s", k, exc)
    return ExplicitBonds(tuple(bonds))


def build_system(
    result: Any,
    cell: PeriodicCell | None = None,
    *,
    diagnostic: bool | None = None,
) -> StructureSystem:
    """Normalise a structure collaborator's ``(atoms, bonds, title)``.

    The bonds entry keeps its meaning: ``None`` means unknown
    (inference allowed), any sequence, including an empty one, is an
    explicit topology.  Atoms may be an :class:`~temsim.model.Atoms`
    or a sequence of ``{"Z", "x", "y", "z"}`` mappings.

    A *result* that is not a sequence of at least three items, or whose
    atoms entry is not usable, gives an empty system titled
    ``"ERROR"``.  Individually malformed atom or bond records are
    skipped with a debug log line, unless diagnostic mode is on, in
    which case :class:`~temsim.construction.contract.ContractError` is
    raised.  The finished system is passed through
    :func:`~temsim.construction.contract.validate_system`.

    Args:
        result: The collaborator's return value.
        cell: Optional periodic cell for later bond inference.
        diagnostic: Force diagnostic validation on or off.  ``None``
            follows the ``TEMSIM_DEV`` environment variable.

    Returns:
        The normalised :class:`~temsim.model.StructureSystem`.

    Raises:
        ContractError: In diagnostic mode, if the system is invalid.
    """
    strict = is_diagnostic_mode() if diagnostic is None else diagnostic

    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
        return _error_system(f"expected (atoms, bonds, title), got {type(result).__name__}")
    if len(result) < 3:
        return _error_system(f"expected 3 items, got {len(result)}")

    raw_atoms, raw_bonds, raw_title = result[0], result[1], result[2]
    atoms = _coerce_atoms(raw_atoms, strict)
    if atoms is None:
        return _error_system(f"atoms must be a sequence, got {type(raw_atoms).__name__}")

    system = StructureSystem(
        atoms=atoms,
        bonds=_coerce_bonds(raw_bonds, strict),
        title="" if raw_title is None else str(raw_title),
        cell=cell,
    )
    validate_system(system, "build", diagnostic=strict)
    logger.debug("built %s", system.summary())
    return system


def from_pymatgen(
    structure: Structure,
    supercell: Sequence[int] = (1, 1, 1),
    *,
    bonds: Sequence | None = None,
    title: str | None = None,
    guess_bonds: bool = True,
) -> StructureSystem:
    """Create a StructureSystem from a pymatgen ``Structure``.

    Fractional coordinates are wrapped into ``[0, 1)`` before
    conversion.  A 1x1x1 build keeps the lattice as a
    :class:`~temsim.model.PeriodicCell`, so bond inference uses the
    minimum image convention.  Larger supercells are tiled explicitly
    with :func:`~temsim.construction.tiling.tile_supercell` and carry
    no cell, since minimum-image distances across an explicitly tiled
    supercell would create spurious wrap-around bonds.

    Without explicit *bonds*, bonds are inferred once over the built
    atoms using the crystal thresholds :data:`CRYSTAL_SCALE_FACTOR` and
    :data:`CRYSTAL_MAX_DISTANCE`, so the renderer does not fall back to
    its looser molecular defaults.

    Args:
        structure: A pymatgen ``Structure``.
        supercell: Repetitions ``(nx, ny, nz)``.
        bonds: Optional explicit unit-cell bonds as ``[i, j, order]``
            records, replicated into every tile.
        title: Title for the system.  Defaults to the reduced formula,
            with the supercell size appended when tiled.
        guess_bonds: Infer bonds when *bonds* is ``None``.  When false
            the topology is left unknown.

    Returns:
        A :class:`~temsim.model.StructureSystem`.

    Raises:
        ImportError: If pymatgen is not installed.
    """
    try:
        from pymatgen.core import Structure
    except ImportError:
        raise ImportError(
            "pymatgen is required for from_pymatgen(). "
            "Install it with: pip install pymatgen"
        )

    if not isinstance(structure, Structure):
        raise TypeError(
            f"structure must be a pymatgen Structure, "
            f"got {type(structure).__name__}"
        )

    basis = np.array(structure.lattice.matrix, dtype=float)
    numbers = np.array([site.specie.Z for site in structure], dtype=int)
    frac = np.asarray(structure.frac_coords, dtype=float) % 1.0
    unit = Atoms(numbers=numbers, coords=frac @ basis)

    topology = _coerce_bonds(bonds, strict=False)
    size = normalise_size(supercell)
    atoms, topology = tile_supercell(unit, basis, size, topology)

    tiled = size != (1, 1, 1)
    cell = None if tiled else PeriodicCell(basis)
    if bonds is None and guess_bonds:
        topology = ExplicitBonds(tuple(infer_bonds(
            atoms, cell,
            scale_factor=CRYSTAL_SCALE_FACTOR,
            max_absolute_distance=CRYSTAL_MAX_DISTANCE,
        )))
    if title is None:
        title = structure.composition.reduced_formula
        if tiled:
            title = f"{title} size={size[0]}x{size[1]}x{size[2]}"

    system = StructureSystem(atoms=atoms, bonds=topology, title=title, cell=cell)
    validate_system(system, "pymatgen")
    return system
