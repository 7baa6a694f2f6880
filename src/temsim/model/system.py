from __future__ import annotations

from dataclasses import dataclass, field

from temsim.model.atoms import Atoms
from temsim.model.bond import UNKNOWN_BONDS, BondTopology, ExplicitBonds
from temsim.model.cell import PeriodicCell


@dataclass
class StructureSystem:
    """A renderable structure: atoms, their bond topology and metadata.

    This is the normalised form of whatever a structure collaborator
    (file reader, SMILES embedder, pymatgen adapter) produced.

    Attributes:
        atoms: The atoms.
        bonds: :data:`~temsim.model.UNKNOWN_BONDS` or an
            :class:`~temsim.model.ExplicitBonds` list.
        title: Human-readable title.
        cell: Periodic cell for minimum-image bond inference, or
            ``None`` for non-periodic (or explicitly tiled) systems.
        warnings: Non-fatal notes collected while building.
    """

    atoms: Atoms
    bonds: BondTopology = UNKNOWN_BONDS
    title: str = ""
    cell: PeriodicCell | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def n_atoms(self) -> int:
        return len(self.atoms)

    @property
    def has_explicit_bonds(self) -> bool:
        return isinstance(self.bonds, ExplicitBonds)

    def summary(self) -> str:
        """One-line description, e.g. ``"CIF: atoms=8; bonds=unknown"``."""
        if isinstance(self.bonds, ExplicitBonds):
            nb = str(len(self.bonds))
        else:
            nb = "unknown"
        return f"{self.title or 'system'}: atoms={self.n_atoms}; bonds={nb}"
