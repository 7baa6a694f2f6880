"""Core data model for temsim: atoms, bonds, cells and render settings.

Everything is re-exported here so that ``from temsim.model import
RenderConfig`` works without knowing the submodule layout.
"""

from temsim.model.atoms import Atoms
from temsim.model.bond import (
    UNKNOWN_BONDS,
    Bond,
    BondOrder,
    BondTopology,
    ExplicitBonds,
    UnknownBonds,
    as_topology,
)
from temsim.model.cell import PeriodicCell
from temsim.model.render_config import RenderConfig, ScaleBarCorner
from temsim.model.system import StructureSystem

__all__ = [
    "Atoms",
    "Bond",
    "BondOrder",
    "BondTopology",
    "ExplicitBonds",
    "PeriodicCell",
    "RenderConfig",
    "ScaleBarCorner",
    "StructureSystem",
    "UNKNOWN_BONDS",
    "UnknownBonds",
    "as_topology",
]
