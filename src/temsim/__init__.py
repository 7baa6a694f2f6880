"""temsim: synthetic transmission-electron-microscopy style images.

temsim turns atom positions (and optionally a bond topology) into a
grayscale micrograph-like raster, inferring plausible covalent bonds
from geometry when none are given.

Example usage::

    from temsim import Atoms, render_image

    atoms = Atoms.from_records([
        {"Z": 6, "x": 0.0, "y": 0.0, "z": 0.0},
        {"Z": 8, "x": 1.2, "y": 0.0, "z": 0.0},
    ])
    image = render_image(atoms, image_size=(256, 256), output="co.png")
"""

from temsim.construction.bonds import infer_bonds
from temsim.construction.builders import build_system, from_pymatgen
from temsim.construction.config_io import load_config, save_config
from temsim.construction.contract import ContractError, validate_system
from temsim.construction.fragments import separate_fragments
from temsim.construction.tiling import tile_supercell
from temsim.elements import (
    ChemistryProvider,
    FallbackProvider,
    RDKitProvider,
)
from temsim.logging_config import setup_logging
from temsim.model import (
    UNKNOWN_BONDS,
    Atoms,
    Bond,
    BondOrder,
    BondTopology,
    ExplicitBonds,
    PeriodicCell,
    RenderConfig,
    ScaleBarCorner,
    StructureSystem,
    UnknownBonds,
    as_topology,
)
from temsim.rendering import (
    RenderResult,
    RenderWorker,
    nice_scale_length,
    render_image,
    to_rgba,
)

__all__ = [
    "Atoms",
    "Bond",
    "BondOrder",
    "BondTopology",
    "ChemistryProvider",
    "ContractError",
    "ExplicitBonds",
    "FallbackProvider",
    "PeriodicCell",
    "RDKitProvider",
    "RenderConfig",
    "RenderResult",
    "RenderWorker",
    "ScaleBarCorner",
    "StructureSystem",
    "UNKNOWN_BONDS",
    "UnknownBonds",
    "as_topology",
    "build_system",
    "from_pymatgen",
    "infer_bonds",
    "load_config",
    "nice_scale_length",
    "render_image",
    "save_config",
    "separate_fragments",
    "setup_logging",
    "tile_supercell",
    "to_rgba",
    "validate_system",
]
