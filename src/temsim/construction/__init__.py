"""System construction: bond inference, tiling, validation, and builders."""

from temsim.construction.bonds import bond_degrees, infer_bonds
from temsim.construction.builders import build_system, from_pymatgen
from temsim.construction.config_io import load_config, resolve_config, save_config
from temsim.construction.contract import (
    ContractError,
    is_diagnostic_mode,
    validate_system,
)
from temsim.construction.fragments import (
    circle_layout,
    connected_components,
    is_degenerate_layout,
    separate_fragments,
)
from temsim.construction.tiling import normalise_size, tile_supercell

__all__ = [
    "ContractError",
    "bond_degrees",
    "build_system",
    "circle_layout",
    "connected_components",
    "from_pymatgen",
    "infer_bonds",
    "is_degenerate_layout",
    "is_diagnostic_mode",
    "load_config",
    "normalise_size",
    "resolve_config",
    "save_config",
    "separate_fragments",
    "tile_supercell",
    "validate_system",
]
