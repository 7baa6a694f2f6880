"""Element lookup tables and chemistry providers.

The tables here are module-level constants built once at import and
never mutated.  Covalent radii are the Cordero et al. (Dalton Trans.
2008) values for the small set of elements the built-in fallback
covers; anything else resolves to :data:`DEFAULT_COVALENT_RADIUS`.

A :class:`ChemistryProvider` is the injected capability that the bond
inferer and renderer use for element properties.  :class:`FallbackProvider`
needs no third-party library; :class:`RDKitProvider` wraps the RDKit
periodic table and 3D embedding and falls back to the built-in tables
whenever RDKit has no answer.
"""

from __future__ import annotations

import logging
import math
import re
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_COVALENT_RADIUS: float = 0.77
"""Radius (angstroms) used when an element has no tabulated value."""

SYMBOL_TO_Z: MappingProxyType[str, int] = MappingProxyType({
    "H": 1, "He": 2,
    "Li": 3, "Be": 4, "B": 5, "C": 6, "N": 7, "O": 8, "F": 9, "Ne": 10,
    "Na": 11, "Mg": 12, "Al": 13, "Si": 14, "P": 15, "S": 16, "Cl": 17,
    "Ar": 18,
    "K": 19, "Ca": 20,
    "Fe": 26, "Co": 27, "Ni": 28, "Cu": 29, "Zn": 30,
    "Br": 35, "Ag": 47, "I": 53, "Au": 79,
})

COVALENT_RADII: MappingProxyType[int, float] = MappingProxyType({
    1: 0.31, 2: 0.28,
    3: 1.28, 4: 0.96, 5: 0.84, 6: 0.76, 7: 0.71, 8: 0.66, 9: 0.57, 10: 0.58,
    11: 1.66, 12: 1.41, 13: 1.21, 14: 1.11, 15: 1.07, 16: 1.05, 17: 1.02,
    18: 1.06,
    19: 2.03, 20: 1.76,
    26: 1.24, 27: 1.18, 28: 1.17, 29: 1.22, 30: 1.20,
    35: 1.20, 47: 1.45, 53: 1.39, 79: 1.36,
})

# Heuristic maximum number of bonds per element.  This is a neighbour
# cap for bond guessing, not a formal valence.
_MAX_DEGREE_BY_Z: MappingProxyType[int, int] = MappingProxyType({
    1: 1, 5: 3, 6: 4, 7: 3, 8: 2, 9: 1, 14: 4, 15: 5, 16: 6,
    17: 1, 35: 1, 53: 1,
})
ALKALI_METALS: frozenset[int] = frozenset({3, 11, 19, 37, 55, 87})
ALKALINE_EARTH_METALS: frozenset[int] = frozenset({4, 12, 20, 38, 56, 88})
_TRANSITION_RANGES = ((21, 30), (39, 48), (72, 80))
_F_BLOCK_RANGES = ((57, 71), (89, 103))
_DEFAULT_MAX_DEGREE = 4

_SYMBOL_RE = re.compile(r"^([A-Za-z]{1,2})")


def _in_ranges(z: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(lo <= z <= hi for lo, hi in ranges)


def max_degree(z: int) -> int:
    """Maximum number of inferred bonds for atomic number *z*.

    Halogens, hydrogen and alkali metals take one bond; oxygen two;
    nitrogen and boron three; carbon and silicon four; phosphorus five;
    sulfur six; alkaline earths two; transition metals eight;
    lanthanides and actinides ten.  Anything else gets four.
    """
    if z in _MAX_DEGREE_BY_Z:
        return _MAX_DEGREE_BY_Z[z]
    if z in ALKALI_METALS:
        return 1
    if z in ALKALINE_EARTH_METALS:
        return 2
    if _in_ranges(z, _TRANSITION_RANGES):
        return 8
    if _in_ranges(z, _F_BLOCK_RANGES):
        return 10
    return _DEFAULT_MAX_DEGREE


def normalise_symbol(symbol: str) -> str:
    """Reduce a site label such as ``"fe1"`` or ``"O2-"`` to ``"Fe"``/``"O"``.

    Only the leading one or two letters are kept and the result is
    capitalised.  Returns ``""`` for empty input.
    """
    symbol = str(symbol or "").strip()
    if not symbol:
        return ""
    match = _SYMBOL_RE.match(symbol)
    if match:
        symbol = match.group(1)
    if len(symbol) == 1:
        return symbol.upper()
    return symbol[0].upper() + symbol[1:].lower()


@runtime_checkable
class ChemistryProvider(Protocol):
    """Element-property and embedding capability.

    Implementations must be safe to share between threads: the core
    only ever reads from them.
    """

    def atomic_number(self, symbol: str) -> int:
        """Atomic number for *symbol*, or ``0`` when unknown."""
        ...

    def covalent_radius(self, z: int) -> float:
        """Covalent radius in angstroms for atomic number *z*."""
        ...

    def embed_3d(self, molecule: Any) -> bool:
        """Generate 3D coordinates for *molecule* in place."""
        ...


class FallbackProvider:
    """Dependency-free provider backed by the built-in minimal tables."""

    def atomic_number(self, symbol: str) -> int:
        return SYMBOL_TO_Z.get(normalise_symbol(symbol), 0)

    def covalent_radius(self, z: int) -> float:
        return COVALENT_RADII.get(int(z), DEFAULT_COVALENT_RADIUS)

    def embed_3d(self, molecule: Any) -> bool:
        # No geometry engine without RDKit.
        return False

    def __repr__(self) -> str:
        return "FallbackProvider()"


DEFAULT_PROVIDER: FallbackProvider = FallbackProvider()
"""Shared provider used when callers do not inject one."""


class RDKitProvider:
    """Provider backed by RDKit's periodic table and ETKDG embedding.

    Lookups that RDKit cannot answer (unknown symbols, missing or
    non-positive radii) fall back to :class:`FallbackProvider`.

    Args:
        random_seed: Seed passed to the embedding so that repeated
            calls produce the same conformer.

    Raises:
        ImportError: If rdkit is not installed.
    """

    def __init__(self, random_seed: int = 0xF00D) -> None:
        try:
            from rdkit import Chem
            from rdkit.Chem import AllChem
        except ImportError:
            raise ImportError(
                "rdkit is required for RDKitProvider(). "
                "Install it with: pip install rdkit"
            )
        self._table = Chem.GetPeriodicTable()
        self._all_chem = AllChem
        self._fallback = FallbackProvider()
        self.random_seed = random_seed

    def atomic_number(self, symbol: str) -> int:
        sym = normalise_symbol(symbol)
        if not sym:
            return 0
        try:
            z = int(self._table.GetAtomicNumber(sym))
        except (RuntimeError, ValueError):
            z = 0
        return z or self._fallback.atomic_number(sym)

    def covalent_radius(self, z: int) -> float:
        try:
            r = float(self._table.GetRcovalent(int(z)))
        except (RuntimeError, ValueError, OverflowError):
            r = 0.0
        if not math.isfinite(r) or r <= 0:
            return self._fallback.covalent_radius(z)
        return r

    def embed_3d(self, molecule: Any) -> bool:
        """Embed *molecule* (an RDKit ``Mol``) with ETKDG.

        Returns:
            ``True`` when a conformer was generated.
        """
        params = self._all_chem.ETKDGv3()
        params.randomSeed = self.random_seed
        status = self._all_chem.EmbedMolecule(molecule, params)
        if status != 0:
            logger.debug("ETKDG embedding failed with status %d", status)
        return status == 0

    def __repr__(self) -> str:
        return f"RDKitProvider(random_seed={self.random_seed!r})"


def resolve_radius(provider: ChemistryProvider, z: int) -> float:
    """Covalent radius for *z*, never non-finite or non-positive."""
    r = provider.covalent_radius(z)
    if r is None or not math.isfinite(r) or r <= 0:
        return DEFAULT_COVALENT_RADIUS
    return float(r)
