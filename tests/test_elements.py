"""Tests for temsim.elements: tables, degree caps and providers."""

import math

import pytest

from temsim.elements import (
    COVALENT_RADII,
    DEFAULT_COVALENT_RADIUS,
    DEFAULT_PROVIDER,
    SYMBOL_TO_Z,
    ChemistryProvider,
    FallbackProvider,
    max_degree,
    normalise_symbol,
    resolve_radius,
)


class TestMaxDegree:
    @pytest.mark.parametrize("z, expected", [
        (1, 1), (9, 1), (17, 1), (35, 1), (53, 1),
        (3, 1), (11, 1), (19, 1),
        (8, 2), (7, 3), (5, 3), (6, 4), (14, 4), (15, 5), (16, 6),
        (12, 2), (20, 2),
        (26, 8), (29, 8), (47, 8), (79, 8),
        (57, 10), (64, 10), (92, 10),
        (2, 4), (13, 4), (54, 4),
    ])
    def test_caps(self, z, expected):
        assert max_degree(z) == expected


class TestNormaliseSymbol:
    @pytest.mark.parametrize("label, expected", [
        ("fe1", "Fe"),
        ("FE", "Fe"),
        ("O2-", "O"),
        ("c", "C"),
        ("  Cl ", "Cl"),
        ("", ""),
    ])
    def test_labels(self, label, expected):
        assert normalise_symbol(label) == expected


class TestFallbackProvider:
    def test_is_chemistry_provider(self):
        assert isinstance(DEFAULT_PROVIDER, ChemistryProvider)

    def test_atomic_number(self):
        provider = FallbackProvider()
        assert provider.atomic_number("C") == 6
        assert provider.atomic_number("au") == 79

    def test_unknown_symbol_is_zero(self):
        assert FallbackProvider().atomic_number("Xx") == 0

    def test_known_radius(self):
        assert FallbackProvider().covalent_radius(6) == COVALENT_RADII[6]

    def test_unknown_radius_is_default(self):
        assert FallbackProvider().covalent_radius(118) == DEFAULT_COVALENT_RADIUS

    def test_embed_unavailable(self):
        assert FallbackProvider().embed_3d(object()) is False

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            SYMBOL_TO_Z["Xx"] = 999  # type: ignore[index]

    def test_table_covers_minimal_set(self):
        for sym in ["H", "He", "Li", "Ca", "Fe", "Zn", "Br", "Ag", "I", "Au"]:
            z = SYMBOL_TO_Z[sym]
            assert z in COVALENT_RADII


class _BrokenProvider:
    def __init__(self, radius):
        self.radius = radius

    def atomic_number(self, symbol):
        return 0

    def covalent_radius(self, z):
        return self.radius

    def embed_3d(self, molecule):
        return False


class TestResolveRadius:
    @pytest.mark.parametrize("bad", [0.0, -1.0, math.nan, math.inf, None])
    def test_invalid_radius_falls_back(self, bad):
        assert resolve_radius(_BrokenProvider(bad), 6) == DEFAULT_COVALENT_RADIUS

    def test_valid_radius_passes_through(self):
        assert resolve_radius(_BrokenProvider(1.5), 6) == 1.5


class TestRDKitProvider:
    def test_radius_and_number(self):
        pytest.importorskip("rdkit")
        from temsim.elements import RDKitProvider

        provider = RDKitProvider()
        assert provider.atomic_number("c1") == 6
        assert 0.5 < provider.covalent_radius(6) < 1.0

    def test_embed(self):
        pytest.importorskip("rdkit")
        from rdkit import Chem

        from temsim.elements import RDKitProvider

        mol = Chem.AddHs(Chem.MolFromSmiles("CCO"))
        assert RDKitProvider().embed_3d(mol) is True
        assert mol.GetNumConformers() == 1
