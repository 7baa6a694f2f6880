"""Tests for temsim.construction.bonds: geometric bond inference."""

import numpy as np
import pytest

from temsim.construction import bonds as bonds_module
from temsim.construction.bonds import _pair_blocks, bond_degrees, infer_bonds
from temsim.construction.tiling import tile_supercell
from temsim.elements import max_degree
from temsim.lattice import cell_vectors
from temsim.model import UNKNOWN_BONDS, Atoms, Bond, PeriodicCell


def _pair(z1, z2, distance):
    return Atoms(
        numbers=np.array([z1, z2]),
        coords=np.array([[0.0, 0.0, 0.0], [distance, 0.0, 0.0]]),
    )


class _FixedRadiusProvider:
    def __init__(self, radius):
        self.radius = radius

    def atomic_number(self, symbol):
        return 0

    def covalent_radius(self, z):
        return self.radius

    def embed_3d(self, molecule):
        return False


class TestInferBondsReferenceStructures:
    def test_two_carbons_one_angstrom(self):
        assert infer_bonds(_pair(6, 6, 1.0)) == [Bond(0, 1, 1)]

    def test_water(self, water):
        bonds = infer_bonds(water)
        assert {b.key for b in bonds} == {(0, 1), (0, 2)}
        degree = bond_degrees(bonds, len(water))
        np.testing.assert_array_equal(degree, [2, 1, 1])

    def test_methane(self, ch4):
        bonds = infer_bonds(ch4)
        assert {b.key for b in bonds} == {(0, 1), (0, 2), (0, 3), (0, 4)}

    def test_periodic_neighbour_in_tiled_cell(self):
        a = 1.5
        unit = Atoms(numbers=np.array([6]), coords=np.array([[0.1, 0.1, 0.1]]))
        atoms, _ = tile_supercell(unit, cell_vectors(a, a, a), (2, 1, 1), UNKNOWN_BONDS)
        cell = PeriodicCell.from_parameters(2 * a, a, a)
        bonds = infer_bonds(atoms, cell)
        assert bonds == [Bond(0, 1, 1)]

    def test_periodic_ring_closes_across_boundary(self):
        a = 1.5
        unit = Atoms(numbers=np.array([6]), coords=np.zeros((1, 3)))
        atoms, _ = tile_supercell(unit, cell_vectors(a, a, a), (4, 1, 1), UNKNOWN_BONDS)
        cell = PeriodicCell.from_parameters(4 * a, a, a)

        periodic = {b.key for b in infer_bonds(atoms, cell)}
        assert periodic == {(0, 1), (1, 2), (2, 3), (0, 3)}

        direct = {b.key for b in infer_bonds(atoms)}
        assert direct == {(0, 1), (1, 2), (2, 3)}

    def test_degenerate_cell_ignored(self):
        atoms = _pair(6, 6, 1.4)
        cell = PeriodicCell(np.zeros((3, 3)))
        assert infer_bonds(atoms, cell) == infer_bonds(atoms)


class TestInferBondsThresholds:
    def test_too_far(self):
        assert infer_bonds(_pair(6, 6, 2.2)) == []

    def test_hydrogen_cap(self):
        assert infer_bonds(_pair(6, 1, 1.2)) == [Bond(0, 1, 1)]
        assert infer_bonds(_pair(6, 1, 1.3)) == []

    def test_noisy_pair_cap(self):
        # 1.25 * (0.66 + 0.66) + 0.2 = 1.85 for O-O.
        assert infer_bonds(_pair(8, 8, 1.8)) == [Bond(0, 1, 1)]
        assert infer_bonds(_pair(8, 8, 1.9)) == []

    def test_absolute_cap(self):
        assert infer_bonds(_pair(26, 26, 2.2)) == [Bond(0, 1, 1)]
        assert infer_bonds(_pair(26, 26, 2.4)) == []
        assert infer_bonds(_pair(26, 26, 2.4), max_absolute_distance=3.0) == [Bond(0, 1, 1)]

    def test_scale_factor(self):
        assert infer_bonds(_pair(6, 6, 1.9), scale_factor=1.0) == []
        assert infer_bonds(_pair(6, 6, 1.9)) == [Bond(0, 1, 1)]

    def test_no_hydrogen_pairs(self):
        assert infer_bonds(_pair(1, 1, 0.74)) == []

    def test_provider_radius_used(self):
        atoms = _pair(6, 6, 2.2)
        assert infer_bonds(atoms, provider=_FixedRadiusProvider(1.0)) == [Bond(0, 1, 1)]

    def test_invalid_provider_radius_falls_back(self):
        atoms = _pair(6, 6, 1.4)
        assert infer_bonds(atoms, provider=_FixedRadiusProvider(float("nan"))) == [Bond(0, 1, 1)]


class TestInferBondsAnomalies:
    def test_fewer_than_two_atoms(self):
        assert infer_bonds(Atoms.empty()) == []
        assert infer_bonds(Atoms(numbers=[6], coords=[[0.0, 0.0, 0.0]])) == []

    def test_non_finite_atom_skipped(self):
        atoms = Atoms(
            numbers=[6, 6, 6],
            coords=[[0.0, 0.0, 0.0], [np.nan, 0.0, 0.0], [1.4, 0.0, 0.0]],
        )
        assert infer_bonds(atoms) == [Bond(0, 2, 1)]

    def test_infinite_atom_skipped(self):
        atoms = Atoms(numbers=[6, 6], coords=[[0.0, 0.0, 0.0], [np.inf, 0.0, 0.0]])
        assert infer_bonds(atoms) == []

    def test_coincident_atoms_skipped(self):
        assert infer_bonds(_pair(6, 6, 1e-4)) == []


class TestInferBondsGreedy:
    def test_oxygen_degree_cap_breaks_ties_by_index(self):
        s = 0.554
        atoms = Atoms(
            numbers=[8, 1, 1, 1, 1],
            coords=[[0, 0, 0], [s, s, s], [-s, -s, s], [-s, s, -s], [s, -s, -s]],
        )
        assert infer_bonds(atoms) == [Bond(0, 1, 1), Bond(0, 2, 1)]

    def test_hydrogen_takes_the_closer_partner(self):
        atoms = Atoms(
            numbers=[6, 1, 6],
            coords=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.1, 0.0, 0.0]],
        )
        bonds = infer_bonds(atoms)
        assert Bond(0, 1, 1) in bonds
        assert Bond(1, 2, 1) not in bonds

    def test_best_score_accepted_first(self):
        # Three carbons in a line: the short pair ranks first.
        atoms = Atoms(
            numbers=[6, 6, 6],
            coords=[[0.0, 0.0, 0.0], [1.6, 0.0, 0.0], [2.8, 0.0, 0.0]],
        )
        assert infer_bonds(atoms) == [Bond(1, 2, 1), Bond(0, 1, 1)]

    def test_indices_ordered_and_unique(self, ch4):
        bonds = infer_bonds(ch4)
        assert all(b.index_a < b.index_b for b in bonds)
        assert len({b.key for b in bonds}) == len(bonds)


class TestInferBondsProperties:
    @pytest.fixture
    def cloud(self):
        rng = np.random.default_rng(7)
        n = 60
        numbers = rng.choice([1, 1, 1, 6, 7, 8], size=n)
        coords = rng.uniform(0.0, 6.0, size=(n, 3))
        return Atoms(numbers=numbers, coords=coords)

    def test_invariants(self, cloud):
        bonds = infer_bonds(cloud)
        numbers = cloud.numbers
        degree = bond_degrees(bonds, len(cloud))
        for b in bonds:
            assert not (numbers[b.index_a] == 1 and numbers[b.index_b] == 1)
            assert b.order == 1
        for i, z in enumerate(numbers):
            assert degree[i] <= max_degree(int(z))
            if z == 1:
                assert degree[i] <= 1

    def test_deterministic(self, cloud):
        assert infer_bonds(cloud) == infer_bonds(cloud.copy())

    def test_deterministic_periodic(self, cloud):
        cell = PeriodicCell.from_parameters(6.0, 6.0, 6.0)
        assert infer_bonds(cloud, cell) == infer_bonds(cloud, cell)

    @pytest.mark.parametrize("block", [1, 7, 59, 60, 61])
    def test_block_size_does_not_change_result(self, cloud, block, monkeypatch):
        cell = PeriodicCell.from_parameters(6.0, 6.0, 6.0)
        expected = infer_bonds(cloud), infer_bonds(cloud, cell)
        monkeypatch.setattr(bonds_module, "_PAIR_BLOCK", block)
        assert (infer_bonds(cloud), infer_bonds(cloud, cell)) == expected


class TestPairBlocks:
    @pytest.mark.parametrize("n_atoms", [2, 5, 13])
    @pytest.mark.parametrize("block", [1, 4, 100])
    def test_matches_upper_triangle(self, n_atoms, block):
        parts = list(_pair_blocks(n_atoms, block))
        ii = np.concatenate([p[0] for p in parts])
        jj = np.concatenate([p[1] for p in parts])
        ref_i, ref_j = np.triu_indices(n_atoms, k=1)
        np.testing.assert_array_equal(ii, ref_i)
        np.testing.assert_array_equal(jj, ref_j)

    def test_blocks_bounded(self):
        sizes = [len(ii) for ii, _ in _pair_blocks(40, 80)]
        assert len(sizes) > 1
        assert max(sizes) <= 80


class TestBondDegrees:
    def test_counts(self):
        degree = bond_degrees([Bond(0, 1), Bond(1, 2)], 4)
        np.testing.assert_array_equal(degree, [1, 2, 1, 0])
