"""Tests for temsim.lattice: cell vectors, fractional coordinates and minimum image."""

import numpy as np
import pytest

from temsim.lattice import (
    cell_vectors,
    frac_to_cart,
    inverse_basis,
    minimum_image,
    tile_shift,
)


class TestCellVectors:
    def test_cubic(self):
        np.testing.assert_allclose(cell_vectors(2.0, 2.0, 2.0), 2.0 * np.eye(3), atol=1e-12)

    def test_orthorhombic(self):
        basis = cell_vectors(3.0, 4.0, 5.0)
        np.testing.assert_allclose(np.diag(basis), [3.0, 4.0, 5.0], atol=1e-12)

    def test_hexagonal_gamma(self):
        basis = cell_vectors(2.5, 2.5, 6.0, 90, 90, 120)
        np.testing.assert_allclose(basis[1], [2.5 * np.cos(np.radians(120)), 2.5 * np.sin(np.radians(120)), 0.0], atol=1e-12)
        np.testing.assert_allclose(basis[2], [0.0, 0.0, 6.0], atol=1e-12)

    def test_vector_lengths_preserved(self):
        basis = cell_vectors(3.0, 4.0, 5.0, 80, 95, 105)
        np.testing.assert_allclose(np.linalg.norm(basis, axis=1), [3.0, 4.0, 5.0], rtol=1e-10)

    def test_first_vector_along_x(self):
        basis = cell_vectors(3.0, 4.0, 5.0, 70, 80, 100)
        np.testing.assert_allclose(basis[0], [3.0, 0.0, 0.0])


class TestFracToCart:
    def test_single_point(self):
        basis = cell_vectors(2.0, 3.0, 4.0)
        np.testing.assert_allclose(frac_to_cart(np.array([0.5, 0.5, 0.5]), basis), [1.0, 1.5, 2.0])

    def test_broadcasts_over_rows(self):
        basis = cell_vectors(2.0, 2.0, 2.0)
        frac = np.array([[0.0, 0.0, 0.0], [1.0, 0.5, 0.25]])
        np.testing.assert_allclose(frac_to_cart(frac, basis), [[0, 0, 0], [2.0, 1.0, 0.5]])

    def test_tile_shift(self):
        basis = cell_vectors(2.0, 3.0, 4.0)
        np.testing.assert_allclose(tile_shift(1, 2, 3, basis), [2.0, 6.0, 12.0])


class TestInverseBasis:
    def test_maps_cartesian_to_fractional(self):
        basis = cell_vectors(3.0, 4.0, 5.0, 80, 95, 105)
        inv = inverse_basis(basis)
        frac = np.array([0.2, 0.7, 0.4])
        np.testing.assert_allclose(inv @ frac_to_cart(frac, basis), frac, atol=1e-12)

    def test_degenerate_returns_none(self):
        basis = np.array([[1.0, 0, 0], [2.0, 0, 0], [0, 0, 1.0]])
        assert inverse_basis(basis) is None

    def test_non_finite_returns_none(self):
        basis = np.eye(3)
        basis[1, 1] = np.nan
        assert inverse_basis(basis) is None


class TestMinimumImage:
    def test_lattice_vector_maps_to_zero(self):
        basis = cell_vectors(3.0, 4.0, 5.0, 80, 95, 105)
        for row in basis:
            np.testing.assert_allclose(minimum_image(row, basis), np.zeros(3), atol=1e-12)

    def test_wraps_long_displacement(self):
        basis = cell_vectors(4.0, 4.0, 4.0)
        np.testing.assert_allclose(minimum_image(np.array([3.0, 0.0, 0.0]), basis), [-1.0, 0.0, 0.0], atol=1e-12)

    def test_short_displacement_unchanged(self):
        basis = cell_vectors(10.0, 10.0, 10.0)
        d = np.array([1.2, -0.7, 0.3])
        np.testing.assert_allclose(minimum_image(d, basis), d, atol=1e-12)

    def test_batch_of_displacements(self):
        basis = cell_vectors(4.0, 4.0, 4.0)
        d = np.array([[3.5, 0.0, 0.0], [0.0, -3.5, 0.0]])
        np.testing.assert_allclose(minimum_image(d, basis), [[-0.5, 0, 0], [0, 0.5, 0]], atol=1e-12)

    @pytest.mark.parametrize("basis", [
        None,
        np.array([[1.0, 0, 0], [2.0, 0, 0], [0, 0, 1.0]]),
    ])
    def test_degenerate_is_identity(self, basis):
        d = np.array([7.0, -8.0, 9.0])
        np.testing.assert_array_equal(minimum_image(d, basis), d)

    def test_result_within_half_cell(self):
        basis = cell_vectors(3.0, 3.0, 3.0)
        rng = np.random.default_rng(42)
        d = rng.uniform(-20, 20, size=(50, 3))
        wrapped = minimum_image(d, basis)
        assert np.all(np.abs(wrapped) <= 1.5 + 1e-9)
