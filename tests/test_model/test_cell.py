"""Tests for PeriodicCell."""

import numpy as np
import pytest

from temsim.model import PeriodicCell


class TestPeriodicCell:
    def test_from_parameters(self):
        cell = PeriodicCell.from_parameters(3.0, 4.0, 5.0)
        np.testing.assert_allclose(np.diag(cell.vectors), [3.0, 4.0, 5.0])
        assert cell.volume == pytest.approx(60.0)

    def test_bad_shape_raises(self):
        with pytest.raises(ValueError, match="shape"):
            PeriodicCell(np.eye(2))

    def test_vectors_read_only(self):
        cell = PeriodicCell(np.eye(3))
        with pytest.raises(ValueError):
            cell.vectors[0, 0] = 2.0

    def test_degenerate(self):
        assert PeriodicCell(np.zeros((3, 3))).is_degenerate
        assert not PeriodicCell(np.eye(3)).is_degenerate

    def test_supercell(self):
        cell = PeriodicCell.from_parameters(2.0, 2.0, 2.0).supercell(2, 1, 3)
        np.testing.assert_allclose(np.diag(cell.vectors), [4.0, 2.0, 6.0])

    def test_equality_and_hash(self):
        a = PeriodicCell(np.eye(3))
        b = PeriodicCell(np.eye(3))
        assert a == b
        assert hash(a) == hash(b)
        assert a != PeriodicCell(2 * np.eye(3))
