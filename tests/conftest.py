"""Shared test fixtures for temsim."""

import numpy as np
import pytest

from temsim.model import Atoms, RenderConfig

# Tetrahedral CH4 with C-H = 1.09 angstroms.
CH4_NUMBERS = np.array([6, 1, 1, 1, 1])
CH4_COORDS = np.array([
    [0.000, 0.000, 0.000],
    [0.629, 0.629, 0.629],
    [-0.629, -0.629, 0.629],
    [-0.629, 0.629, -0.629],
    [0.629, -0.629, -0.629],
])


@pytest.fixture
def ch4():
    """Return methane as an Atoms object."""
    return Atoms(numbers=CH4_NUMBERS.copy(), coords=CH4_COORDS.copy())


@pytest.fixture
def water():
    """Return a water molecule (O first)."""
    return Atoms(
        numbers=np.array([8, 1, 1]),
        coords=np.array([
            [0.000, 0.000, 0.000],
            [0.757, 0.586, 0.000],
            [-0.757, 0.586, 0.000],
        ]),
    )


@pytest.fixture
def small_config():
    """Return a small, noise-free, unblurred render configuration."""
    return RenderConfig(image_size=(64, 64), angstroms_per_pixel=0.1, blur_sigma=0.0)
