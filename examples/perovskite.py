"""Demo: 3x3x2 SrTiO3 perovskite supercell with depth of field."""

from pathlib import Path

import numpy as np

from temsim import UNKNOWN_BONDS, Atoms, render_image, tile_supercell
from temsim.lattice import cell_vectors, frac_to_cart

OUTPUT = Path(__file__).resolve().parent / "perovskite.png"

# SrTiO3 cubic perovskite, a = 3.905 Angstroms.
a = 3.905
basis = cell_vectors(a, a, a)

numbers = np.array([38, 22, 8, 8, 8])
frac = np.array([
    (0.0, 0.0, 0.0),  # Sr
    (0.5, 0.5, 0.5),  # Ti
    (0.5, 0.5, 0.0),  # O
    (0.5, 0.0, 0.5),
    (0.0, 0.5, 0.5),
])
unit = Atoms(numbers=numbers, coords=frac_to_cart(frac, basis))

atoms, bonds = tile_supercell(unit, basis, (3, 3, 2), UNKNOWN_BONDS)

image = render_image(
    atoms,
    bonds,
    image_size=(512, 512),
    angstroms_per_pixel=0.05,
    dof_strength=0.15,
    focus_fraction=1.0,
    noise_stddev=2.0,
    rng=np.random.default_rng(0),
    show_scale_bar=True,
    scale_bar_corner="bottom_right",
    output=OUTPUT,
)
print(f"Rendered {len(atoms)} atoms ({image.shape[1]}x{image.shape[0]}) to {OUTPUT}")
