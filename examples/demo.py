"""Demo script: render methane with inferred bonds to a PNG."""

import logging
from pathlib import Path

from temsim import Atoms, infer_bonds, render_image, setup_logging

OUTPUT = Path(__file__).resolve().parent / "ch4.png"

CH4 = [
    {"Z": 6, "x": 0.000, "y": 0.000, "z": 0.000},
    {"Z": 1, "x": 0.629, "y": 0.629, "z": 0.629},
    {"Z": 1, "x": -0.629, "y": -0.629, "z": 0.629},
    {"Z": 1, "x": -0.629, "y": 0.629, "z": -0.629},
    {"Z": 1, "x": 0.629, "y": -0.629, "z": -0.629},
]


def main():
    setup_logging(logging.DEBUG)
    atoms = Atoms.from_records(CH4)
    bonds = infer_bonds(atoms)
    print(f"Loaded {len(atoms)} atoms, inferred {len(bonds)} bond(s)")

    render_image(
        atoms,
        bonds,
        image_size=(256, 256),
        angstroms_per_pixel=0.02,
        show_scale_bar=True,
        output=OUTPUT,
    )
    print(f"Rendered to {OUTPUT}")


if __name__ == "__main__":
    main()
