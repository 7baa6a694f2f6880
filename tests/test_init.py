"""Tests for temsim public API."""

import numpy as np

import temsim


class TestPublicAPI:
    def test_all_names_importable(self):
        for name in temsim.__all__:
            assert hasattr(temsim, name), f"{name} not importable from temsim"

    def test_end_to_end_records_to_png(self, tmp_path):
        atoms = temsim.Atoms.from_records([
            {"Z": 6, "x": 0.0, "y": 0.0, "z": 0.0},
            {"Z": 8, "x": 1.2, "y": 0.0, "z": 0.0},
        ])
        out = tmp_path / "co.png"
        image = temsim.render_image(atoms, image_size=(96, 128), output=out)
        assert image.shape == (96, 128)
        assert out.exists()
        assert out.stat().st_size > 0

    def test_end_to_end_build_system(self, tmp_path):
        system = temsim.build_system((
            [{"Z": 8, "x": 0.0, "y": 0.0, "z": 0.0},
             {"Z": 1, "x": 0.757, "y": 0.586, "z": 0.0},
             {"Z": 1, "x": -0.757, "y": 0.586, "z": 0.0}],
            None,
            "water",
        ))
        bonds = temsim.infer_bonds(system.atoms, system.cell)
        assert len(bonds) == 2

        config_path = tmp_path / "render.json"
        temsim.save_config(config_path, temsim.RenderConfig(image_size=(64, 64)))
        config = temsim.load_config(config_path)
        image = temsim.render_image(system.atoms, system.bonds, config)
        assert image.shape == (64, 64)
        assert np.any(image != image[0, 0])
