"""Rendering: projection, kernels, filters, scale bar and compositing."""

from temsim.rendering.compositor import (
    composite,
    paint_surface,
    render_image,
    resolve_bonds,
    save_image,
    to_rgba,
)
from temsim.rendering.filters import gaussian_blur, quantise
from temsim.rendering.projection import compute_pixel_coords
from temsim.rendering.scale_bar import draw_scale_bar, nice_scale_length
from temsim.rendering.worker import RenderResult, RenderWorker

__all__ = [
    "RenderResult",
    "RenderWorker",
    "composite",
    "compute_pixel_coords",
    "draw_scale_bar",
    "gaussian_blur",
    "nice_scale_length",
    "paint_surface",
    "quantise",
    "render_image",
    "resolve_bonds",
    "save_image",
    "to_rgba",
]
