"""Scale bar length selection and drawing."""

from __future__ import annotations

import logging
import math
from functools import lru_cache

import numpy as np
from matplotlib.font_manager import FontProperties
from matplotlib.textpath import TextPath
from matplotlib.transforms import Affine2D

from temsim.model import ScaleBarCorner

logger = logging.getLogger(__name__)

MIN_BAR_PX = 80
MAX_BAR_PX = 200
_MANTISSAS = (1, 2, 5)


def nice_scale_length(
    angstroms_per_pixel: float,
    width_px: int,
    min_px: int = MIN_BAR_PX,
    max_px: int = MAX_BAR_PX,
) -> tuple[int, float]:
    """Choose a round scale bar length.

    Candidates are ``m * 10**k`` angstroms with ``m`` in ``{1, 2, 5}``.
    Of those whose pixel length lies in ``[min_px, max_px]``, the one
    closest to ``clamp(0.25 * width_px, min_px, max_px)`` wins.  If
    none fits, the bar is *max_px* long with the matching (not round)
    length in angstroms.

    Returns:
        Tuple of ``(length_px, length_angstroms)``; ``(0, 0.0)`` for a
        non-positive width or pixel size.
    """
    if width_px <= 0 or angstroms_per_pixel <= 0:
        return (0, 0.0)
    target_px = min(max(0.25 * width_px, min_px), max_px)
    target_a = target_px * angstroms_per_pixel
    k = math.floor(math.log10(target_a))

    best: tuple[float, float] | None = None
    for shift in range(-3, 4):
        base = 10.0 ** (k + shift)
        for m in _MANTISSAS:
            val_a = m * base
            val_px = val_a / angstroms_per_pixel
            if min_px <= val_px <= max_px:
                if best is None or abs(val_px - target_px) < abs(best[0] - target_px):
                    best = (val_px, val_a)

    if best is None:
        return (max_px, max_px * angstroms_per_pixel)
    return (int(math.floor(best[0] + 0.5)), best[1])


def format_length(length_angstroms: float) -> str:
    """Label text: whole numbers without decimals, else one decimal."""
    if abs(length_angstroms - round(length_angstroms)) < 1e-6:
        return f"{round(length_angstroms)} Å"
    return f"{length_angstroms:.1f} Å"


@lru_cache(maxsize=32)
def text_mask(text: str, size_px: int) -> np.ndarray:
    """Rasterise *text* to a boolean mask with rows running downwards.

    The glyph outlines come from matplotlib's :class:`TextPath`; a
    pixel is set when its centre lies inside the outline.  The mask is
    cropped to the ink bounding box.
    """
    path = TextPath((0.0, 0.0), text, size=size_px, prop=FontProperties(family="sans-serif"))
    bbox = path.get_extents()
    width = max(1, math.ceil(bbox.width))
    height = max(1, math.ceil(bbox.height))
    # TextPath is y-up; flip so row 0 is the top of the ink.
    path = path.transformed(
        Affine2D().translate(-bbox.xmin, -bbox.ymin).scale(1.0, -1.0).translate(0.0, bbox.height)
    )
    rows, cols = np.mgrid[0:height, 0:width]
    centres = np.column_stack([cols.ravel() + 0.5, rows.ravel() + 0.5])
    mask = path.contains_points(centres).reshape(height, width)
    mask.flags.writeable = False
    return mask


def _fill_rect(image: np.ndarray, x: int, y: int, w: int, h: int, value: int) -> None:
    img_h, img_w = image.shape
    xlo, xhi = max(0, x), min(img_w, x + w)
    ylo, yhi = max(0, y), min(img_h, y + h)
    if xlo < xhi and ylo < yhi:
        image[ylo:yhi, xlo:xhi] = value


def _blit_mask(image: np.ndarray, mask: np.ndarray, x: int, y: int, value: int) -> None:
    img_h, img_w = image.shape
    mh, mw = mask.shape
    xlo, xhi = max(0, x), min(img_w, x + mw)
    ylo, yhi = max(0, y), min(img_h, y + mh)
    if xlo >= xhi or ylo >= yhi:
        return
    sub = mask[ylo - y:yhi - y, xlo - x:xhi - x]
    image[ylo:yhi, xlo:xhi][sub] = value


def draw_scale_bar(
    image: np.ndarray,
    angstroms_per_pixel: float,
    corner: ScaleBarCorner | str = ScaleBarCorner.BOTTOM_LEFT,
    margin: int = 12,
    invert: bool = False,
) -> tuple[int, float]:
    """Burn a scale bar with end ticks and a length label into *image*.

    The bar is ``clamp(W // 80, 4, 18)`` pixels thick and sits
    *margin* pixels from the left or right edge and
    ``max(20, int(1.6 * margin))`` pixels from the top or bottom edge.
    The label goes below a top bar and above a bottom bar, aligned to
    the bar's outer end.  Everything is drawn at 255, or 0 when
    *invert* is set.

    Args:
        image: ``uint8`` image of shape ``(H, W)``, modified in place.
        angstroms_per_pixel: Physical size of one pixel.
        corner: Corner to place the bar in.
        margin: Horizontal distance from the image edge in pixels.
        invert: Draw in black instead of white.

    Returns:
        The ``(length_px, length_angstroms)`` drawn, as from
        :func:`nice_scale_length`.
    """
    corner = ScaleBarCorner(corner)
    margin = int(margin)
    h, w = image.shape
    bar_px, bar_a = nice_scale_length(angstroms_per_pixel, w)
    if bar_px <= 0:
        return (bar_px, bar_a)

    value = 0 if invert else 255
    thickness = max(4, min(18, w // 80))
    tick_w = max(2, thickness - 2)
    tick_h = int(thickness * 1.8)
    gap = max(8, thickness // 2 + 6)
    pad_edge = max(20, int(margin * 1.6))

    if corner.is_right:
        x1 = w - margin
        x0 = x1 - bar_px
    else:
        x0 = margin
        x1 = margin + bar_px
    y = pad_edge if corner.is_top else h - pad_edge

    _fill_rect(image, x0, y - thickness // 2, bar_px, thickness, value)
    _fill_rect(image, x0, y - tick_h // 2, tick_w, tick_h, value)
    _fill_rect(image, x1 - tick_w, y - tick_h // 2, tick_w, tick_h, value)

    mask = text_mask(format_length(bar_a), max(14, 2 * thickness))
    tx = x1 - mask.shape[1] if corner.is_right else x0
    if corner.is_top:
        ty = y + thickness // 2 + gap
    else:
        ty = y - thickness // 2 - gap - mask.shape[0]
    ty = max(4, min(h - 16, ty))
    _blit_mask(image, mask, tx, ty, value)

    logger.debug("scale bar %s: %d px = %g A", corner.value, bar_px, bar_a)
    return (bar_px, bar_a)
