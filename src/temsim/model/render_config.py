from __future__ import annotations

from dataclasses import MISSING, dataclass, fields
from enum import StrEnum
from functools import cache

import numpy as np


class ScaleBarCorner(StrEnum):
    """Which corner of the image holds the scale bar.

    Attributes:
        BOTTOM_LEFT: Bottom-left corner (default).
        BOTTOM_RIGHT: Bottom-right corner.
        TOP_LEFT: Top-left corner.
        TOP_RIGHT: Top-right corner.
    """

    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"

    @property
    def is_right(self) -> bool:
        return self in (ScaleBarCorner.BOTTOM_RIGHT, ScaleBarCorner.TOP_RIGHT)

    @property
    def is_top(self) -> bool:
        return self in (ScaleBarCorner.TOP_LEFT, ScaleBarCorner.TOP_RIGHT)


_POSITIVE_FIELDS = (
    "angstroms_per_pixel",
    "atom_size_multiplier",
    "atom_size_exponent",
    "atom_dark_multiplier",
    "atom_dark_exponent",
    "core_sigma_relative",
    "core_z0",
)
_NON_NEGATIVE_FIELDS = (
    "blur_sigma",
    "noise_stddev",
    "dof_strength",
    "bond_width_px",
    "bond_amplitude",
    "scale_bar_margin_px",
    "core_relative",
)


@dataclass(frozen=True)
class RenderConfig:
    """Immutable settings for one micrograph render.

    A default ``RenderConfig()`` gives a 400x400 image at 0.1 angstrom
    per pixel with light blur, no noise and no depth of field.  Change
    individual settings with :func:`dataclasses.replace` or pass them
    as keyword overrides to :func:`~temsim.rendering.render_image`.

    Attributes:
        image_size: Output size as ``(height, width)`` in pixels.
        angstroms_per_pixel: Physical scale of one pixel.
        blur_sigma: Sigma (pixels) of the final uniform Gaussian blur.
            ``0`` disables it.
        background_gray: Gray level of empty space.  Contrast and
            inversion pivot around this value.
        invert: Mirror intensities around *background_gray*.
        noise_stddev: Standard deviation of additive Gaussian noise.
            ``0`` (the default) keeps the render deterministic.
        contrast: Multiplier applied to deviations from the background.
        draw_bonds: Whether bonds are drawn (and inferred when unknown).
        bond_width_px: Full width of a bond line in pixels.
        bond_amplitude: Scale applied to bond line and glow intensity.
        low_clip: Lower intensity clip, or ``None``.
        high_clip: Upper intensity clip, or ``None``.  When only one
            bound is set the other defaults to ``0`` or ``255``.
        focal_z: Depth (angstroms) of the focal plane.  ``None``
            derives it from *focus_fraction*.
        focus_fraction: Position of the focal plane within the atom
            z-range when *focal_z* is ``None``: ``0`` is the lowest
            atom, ``1`` the highest.
        dof_strength: Defocus blur per angstrom of distance from the
            focal plane.  ``0`` renders in a single pass.
        hide_front: Skip atoms (and depth slices) above the focal
            plane.
        show_scale_bar: Burn a scale bar into the image.
        scale_bar_corner: Corner for the scale bar.  Strings are
            coerced to :class:`ScaleBarCorner`.
        scale_bar_margin_px: Horizontal margin of the scale bar from
            the image edge.  Truncated to whole pixels.
        atom_size_multiplier: Overall scale of atom body widths.
        atom_size_exponent: Exponent on the covalent radius for atom
            body widths; larger values separate light and heavy atoms.
        atom_dark_multiplier: Scale of atom body darkness.
        atom_dark_exponent: Exponent on Z for atom darkness.
        core_sigma_relative: Bright core width relative to the body.
        core_relative: Bright core intensity relative to the body.
        core_z0: Atomic number at which the core is damped to half.

    Raises:
        ValueError: If sizes or scales are not positive, widths and
            strengths are negative, *background_gray* is outside
            ``[0, 255]`` or *focus_fraction* is outside ``[0, 1]``.
    """

    image_size: tuple[int, int] = (400, 400)
    angstroms_per_pixel: float = 0.1
    blur_sigma: float = 1.0
    background_gray: float = 127.0
    invert: bool = False
    noise_stddev: float = 0.0
    contrast: float = 1.0
    draw_bonds: bool = True
    bond_width_px: float = 6.0
    bond_amplitude: float = 0.4
    low_clip: float | None = None
    high_clip: float | None = None
    focal_z: float | None = None
    focus_fraction: float = 0.5
    dof_strength: float = 0.0
    hide_front: bool = False
    show_scale_bar: bool = False
    scale_bar_corner: ScaleBarCorner = ScaleBarCorner.BOTTOM_LEFT
    scale_bar_margin_px: int = 12
    atom_size_multiplier: float = 1.2
    atom_size_exponent: float = 1.25
    atom_dark_multiplier: float = 2.5
    atom_dark_exponent: float = 1.2
    core_sigma_relative: float = 0.18
    core_relative: float = 0.6
    core_z0: float = 12.0

    def __post_init__(self) -> None:
        size = tuple(int(v) for v in self.image_size)
        if len(size) != 2:
            raise ValueError(
                f"image_size must be (height, width), got {self.image_size!r}"
            )
        if size[0] <= 0 or size[1] <= 0:
            raise ValueError(f"image_size must be positive, got {size}")
        object.__setattr__(self, "image_size", size)

        if isinstance(self.scale_bar_corner, str):
            object.__setattr__(
                self, "scale_bar_corner", ScaleBarCorner(self.scale_bar_corner)
            )

        for name in _POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise ValueError(
                    f"{name} must be positive, got {getattr(self, name)}"
                )
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(
                    f"{name} must be non-negative, got {getattr(self, name)}"
                )
        object.__setattr__(
            self, "scale_bar_margin_px", int(self.scale_bar_margin_px),
        )
        if not 0.0 <= self.background_gray <= 255.0:
            raise ValueError(
                f"background_gray must be between 0 and 255, "
                f"got {self.background_gray}"
            )
        if not 0.0 <= self.focus_fraction <= 1.0:
            raise ValueError(
                f"focus_fraction must be between 0.0 and 1.0, "
                f"got {self.focus_fraction}"
            )

    @property
    def height(self) -> int:
        return self.image_size[0]

    @property
    def width(self) -> int:
        return self.image_size[1]

    @property
    def dof_enabled(self) -> bool:
        return self.dof_strength > 1e-6

    def resolve_focal_z(self, z_values: np.ndarray) -> float:
        """Focal plane depth for atoms at *z_values*.

        An explicit :attr:`focal_z` wins.  Otherwise the plane sits at
        :attr:`focus_fraction` of the way through the finite z-range,
        or at ``0`` when there are no finite depths.
        """
        if self.focal_z is not None:
            return float(self.focal_z)
        z = np.asarray(z_values, dtype=float)
        z = z[np.isfinite(z)]
        if z.size == 0:
            return 0.0
        z_min, z_max = float(z.min()), float(z.max())
        return z_min + self.focus_fraction * (z_max - z_min)

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted.
        """
        defaults = _config_defaults()
        d: dict = {}
        for field_name, default in defaults.items():
            val = getattr(self, field_name)
            if val == default:
                continue
            if field_name == "image_size":
                d[field_name] = list(val)
            elif field_name == "scale_bar_corner":
                d[field_name] = val.value
            else:
                d[field_name] = val
        return d

    @classmethod
    def from_dict(cls, d: dict) -> RenderConfig:
        """Deserialise from a dictionary.

        Missing fields use their defaults.

        Raises:
            ValueError: If *d* contains keys that are not fields.
        """
        defaults = _config_defaults()
        unknown = set(d) - set(defaults)
        if unknown:
            raise ValueError(
                f"unknown RenderConfig fields: {sorted(unknown)}"
            )
        kwargs = dict(d)
        if "image_size" in kwargs:
            kwargs["image_size"] = tuple(kwargs["image_size"])
        return cls(**kwargs)


@cache
def _config_defaults() -> dict:
    """``{field: default}`` for every :class:`RenderConfig` field."""
    return {
        f.name: f.default
        for f in fields(RenderConfig)
        if f.default is not MISSING
    }
