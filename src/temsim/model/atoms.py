from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np


@dataclass
class Atoms:
    """Atomic numbers and cartesian positions.

    Atoms have no identity beyond their index.  Coordinates may be
    non-finite; consumers skip such atoms rather than propagating them.

    Attributes:
        numbers: Atomic numbers, shape ``(n_atoms,)``, each ``>= 1``.
        coords: Cartesian coordinates in angstroms, shape
            ``(n_atoms, 3)``.

    Raises:
        ValueError: If *coords* does not have shape ``(n_atoms, 3)``,
            *numbers* is not one-dimensional, or their lengths differ.
    """

    numbers: np.ndarray
    coords: np.ndarray

    def __post_init__(self) -> None:
        self.numbers = np.asarray(self.numbers, dtype=int).reshape(-1)
        coords = np.asarray(self.coords, dtype=float)
        if coords.size == 0:
            coords = coords.reshape(0, 3)
        if coords.ndim != 2 or coords.shape[1] != 3:
            raise ValueError(
                f"coords must have shape (n_atoms, 3), got {coords.shape}"
            )
        if coords.shape[0] != self.numbers.shape[0]:
            raise ValueError(
                f"numbers has {self.numbers.shape[0]} entries but coords "
                f"has {coords.shape[0]} rows"
            )
        self.coords = coords

    def __len__(self) -> int:
        return int(self.numbers.shape[0])

    @property
    def x(self) -> np.ndarray:
        return self.coords[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.coords[:, 1]

    @property
    def z(self) -> np.ndarray:
        return self.coords[:, 2]

    @property
    def finite(self) -> np.ndarray:
        """Boolean mask of atoms whose three coordinates are all finite."""
        return np.all(np.isfinite(self.coords), axis=1)

    def subset(self, indices: Sequence[int] | np.ndarray) -> Atoms:
        """Return a new :class:`Atoms` holding only *indices*, in order."""
        idx = np.asarray(indices, dtype=int)
        return Atoms(numbers=self.numbers[idx].copy(), coords=self.coords[idx].copy())

    def copy(self) -> Atoms:
        return Atoms(numbers=self.numbers.copy(), coords=self.coords.copy())

    @classmethod
    def empty(cls) -> Atoms:
        return cls(numbers=np.zeros(0, dtype=int), coords=np.zeros((0, 3)))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, float]]) -> Atoms:
        """Build from ``{"Z", "x", "y", "z"}`` mappings.

        A missing ``"z"`` is taken as ``0.0``.  Missing ``"x"`` or
        ``"y"`` become NaN, so the atom is carried but never drawn.
        """
        numbers: list[int] = []
        coords: list[list[float]] = []
        for rec in records:
            numbers.append(int(rec["Z"]))
            coords.append([
                float(rec.get("x", np.nan)),
                float(rec.get("y", np.nan)),
                float(rec.get("z", 0.0)),
            ])
        if not numbers:
            return cls.empty()
        return cls(numbers=np.array(numbers), coords=np.array(coords))

    def to_records(self) -> list[dict[str, float]]:
        """Inverse of :meth:`from_records`."""
        return [
            {"Z": int(z), "x": float(x), "y": float(y), "z": float(zz)}
            for z, (x, y, zz) in zip(self.numbers, self.coords)
        ]
