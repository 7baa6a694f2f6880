from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from temsim.lattice import cell_vectors, inverse_basis


@dataclass(frozen=True)
class PeriodicCell:
    """Periodic boundary conditions given by three lattice vectors.

    A degenerate cell (non-finite or zero volume) is allowed to exist
    but disables periodic handling: :attr:`is_degenerate` is ``True``
    and minimum-image distances fall back to plain differences.

    Attributes:
        vectors: Lattice vectors as the rows of a ``(3, 3)`` array.

    Raises:
        ValueError: If *vectors* does not have shape ``(3, 3)``.
    """

    vectors: np.ndarray

    def __post_init__(self) -> None:
        vectors = np.array(self.vectors, dtype=float)
        if vectors.shape != (3, 3):
            raise ValueError(
                f"vectors must have shape (3, 3), got {vectors.shape}"
            )
        vectors.flags.writeable = False
        object.__setattr__(self, "vectors", vectors)

    @classmethod
    def from_parameters(
        cls,
        a: float,
        b: float,
        c: float,
        alpha: float = 90.0,
        beta: float = 90.0,
        gamma: float = 90.0,
    ) -> PeriodicCell:
        """Build from cell lengths (angstroms) and angles (degrees)."""
        return cls(cell_vectors(a, b, c, alpha, beta, gamma))

    @property
    def is_degenerate(self) -> bool:
        return inverse_basis(self.vectors) is None

    @property
    def volume(self) -> float:
        return float(abs(np.linalg.det(self.vectors)))

    def supercell(self, nx: int, ny: int, nz: int) -> PeriodicCell:
        """The cell scaled by ``(nx, ny, nz)`` along its three vectors."""
        return PeriodicCell(self.vectors * np.array([[nx], [ny], [nz]], dtype=float))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PeriodicCell):
            return NotImplemented
        return bool(np.array_equal(self.vectors, other.vectors))

    def __hash__(self) -> int:
        return hash(self.vectors.tobytes())
