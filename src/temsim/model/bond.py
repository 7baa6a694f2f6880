from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class BondOrder(IntEnum):
    """Bond multiplicity.  ``AROMATIC`` is drawn like a single bond."""

    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3
    AROMATIC = 4


@dataclass(frozen=True)
class Bond:
    """An undirected bond between two atoms.

    ``Bond(0, 1)`` and ``Bond(1, 0)`` describe the same bond; use
    :attr:`key` to compare bonds irrespective of direction.

    Attributes:
        index_a: Index of the first atom.
        index_b: Index of the second atom.
        order: Bond order, one of ``1``, ``2``, ``3`` or ``4``
            (aromatic / delocalised).

    Raises:
        ValueError: If the indices are equal or negative, or the order
            is not a valid :class:`BondOrder`.
    """

    index_a: int
    index_b: int
    order: int = BondOrder.SINGLE

    def __post_init__(self) -> None:
        if self.index_a == self.index_b:
            raise ValueError(
                f"bond cannot connect atom {self.index_a} to itself"
            )
        if self.index_a < 0 or self.index_b < 0:
            raise ValueError(
                f"bond indices must be non-negative, got "
                f"({self.index_a}, {self.index_b})"
            )
        try:
            BondOrder(self.order)
        except ValueError:
            raise ValueError(
                f"order must be 1, 2, 3 or 4, got {self.order!r}"
            ) from None

    @property
    def key(self) -> tuple[int, int]:
        """The unordered index pair as ``(min, max)``."""
        if self.index_a < self.index_b:
            return (self.index_a, self.index_b)
        return (self.index_b, self.index_a)

    def to_list(self) -> list[int]:
        """External ``[i, j, order]`` representation."""
        return [int(self.index_a), int(self.index_b), int(self.order)]

    @classmethod
    def from_sequence(cls, seq: Sequence[int]) -> Bond:
        """Build from ``[i, j]`` or ``[i, j, order]``."""
        if len(seq) < 2:
            raise ValueError(f"bond needs at least two indices, got {list(seq)!r}")
        order = int(seq[2]) if len(seq) > 2 and seq[2] is not None else 1
        return cls(int(seq[0]), int(seq[1]), order)


@dataclass(frozen=True)
class UnknownBonds:
    """Bond topology is not known: inference is permitted."""

    def __repr__(self) -> str:
        return "UNKNOWN_BONDS"


UNKNOWN_BONDS = UnknownBonds()


@dataclass(frozen=True)
class ExplicitBonds:
    """A fixed bond list.  Inference is forbidden, even when empty.

    Attributes:
        bonds: The bonds, as a tuple.  Lists and ``[i, j, order]``
            sequences are accepted and converted.
    """

    bonds: tuple[Bond, ...] = ()

    def __post_init__(self) -> None:
        converted = tuple(
            b if isinstance(b, Bond) else Bond.from_sequence(b)
            for b in self.bonds
        )
        object.__setattr__(self, "bonds", converted)

    def __len__(self) -> int:
        return len(self.bonds)

    def __iter__(self) -> Iterator[Bond]:
        return iter(self.bonds)

    def to_lists(self) -> list[list[int]]:
        return [b.to_list() for b in self.bonds]


BondTopology = UnknownBonds | ExplicitBonds
"""Either :data:`UNKNOWN_BONDS` or an :class:`ExplicitBonds` list."""


def as_topology(value: BondTopology | Sequence | None) -> BondTopology:
    """Convert the external bonds value to a :data:`BondTopology`.

    ``None`` means unknown; any sequence, including an empty one, is
    an explicit topology.  Topology values are returned unchanged.

    Raises:
        TypeError: If *value* is neither ``None``, a topology nor a
            sequence.
    """
    if value is None:
        return UNKNOWN_BONDS
    if isinstance(value, (UnknownBonds, ExplicitBonds)):
        return value
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise TypeError(
            f"bonds must be None, a BondTopology or a sequence, "
            f"got {type(value).__name__}"
        )
    return ExplicitBonds(tuple(value))
