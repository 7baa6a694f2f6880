"""Diagnostic validation of structure systems.

Validation is opt-in: it only runs when asked for explicitly or when
the ``TEMSIM_DEV`` environment variable is ``"1"``.  In normal use a
slightly malformed system still renders, with bad atoms and bonds
skipped.
"""

from __future__ import annotations

import logging
import os

import numpy as np

from temsim.model import BondOrder, ExplicitBonds, StructureSystem

logger = logging.getLogger(__name__)

DIAGNOSTIC_ENV_VAR = "TEMSIM_DEV"


class ContractError(ValueError):
    """A structure system broke one of its invariants."""


def is_diagnostic_mode() -> bool:
    """Whether ``TEMSIM_DEV=1`` is set in the environment."""
    return os.environ.get(DIAGNOSTIC_ENV_VAR, "") == "1"


def system_errors(system: StructureSystem) -> list[str]:
    """Describe every invariant violation in *system*.

    At most one atom error and one bond error are reported, each for
    the first offending record.
    """
    errors: list[str] = []
    atoms = system.atoms

    if len(atoms):
        bad_coords = np.flatnonzero(~atoms.finite)
        if bad_coords.size:
            errors.append(f"atom[{bad_coords[0]}] has non-finite coords (x, y, z)")
        else:
            bad_z = np.flatnonzero(atoms.numbers < 1)
            if bad_z.size:
                errors.append(
                    f"atom[{bad_z[0]}] has invalid Z {atoms.numbers[bad_z[0]]}"
                )

    if isinstance(system.bonds, ExplicitBonds):
        n = len(atoms)
        valid_orders = {int(o) for o in BondOrder}
        for k, bond in enumerate(system.bonds):
            i, j = bond.index_a, bond.index_b
            if not (0 <= i < n and 0 <= j < n):
                errors.append(f"bond[{k}] indices out of range (n={n})")
                break
            if i == j:
                errors.append(f"bond[{k}] connects atom {i} to itself")
                break
            if int(bond.order) not in valid_orders:
                errors.append(f"bond[{k}] has invalid order {bond.order!r}")
                break

    return errors


def validate_system(
    system: StructureSystem,
    stage: str = "build",
    *,
    diagnostic: bool | None = None,
) -> bool:
    """Check *system* against its invariants in diagnostic mode.

    Args:
        system: The system to check.
        stage: Pipeline stage named in the error message.
        diagnostic: Force validation on or off.  ``None`` (the
            default) follows :func:`is_diagnostic_mode`.

    Returns:
        ``True`` when the system passes or validation is off.

    Raises:
        ContractError: In diagnostic mode, naming the first error.
    """
    enabled = is_diagnostic_mode() if diagnostic is None else diagnostic
    if not enabled:
        return True

    errors = system_errors(system)
    if errors:
        raise ContractError(
            f"[temsim][{stage}] system validation failed: {errors[0]}"
        )
    logger.debug("[%s] %s passed validation", stage, system.summary())
    return True
