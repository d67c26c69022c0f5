"""Dip latitude from magnetometer vector data."""

from __future__ import annotations

import numpy as np

from slidem import config

# Per the MAG L1b product definition, B is zeroed when a flag is 255.
MAG_FLAG_INVALID = 255


def dip_latitude(
    bn: np.ndarray,
    be: np.ndarray,
    bc: np.ndarray,
    flags_b: np.ndarray | None = None,
    flags_q: np.ndarray | None = None,
) -> np.ndarray:
    """
    Dip latitude tan(I) / 2 from B_NEC (Laundal and Richmond, 2017).

    Args:
        bn, be, bc: North, east and centre field components (nT).
        flags_b, flags_q: Optional MAG quality flags; a value of 255 in either
            marks the sample unusable.

    Returns:
        Dip latitude in degrees, with `MISSING_DIPLAT_VALUE` where the field
        is flagged invalid.
    """
    bn = np.asarray(bn, dtype=float)
    be = np.asarray(be, dtype=float)
    bc = np.asarray(bc, dtype=float)

    bh = np.hypot(bn, be)
    with np.errstate(divide="ignore", invalid="ignore"):
        diplat = np.degrees(np.arctan(bc / (2.0 * bh)))

    invalid = np.zeros(diplat.shape, dtype=bool)
    if flags_b is not None:
        invalid |= np.asarray(flags_b) == MAG_FLAG_INVALID
    if flags_q is not None:
        invalid |= np.asarray(flags_q) == MAG_FLAG_INVALID
    diplat[invalid] = config.MISSING_DIPLAT_VALUE
    return diplat


__all__ = ["MAG_FLAG_INVALID", "dip_latitude"]
