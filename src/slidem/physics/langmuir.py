"""
Langmuir probe input selection.

The EXTD LP dataset provides electron temperature and spacecraft potential
from each of the two spherical probes (high-gain, low-gain) plus a blended
value. When blended values are not used, the best probe is chosen from the LP
quality flags, and the Te from that probe is corrected with the
per-satellite linear calibrations of Lomidze et al. (2021), Estimation of ion
temperature along the Swarm satellite orbits, Earth and Space Science.
"""

from __future__ import annotations

from enum import IntEnum, IntFlag

import numpy as np

from slidem import config


class LpSource(IntEnum):
    """Probe that supplied an LP quantity."""

    NONE = 0b00
    HGN = 0b01
    LGN = 0b10
    BLENDED = 0b11


class LpFlag(IntFlag):
    HGN_OVERFLOW_LINEAR_BIAS = 1 << 2
    LGN_OVERFLOW_LINEAR_BIAS = 1 << 3
    HGN_OVERFLOW_RETARDED_BIAS = 1 << 4
    LGN_OVERFLOW_RETARDED_BIAS = 1 << 5
    HGN_ZERO_TRACKING_FAILED = 1 << 6
    LGN_ZERO_TRACKING_FAILED = 1 << 7
    HGN_LINEAR_BIAS_LESS_THAN_RETARDED_BIAS = 1 << 9
    LGN_LINEAR_BIAS_LESS_THAN_RETARDED_BIAS = 1 << 10
    HGN_LINEAR_BIAS_GREATER_THAN_5V_16BIT_OVERFLOW = 1 << 11
    LGN_LINEAR_BIAS_GREATER_THAN_5V_16BIT_OVERFLOW = 1 << 12
    HGN_ION_ADMITTANCE_GREATER_THAN_RETARDED_ADMITTANCE = 1 << 13
    LGN_ION_ADMITTANCE_GREATER_THAN_RETARDED_ADMITTANCE = 1 << 14
    HGN_ION_CURRENT_GREATER_THAN_RETARDED_CURRENT = 1 << 15
    LGN_ION_CURRENT_GREATER_THAN_RETARDED_CURRENT = 1 << 16
    HGN_RETARDED_ADMITTANCE_GREATER_THAN_LINEAR_ADMITTANCE = 1 << 17
    LGN_RETARDED_ADMITTANCE_GREATER_THAN_LINEAR_ADMITTANCE = 1 << 18
    HGN_RETARDED_CURRENT_GREATER_THAN_LINEAR_CURRENT = 1 << 19
    LGN_RETARDED_CURRENT_GREATER_THAN_LINEAR_CURRENT = 1 << 20
    NE_FROM_LGN_PROBE = 1 << 21


TE_HGN_MASK = int(
    LpFlag.HGN_OVERFLOW_LINEAR_BIAS
    | LpFlag.HGN_OVERFLOW_RETARDED_BIAS
    | LpFlag.HGN_ZERO_TRACKING_FAILED
    | LpFlag.HGN_ION_ADMITTANCE_GREATER_THAN_RETARDED_ADMITTANCE
    | LpFlag.HGN_ION_CURRENT_GREATER_THAN_RETARDED_CURRENT
)
TE_LGN_MASK = int(
    LpFlag.LGN_OVERFLOW_LINEAR_BIAS
    | LpFlag.LGN_OVERFLOW_RETARDED_BIAS
    | LpFlag.LGN_ZERO_TRACKING_FAILED
    | LpFlag.LGN_ION_ADMITTANCE_GREATER_THAN_RETARDED_ADMITTANCE
    | LpFlag.LGN_ION_CURRENT_GREATER_THAN_RETARDED_CURRENT
)
VS_HGN_MASK = TE_HGN_MASK | int(
    LpFlag.HGN_LINEAR_BIAS_LESS_THAN_RETARDED_BIAS
    | LpFlag.HGN_LINEAR_BIAS_GREATER_THAN_5V_16BIT_OVERFLOW
    | LpFlag.HGN_RETARDED_ADMITTANCE_GREATER_THAN_LINEAR_ADMITTANCE
    | LpFlag.HGN_RETARDED_CURRENT_GREATER_THAN_LINEAR_CURRENT
)
VS_LGN_MASK = TE_LGN_MASK | int(
    LpFlag.LGN_LINEAR_BIAS_LESS_THAN_RETARDED_BIAS
    | LpFlag.LGN_LINEAR_BIAS_GREATER_THAN_5V_16BIT_OVERFLOW
    | LpFlag.LGN_RETARDED_ADMITTANCE_GREATER_THAN_LINEAR_ADMITTANCE
    | LpFlag.LGN_RETARDED_CURRENT_GREATER_THAN_LINEAR_CURRENT
)

# Two lowest LP flag bits: 0 means only LGN usable, 3 means only HGN usable.
_PROBE_SELECTION_BITS = 0b11

# (gain, offset K) per satellite, Lomidze et al. (2021)
TE_HGN_CALIBRATION = {"A": (1.2844, -1083.0), "B": (1.1626, -827.0), "C": (1.2153, -916.0)}
TE_LGN_CALIBRATION = {"A": (1.0, -723.0), "B": (1.0, -698.0), "C": (1.0, -682.0)}


def _probe_usable(lp_flags: np.ndarray, mask: int, excluded_selection: int) -> np.ndarray:
    return ((lp_flags & mask) == 0) & ((lp_flags & _PROBE_SELECTION_BITS) != excluded_selection)


def select_electron_temperature(
    satellite: str,
    te_hgn: np.ndarray,
    te_lgn: np.ndarray,
    lp_flags: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Calibrated electron temperature from the best available probe.

    Returns:
        (te, source) arrays. Where neither probe is usable, or the satellite
        has no calibration, Te is `MISSING_TE_VALUE` and the source is
        `LpSource.NONE`.
    """
    lp_flags = np.asarray(lp_flags).astype(np.uint32)
    te_hgn = np.asarray(te_hgn, dtype=float)
    te_lgn = np.asarray(te_lgn, dtype=float)

    te = np.full(lp_flags.shape, config.MISSING_TE_VALUE)
    source = np.full(lp_flags.shape, int(LpSource.NONE), dtype=np.uint32)

    use_hgn = _probe_usable(lp_flags, TE_HGN_MASK, 0)
    use_lgn = ~use_hgn & _probe_usable(lp_flags, TE_LGN_MASK, 3)

    sat = satellite.upper()
    if sat in TE_HGN_CALIBRATION:
        gain, offset = TE_HGN_CALIBRATION[sat]
        te[use_hgn] = gain * te_hgn[use_hgn] + offset
        gain, offset = TE_LGN_CALIBRATION[sat]
        te[use_lgn] = gain * te_lgn[use_lgn] + offset
    source[use_hgn] = int(LpSource.HGN)
    source[use_lgn] = int(LpSource.LGN)
    return te, source


def select_spacecraft_potential(
    vs_hgn: np.ndarray,
    vs_lgn: np.ndarray,
    lp_flags: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Spacecraft potential from the best available probe, with its source."""
    lp_flags = np.asarray(lp_flags).astype(np.uint32)
    vs_hgn = np.asarray(vs_hgn, dtype=float)
    vs_lgn = np.asarray(vs_lgn, dtype=float)

    use_hgn = _probe_usable(lp_flags, VS_HGN_MASK, 0)
    use_lgn = ~use_hgn & _probe_usable(lp_flags, VS_LGN_MASK, 3)

    vs = np.full(lp_flags.shape, config.MISSING_VS_VALUE)
    vs[use_hgn] = vs_hgn[use_hgn]
    vs[use_lgn] = vs_lgn[use_lgn]
    source = np.full(lp_flags.shape, int(LpSource.NONE), dtype=np.uint32)
    source[use_hgn] = int(LpSource.HGN)
    source[use_lgn] = int(LpSource.LGN)
    return vs, source


__all__ = [
    "LpFlag",
    "LpSource",
    "TE_HGN_MASK",
    "TE_LGN_MASK",
    "VS_HGN_MASK",
    "VS_LGN_MASK",
    "select_electron_temperature",
    "select_spacecraft_potential",
]
