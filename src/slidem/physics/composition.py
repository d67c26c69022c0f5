"""
Empirical topside ion composition and the effective ion mass seed.

The SLIDEM retrieval needs an a priori effective ion mass for every sample.
This module provides the IRI-2016 "old" topside composition model of
Danilov and Yaichnikov (1985), A new model of the ion composition at 75 to
1000 km for IRI, Adv. Space Res. 5(7), together with the F10.7 solar flux
helpers used to drive IRI composition models.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from slidem import config

if TYPE_CHECKING:
    from slidem.samples import Sample

logger = logging.getLogger(__name__)

# Ion order used throughout: O+, N+, He+, H+
ION_MASSES_AMU = np.array([16.0, 14.0, 4.0, 1.0])

# Five coefficients (cos chi, cos lat, cos F10.7, cos season, constant) for
# each of the six profile parameters (cm, hm, all, betl, alh, beth).
_DK_COEFFICIENTS = np.array(
    [
        # O+
        [0.0, 0.0, 0.0, 0.0, 98.5, 0.0, 0.0, 0.0, 0.0, 320.0,
         0.0, 0.0, 0.0, 0.0, -2.59e-4, 2.79e-4, -0.00333, -0.00352, -0.00516, -0.0247,
         0.0, 0.0, 0.0, 0.0, -2.5e-6, 0.00104, -1.79e-4, -4.29e-5, 1.01e-5, -0.00127],
        # N+
        [0.76, -5.62, -4.99, 0.0, 5.79, 83.0, -369.0, -324.0, 0.0, 593.0,
         0.0, 0.0, 0.0, 0.0, -6.3e-5, -0.00674, -0.00793, -0.00465, 0.0, -0.00326,
         0.0, 0.0, 0.0, 0.0, -1.17e-5, 0.00488, -0.00131, -7.03e-4, 0.0, -0.00238],
        # He+
        [-0.895, 6.1, 5.39, 0.0, 8.01, 0.0, 0.0, 0.0, 0.0, 1200.0,
         0.0, 0.0, 0.0, 0.0, -1.04e-5, 0.0019, 9.53e-4, 0.00106, 0.0, -0.00344,
         0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        # H+
        [-4.97e-7, -0.121, -0.131, 0.0, 98.1, 355.0, -191.0, -127.0, 0.0, 2040.0,
         0.0, 0.0, 0.0, 0.0, -4.79e-6, -2e-4, 5.67e-4, 2.6e-4, 0.0, -0.00508,
         0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    ]
).reshape(4, 6, 5)

_ARG_MAX = 90.0
_EARTH_ORBIT_ECCENTRICITY = 0.01675


def ion_composition_dk(
    height_km: float,
    solar_zenith_angle: float,
    latitude: float,
    f107: float,
    seasonal_month: float,
) -> np.ndarray:
    """
    Relative ion densities in percent, ordered O+, N+, He+, H+.

    Args:
        height_km: Altitude in km.
        solar_zenith_angle: Solar zenith angle in degrees.
        latitude: Latitude in degrees (symmetric in sign).
        f107: 10.7 cm solar radio flux.
        seasonal_month: Seasonal decimal month; 1.5 is January 15 in the
            northern hemisphere and July 15 in the southern hemisphere.

    Returns:
        Array of four percentages summing to 100, or zeros when no ion is
        present.
    """
    basis = np.array(
        [
            math.cos(math.radians(solar_zenith_angle)),
            math.cos(math.radians(latitude)),
            math.cos((300.0 - f107) * 0.013),
            math.cos((seasonal_month - 6.0) * 0.52),
            1.0,
        ]
    )
    profile = _DK_COEFFICIENTS @ basis  # (ion, parameter)
    cm, hm, all_, betl, alh, beth = profile.T

    hx = height_km - hm
    arg = np.where(hx <= 0.0, hx * (hx * all_ + betl), hx * (hx * alh + beth))
    densities = np.where(arg > -_ARG_MAX, cm * np.exp(np.maximum(arg, -_ARG_MAX)), 0.0)
    densities = np.where(densities < cm * 0.005, 0.0, densities)
    densities = np.minimum(densities, cm)

    total = densities.sum()
    if total > 0.0:
        return densities / total * 100.0
    return np.zeros(4)


def ion_effective_mass(relative_densities: np.ndarray) -> float:
    """
    Reciprocal-mass weighted effective ion mass in amu.

    Returns 0.0, an unphysical value that downstream flagging catches, when
    no ions are present.
    """
    densities = np.asarray(relative_densities, dtype=float)
    valid = densities >= 0.0
    total = densities[valid].sum()
    if total <= 0.0:
        return 0.0
    mean_reciprocal_mass = (densities[valid] / ION_MASSES_AMU[valid]).sum() / total
    return 1.0 / mean_reciprocal_mass


def ion_effective_mass_dk(
    height_km: float,
    solar_zenith_angle: float,
    latitude: float,
    f107: float,
    seasonal_month: float,
) -> float:
    """Effective ion mass from the Danilov-Yaichnikov composition."""
    return ion_effective_mass(
        ion_composition_dk(height_km, solar_zenith_angle, latitude, f107, seasonal_month)
    )


def seasonal_decimal_month(day: date, latitude: float) -> float:
    """Decimal month, shifted by six months in the southern hemisphere."""
    next_month = date(day.year + day.month // 12, day.month % 12 + 1, 1)
    days_in_month = (next_month - date(day.year, day.month, 1)).days
    month = day.month + (day.day - 0.5) / days_in_month
    if latitude < 0.0:
        month = (month + 6.0 - 1.0) % 12.0 + 1.0
    return month


def dk_mass_model(f107: float, day: date) -> Callable[[Sample], float]:
    """
    Build an effective-mass model for the per-record orchestrator.

    Samples without height, solar zenith angle or latitude fall back to the
    default effective mass.
    """

    def model(sample: Sample) -> float:
        if not (
            math.isfinite(sample.height_km)
            and math.isfinite(sample.solar_zenith_angle)
            and math.isfinite(sample.latitude)
        ):
            return config.DEFAULT_ION_EFFECTIVE_MASS
        return ion_effective_mass_dk(
            sample.height_km,
            sample.solar_zenith_angle,
            sample.latitude,
            f107,
            seasonal_decimal_month(day, sample.latitude),
        )

    return model


def f107_adjusted(f107_daily: float, f107_81day_mean: float, day_of_year: int) -> float:
    """
    IRI solar activity index: mean of daily and 81-day F10.7, corrected to
    the flux observed at the Earth's instantaneous distance from the Sun.
    """
    amx = math.pi * (day_of_year - 3.0) / 182.6
    eexc = _EARTH_ORBIT_ECCENTRICITY
    radj = 1.0 - eexc * (math.cos(amx) + eexc * (math.cos(2.0 * amx) - 1.0) / 2.0)
    f_adj = radj * radj
    return (f107_daily + f107_81day_mean) / 2.0 / f_adj


def load_f107(day: date, path: Path | str | None = None) -> tuple[float, float, float]:
    """
    Read daily, 81-day mean and yearly mean F10.7 for ``day`` from an
    ``apf107.dat`` file.

    Raises:
        FileNotFoundError: if the file does not exist.
        KeyError: if the date is not in the file.
    """
    path = Path(path) if path is not None else config.F107_FILE
    if not path.is_file():
        raise FileNotFoundError(f"F10.7 file {path} not found")

    table = pd.read_fwf(path, widths=[3] * 13 + [5] * 3, header=None)
    yy = day.year % 100
    match = table[(table[0] == yy) & (table[1] == day.month) & (table[2] == day.day)]
    if match.empty:
        raise KeyError(f"F10.7 unavailable for {day.isoformat()} in {path}")
    row = match.iloc[0]
    return float(row[13]), float(row[14]), float(row[15])


def load_f107_adjusted(day: date, path: Path | str | None = None) -> float:
    """Adjusted F10.7 for ``day`` read from an ``apf107.dat`` file."""
    daily, mean81, _ = load_f107(day, path)
    adjusted = f107_adjusted(daily, mean81, day.timetuple().tm_yday)
    logger.debug("F10.7 adjusted for %s: %.2f", day.isoformat(), adjusted)
    return adjusted


__all__ = [
    "ION_MASSES_AMU",
    "dk_mass_model",
    "f107_adjusted",
    "ion_composition_dk",
    "ion_effective_mass",
    "ion_effective_mass_dk",
    "load_f107",
    "load_f107_adjusted",
    "seasonal_decimal_month",
]
