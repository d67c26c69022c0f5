"""
Modified orbit-motion-limited (OML) sensor geometries.

Empirical corrections to the effective collecting area of the faceplate and
the effective radius of the spherical Langmuir probes, after

- Lira et al. (2019), Determination of Swarm front plate's effective cross
  section from kinetic simulations, IEEE Trans. Plasma Sci. 47(8), 3667-3672.
- Resendiz Lira and Marchand (2021), Simulation inference of plasma parameters
  from Langmuir probe measurements, Earth and Space Science 8(3),
  e2020EA001344.

All functions are scalar and pure. They return NaN rather than raising when
the approximation breaks down (e.g. a negative radicand), so the caller can
decide how to fall back.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from slidem import config

logger = logging.getLogger(__name__)


class ModifiedOMLConfigError(RuntimeError):
    """Raised when the modified OML parameter file cannot be used."""


@dataclass(frozen=True, slots=True)
class FaceplateParams:
    """Faceplate effective-area coefficients. Zeros give the geometric area."""

    area_modifier: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0


@dataclass(frozen=True, slots=True)
class ProbeParams:
    """Spherical probe effective-radius coefficients. Zeros give the nominal radius."""

    radius_modifier: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0
    zeta: float = 0.0
    eta: float = 0.0


def debye_length(ni: float, te: float) -> float:
    """
    Electron Debye length.

    Args:
        ni: Plasma density in m^-3.
        te: Electron temperature in K.

    Returns:
        Debye length in m, NaN when the argument of the square root is not
        positive.
    """
    try:
        arg = (
            config.VACUUM_PERMITTIVITY_MAGNITUDE
            * config.BOLTZMANN_CONSTANT_MAGNITUDE
            * te
            / (ni * config.ELEMENTARY_CHARGE_MAGNITUDE**2)
        )
    except ZeroDivisionError:
        return math.nan
    if arg > 0.0:
        return math.sqrt(arg)
    return math.nan


def faceplate_area(
    ni: float,
    te: float,
    spacecraft_potential: float,
    mieff: float,
    ion_speed: float,
    faceplate_voltage: float,
    params: FaceplateParams,
) -> float:
    """
    Effective faceplate collecting area in m^2.

    The faceplate sits at ``faceplate_voltage`` relative to the spacecraft, so
    its potential relative to the plasma is the sum of the bias and the
    floating potential.
    """
    qe = config.ELEMENTARY_CHARGE_MAGNITUDE
    ageo = config.FACEPLATE_AREA_MAGNITUDE
    m = mieff * config.ATOMIC_MASS_UNIT_MAGNITUDE
    lambda_d = debye_length(ni, te)
    phi = faceplate_voltage + spacecraft_potential
    try:
        delta = (
            params.alpha
            * config.FACEPLATE_PERIMETER_MAGNITUDE
            * lambda_d
            / ageo
            * (
                1.0
                - qe * phi / (0.5 * m * ion_speed * ion_speed)
                - params.beta * qe * phi / (config.BOLTZMANN_CONSTANT_MAGNITUDE * te)
                - params.gamma
                / (qe * phi)
                * qe
                * qe
                / (4.0 * math.pi * config.VACUUM_PERMITTIVITY_MAGNITUDE * lambda_d)
            )
        )
    except ZeroDivisionError:
        return math.nan
    return ageo * (1.0 + delta) * (1.0 + params.area_modifier)


def probe_radius(
    ni: float,
    te: float,
    spacecraft_potential: float,
    mieff: float,
    ion_speed: float,
    params: ProbeParams,
) -> float:
    """Effective spherical probe radius in m."""
    qe = config.ELEMENTARY_CHARGE_MAGNITUDE
    rp = config.PROBE_RADIUS_MAGNITUDE
    m = mieff * config.ATOMIC_MASS_UNIT_MAGNITUDE
    lambda_d = debye_length(ni, te)
    phi = spacecraft_potential
    try:
        delta = (
            params.alpha
            * lambda_d
            / rp
            * (
                1.0
                - params.beta * qe * phi / (0.5 * m * ion_speed * ion_speed)
                - params.gamma * qe * phi / (config.BOLTZMANN_CONSTANT_MAGNITUDE * te)
            )
            - params.zeta * phi
            + params.eta
        )
    except ZeroDivisionError:
        return math.nan
    radicand = 1.0 - delta
    if not radicand >= 0.0:
        return math.nan
    return rp * math.sqrt(radicand) * (1.0 + params.radius_modifier)


def load_modified_oml_params(
    path: Path | str | None = None,
) -> tuple[FaceplateParams, ProbeParams]:
    """
    Read faceplate and spherical probe coefficients from a whitespace-separated
    text file: four faceplate values followed by six probe values.

    Raises:
        ModifiedOMLConfigError: if the file is missing or holds too few values.
    """
    path = Path(path) if path is not None else config.MODIFIED_OML_CONFIG_FILE
    if not path.is_file():
        raise ModifiedOMLConfigError(
            f"Modified OML parameter file {path} not found"
        )
    tokens = path.read_text().split()
    try:
        values = [float(tok) for tok in tokens]
    except ValueError as exc:
        raise ModifiedOMLConfigError(
            f"Non-numeric value in modified OML parameter file {path}"
        ) from exc
    if len(values) < 4:
        raise ModifiedOMLConfigError(f"Error reading faceplate OML parameters from {path}")
    if len(values) < 10:
        raise ModifiedOMLConfigError(
            f"Error reading spherical probe OML parameters from {path}"
        )

    fp_params = FaceplateParams(*values[:4])
    probe_params = ProbeParams(*values[4:10])
    logger.debug("Faceplate OML parameters: %s", fp_params)
    logger.debug("Spherical probe OML parameters: %s", probe_params)
    return fp_params, probe_params


__all__ = [
    "FaceplateParams",
    "ModifiedOMLConfigError",
    "ProbeParams",
    "debye_length",
    "faceplate_area",
    "load_modified_oml_params",
    "probe_radius",
]
