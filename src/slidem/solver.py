"""
Per-sample iterative retrieval of ion effective mass, density and drift.

The faceplate collects ion current I = n qe A v, while the LP ion admittance
gives di ~ n / (m v). Combining both through the OML relation for the
spherical probe yields the effective mass at low latitude, where the ram speed
is a good estimate of the ion speed relative to the satellite. Poleward of the
quasi-dipole latitude cutoff the model mass is trusted instead and the ion
speed, hence the along-track ion drift, is solved for.

Probe geometries depend on the plasma parameters being solved for, so the
equations are iterated to a fixed point:

- corrected faceplate area and probe radius from the current estimate,
- effective mass from the OML relation,
- density (and ion speed at high latitude),
- stop once density, ion speed and mass all change by less than their
  thresholds, or after `MAX_ITERATIONS` passes.

Non-finite intermediate values fall back to simpler approximations, except
on the last allowed pass where they are kept so the flag evaluator sees them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from slidem import config
from slidem.flags import FlagSet, SlidemFlag
from slidem.physics.oml import FaceplateParams, ProbeParams, faceplate_area, probe_radius

QE = config.ELEMENTARY_CHARGE_MAGNITUDE
AMU = config.ATOMIC_MASS_UNIT_MAGNITUDE
GEOMETRIC_AREA = config.FACEPLATE_AREA_MAGNITUDE
NOMINAL_RADIUS = config.PROBE_RADIUS_MAGNITUDE

# Previous-iteration values that can never satisfy the convergence test.
_UNSET = -10000000.0


class SolverMode(Enum):
    """
    Reference ion speed used by the solver.

    FORWARD: the ram speed; the ion speed is solved for at high latitude.
    POST_PROCESSING: the supplied ion speed (ram speed minus an offset-corrected
    drift); it is held fixed and only density and mass are refreshed.
    """

    FORWARD = "forward"
    POST_PROCESSING = "post_processing"


@dataclass(frozen=True, slots=True)
class SolverInputs:
    """
    Per-sample quantities that stay fixed during the iteration.

    Attributes:
        current: Faceplate ion current in A, positive for ion collection.
        admittance: LP ion admittance constant in A/V.
        ram_speed: Satellite speed in m/s.
        mieff_model: Model effective ion mass in amu.
        qdlat: Quasi-dipole latitude in degrees.
        te: Electron temperature in K.
        vs: Spacecraft potential in V.
        faceplate_voltage: Faceplate bias in V.
        ni_seed: Admittance-derived density in m^-3, last-resort fallback.
    """

    current: float
    admittance: float
    ram_speed: float
    mieff_model: float
    qdlat: float
    te: float
    vs: float
    faceplate_voltage: float
    ni_seed: float
    fp_params: FaceplateParams = FaceplateParams()
    probe_params: ProbeParams = ProbeParams()
    faceplate_correction: bool = config.MODIFIED_OML_FACEPLATE_CORRECTION
    probe_correction: bool = config.MODIFIED_OML_SPHERICAL_PROBE_CORRECTION

    @property
    def high_latitude(self) -> bool:
        return abs(self.qdlat) >= config.QDLAT_CUTOFF


@dataclass(frozen=True, slots=True)
class ConvergenceState:
    """Solver iterate and the previous iterate used by the convergence test."""

    ni: float
    vions: float
    mieff: float
    ni_last: float = _UNSET
    vions_last: float = _UNSET
    mieff_last: float = _UNSET
    fp_area: float = GEOMETRIC_AREA
    r_probe: float = NOMINAL_RADIUS
    iterations: int = 0

    @property
    def converged(self) -> bool:
        """All three quantities changed by less than their thresholds."""
        return (
            abs(self.ni - self.ni_last) < self.ni_last * config.NI_ITERATION_THRESHOLD
            and abs(self.vions - self.vions_last) < config.VI_ITERATION_THRESHOLD
            and abs(self.mieff - self.mieff_last)
            < self.mieff * config.MIEFF_ITERATION_THRESHOLD
        )


@dataclass(frozen=True, slots=True)
class SolverResult:
    state: ConvergenceState
    flags: FlagSet

    @property
    def ni(self) -> float:
        return self.state.ni

    @property
    def vions(self) -> float:
        return self.state.vions

    @property
    def mieff(self) -> float:
        return self.state.mieff

    @property
    def fp_area(self) -> float:
        return self.state.fp_area

    @property
    def r_probe(self) -> float:
        return self.state.r_probe

    @property
    def iterations(self) -> int:
        return self.state.iterations

    @property
    def converged(self) -> bool:
        return self.state.iterations < config.MAX_ITERATIONS


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0.0 or math.isnan(denominator):
        return math.nan
    return numerator / denominator


def _root(value: float) -> float:
    if value >= 0.0:
        return math.sqrt(value)
    return math.nan


def ion_admittance(ni_seed: float, ram_speed: float) -> float:
    """
    LP ion admittance constant in A/V for an O+ plasma of density ``ni_seed``
    (m^-3) moving at ``ram_speed`` relative to the probe.
    """
    return (
        _ratio(_ratio(ni_seed, config.ADMITTANCE_REFERENCE_MASS * AMU), ram_speed)
        * 2.0
        * math.pi
        * NOMINAL_RADIUS
        * NOMINAL_RADIUS
        * QE
        * QE
    )


def _geometry(inputs: SolverInputs, state: ConvergenceState, final: bool) -> tuple[float, float]:
    if inputs.faceplate_correction:
        area = faceplate_area(
            state.ni,
            inputs.te,
            inputs.vs,
            state.mieff,
            state.vions,
            inputs.faceplate_voltage,
            inputs.fp_params,
        )
    else:
        area = GEOMETRIC_AREA
    if inputs.probe_correction:
        radius = probe_radius(
            state.ni, inputs.te, inputs.vs, state.mieff, state.vions, inputs.probe_params
        )
    else:
        radius = NOMINAL_RADIUS

    if not math.isfinite(area) and not final:
        area = GEOMETRIC_AREA
    if not math.isfinite(radius) and not final:
        radius = NOMINAL_RADIUS
    return area, radius


def _planar_density(
    inputs: SolverInputs, area: float, speed: float, final: bool
) -> float:
    ni = _ratio(inputs.current, area * QE * speed)
    if not math.isfinite(ni) and not final:
        ni = _ratio(inputs.current, GEOMETRIC_AREA * QE * speed)
    if not math.isfinite(ni) and not final:
        ni = inputs.ni_seed
    return ni


def iterate(
    inputs: SolverInputs,
    state: ConvergenceState,
    mode: SolverMode = SolverMode.FORWARD,
) -> ConvergenceState:
    """Perform one fixed-point pass and return the new state."""
    final = state.iterations >= config.MAX_ITERATIONS - 1
    reference_speed = (
        inputs.ram_speed if mode is SolverMode.FORWARD else state.vions
    )

    area, radius = _geometry(inputs, state, final)
    oml_factor = 4.0 * math.pi * radius * radius * QE * inputs.current

    mieff = _ratio(
        oml_factor,
        2.0 * area * inputs.admittance * reference_speed * reference_speed,
    ) / AMU
    if not math.isfinite(mieff) and not final:
        mieff = inputs.mieff_model

    vions = state.vions
    if inputs.high_latitude and mode is SolverMode.FORWARD:
        model_mass_kg = inputs.mieff_model * AMU
        vions = _root(_ratio(oml_factor, 2.0 * area * inputs.admittance * model_mass_kg))
        if not math.isfinite(vions) and not final:
            vions = inputs.ram_speed

        ni = _root(
            _ratio(
                2.0 * inputs.current * inputs.admittance * model_mass_kg,
                area * 4.0 * math.pi * radius * radius * QE * QE * QE,
            )
        )
        if not math.isfinite(ni) and not final:
            ni = _ratio(inputs.current, GEOMETRIC_AREA * QE * vions)
        if not math.isfinite(ni) and not final:
            ni = inputs.ni_seed
    else:
        ni = _planar_density(inputs, area, reference_speed, final)

    return ConvergenceState(
        ni=ni,
        vions=vions,
        mieff=mieff,
        ni_last=state.ni,
        vions_last=state.vions,
        mieff_last=state.mieff,
        fp_area=area,
        r_probe=radius,
        iterations=state.iterations + 1,
    )


def solve(
    inputs: SolverInputs,
    ni: float,
    vions: float,
    mieff: float,
    mode: SolverMode = SolverMode.FORWARD,
) -> SolverResult:
    """
    Iterate from the seed (``ni`` in m^-3, ``vions`` in m/s, ``mieff`` in amu)
    until convergence or the iteration cap.

    The returned flags carry the beyond-valid-latitude advisory: on the mass
    mask poleward of the cutoff, on the drift mask equatorward of it.
    """
    state = ConvergenceState(ni=ni, vions=vions, mieff=mieff)
    while state.iterations < config.MAX_ITERATIONS and not state.converged:
        state = iterate(inputs, state, mode)

    if inputs.high_latitude:
        flags = FlagSet().with_mass(SlidemFlag.BEYOND_VALID_QDLATITUDE)
    else:
        flags = FlagSet().with_drift(SlidemFlag.BEYOND_VALID_QDLATITUDE)
    return SolverResult(state=state, flags=flags)


__all__ = [
    "ConvergenceState",
    "SolverInputs",
    "SolverMode",
    "SolverResult",
    "ion_admittance",
    "iterate",
    "solve",
]
