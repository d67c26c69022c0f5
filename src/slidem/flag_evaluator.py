"""
Validity flags for the SLIDEM products.

`evaluate_flags` is a pure per-sample classification: it takes the solver
outputs together with the ancillary LP, velocity and magnetic inputs, ORs the
applicable bits into the incoming `FlagSet`, and replaces non-finite products
by their missing-value sentinels. It is called once after the forward
retrieval and again after the drift offset has been removed, in which case
the drift is not re-evaluated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from slidem import config
from slidem.flags import FlagSet, SlidemFlag
from slidem.physics.langmuir import LpSource


@dataclass(frozen=True, slots=True)
class FlagEvaluation:
    """
    Quantities inspected by the flag evaluator for one sample.

    ``ni`` is the retrieved density in m^-3, ``lp_ni`` the LP admittance
    density in cm^-3. ``drift`` and ``drift_error`` are None when the drift
    mask must be left untouched.
    """

    iterations: int
    mieff: float
    mieff_error: float
    ni: float
    ni_error: float
    fp_area: float
    r_probe: float
    te: float
    te_source: int
    vs: float
    vs_source: int
    lp_ni: float
    probe_potential_difference: float
    ram_speed: float
    diplat: float
    drift: float | None = None
    drift_error: float | None = None


@dataclass(frozen=True, slots=True)
class FlagResult:
    """Updated flags and sentinel-substituted product values."""

    flags: FlagSet
    mieff: float
    mieff_error: float
    ni: float
    ni_error: float
    fp_area: float
    r_probe: float
    drift: float | None
    drift_error: float | None
    velocity_missing: bool


class _Masks:
    """Mutable accumulator for one evaluation pass."""

    def __init__(self, flags: FlagSet, with_drift: bool):
        self.mass = flags.mass
        self.drift = flags.drift
        self.density = flags.density
        self.with_drift = with_drift

    def all(self, bits: int) -> None:
        self.mass |= bits
        self.density |= bits
        if self.with_drift:
            self.drift |= bits

    def to_flagset(self) -> FlagSet:
        return FlagSet(int(self.mass), int(self.drift), int(self.density))


def _range_bits(value: float, low: float, high: float) -> int:
    if value > high:
        return SlidemFlag.ESTIMATE_TOO_LARGE
    if value < low:
        return SlidemFlag.ESTIMATE_TOO_SMALL
    return 0


def evaluate_flags(evaluation: FlagEvaluation, flags: FlagSet = FlagSet()) -> FlagResult:
    """
    Classify one sample.

    Args:
        evaluation: Solver outputs and ancillary inputs for the sample.
        flags: Flags accumulated so far; bits are only ever added.

    Returns:
        The new flags and the product values with sentinels substituted.
    """
    ev = evaluation
    with_drift = ev.drift is not None
    masks = _Masks(flags, with_drift)

    if ev.iterations >= config.MAX_ITERATIONS:
        masks.all(SlidemFlag.ESTIMATE_DID_NOT_CONVERGE)

    # Effective mass
    mieff = ev.mieff
    if math.isfinite(mieff):
        masks.mass |= _range_bits(mieff, config.FLAGS_MINIMUM_MIEFF, config.FLAGS_MAXIMUM_MIEFF)
    else:
        mieff = config.MISSING_MIEFF_VALUE
        masks.mass |= SlidemFlag.PRODUCT_ESTIMATE_NOT_FINITE
    mieff_error = ev.mieff_error
    if not math.isfinite(mieff_error):
        mieff_error = config.MISSING_ERROR_ESTIMATE_VALUE
        masks.mass |= SlidemFlag.UNCERTAINTY_ESTIMATE_NOT_FINITE

    # Along-track drift
    drift = ev.drift
    drift_error = ev.drift_error
    if with_drift:
        if drift == config.MISSING_VI_VALUE:
            pass  # regime does not produce a drift
        elif math.isfinite(drift):
            if abs(drift) > config.FLAGS_MAXIMUM_DRIFT_MAGNITUDE:
                masks.drift |= SlidemFlag.ESTIMATE_TOO_LARGE
        else:
            drift = config.MISSING_VI_VALUE
            masks.drift |= SlidemFlag.PRODUCT_ESTIMATE_NOT_FINITE
        if drift_error is None or not math.isfinite(drift_error):
            drift_error = config.MISSING_ERROR_ESTIMATE_VALUE
            masks.drift |= SlidemFlag.UNCERTAINTY_ESTIMATE_NOT_FINITE

    # Density
    ni = ev.ni
    if math.isfinite(ni):
        masks.density |= _range_bits(ni, config.FLAGS_MINIMUM_NI, config.FLAGS_MAXIMUM_NI)
    else:
        ni = config.MISSING_NI_VALUE
        masks.density |= SlidemFlag.PRODUCT_ESTIMATE_NOT_FINITE
    ni_error = ev.ni_error
    if not math.isfinite(ni_error):
        ni_error = config.MISSING_ERROR_ESTIMATE_VALUE
        masks.density |= SlidemFlag.UNCERTAINTY_ESTIMATE_NOT_FINITE

    # Corrected geometries taint every product
    fp_area = ev.fp_area
    if math.isfinite(fp_area):
        if not (
            config.FLAGS_MINIMUM_FACEPLATE_AREA
            <= fp_area
            <= config.FLAGS_MAXIMUM_FACEPLATE_AREA
        ):
            masks.all(SlidemFlag.OML_FACEPLATE_AREA_CORRECTION_INVALID)
    else:
        fp_area = config.MISSING_FPAREA_VALUE
        masks.all(
            SlidemFlag.OML_FACEPLATE_AREA_CORRECTION_INVALID
            | SlidemFlag.FACEPLATE_AREA_ESTIMATE_NOT_FINITE
        )
    r_probe = ev.r_probe
    if math.isfinite(r_probe):
        if not (
            config.FLAGS_MINIMUM_PROBE_RADIUS
            <= r_probe
            <= config.FLAGS_MAXIMUM_PROBE_RADIUS
        ):
            masks.all(SlidemFlag.OML_PROBE_RADIUS_CORRECTION_INVALID)
    else:
        r_probe = config.MISSING_RPROBE_VALUE
        masks.all(
            SlidemFlag.OML_PROBE_RADIUS_CORRECTION_INVALID
            | SlidemFlag.PROBE_RADIUS_ESTIMATE_NOT_FINITE
        )

    # Langmuir probe inputs
    if abs(ev.probe_potential_difference) > config.FLAGS_MAXIMUM_PROBE_POTENTIAL_DIFFERENCE:
        masks.all(
            SlidemFlag.LP_PROBE_POTENTIAL_DIFFERENCE_TOO_LARGE
            | SlidemFlag.LP_INPUTS_INVALID
        )
    if ev.vs < config.FLAGS_MINIMUM_LP_SPACECRAFT_POTENTIAL:
        masks.all(
            SlidemFlag.SPACECRAFT_POTENTIAL_TOO_NEGATIVE | SlidemFlag.LP_INPUTS_INVALID
        )
    elif ev.vs > config.FLAGS_MAXIMUM_LP_SPACECRAFT_POTENTIAL:
        masks.all(
            SlidemFlag.SPACECRAFT_POTENTIAL_TOO_POSITIVE | SlidemFlag.LP_INPUTS_INVALID
        )
    if (
        not config.FLAGS_MINIMUM_LP_TE <= ev.te <= config.FLAGS_MAXIMUM_LP_TE
        or not config.FLAGS_MINIMUM_LP_NI <= ev.lp_ni <= config.FLAGS_MAXIMUM_LP_NI
        or ev.te_source == LpSource.NONE
        or ev.vs_source == LpSource.NONE
    ):
        masks.all(SlidemFlag.LP_INPUTS_INVALID)

    velocity_missing = not math.isfinite(ev.ram_speed)
    if velocity_missing:
        masks.all(SlidemFlag.NO_SATELLITE_VELOCITY)

    if ev.diplat == config.MISSING_DIPLAT_VALUE or not math.isfinite(ev.diplat):
        masks.all(SlidemFlag.MAG_INPUT_INVALID)

    return FlagResult(
        flags=masks.to_flagset(),
        mieff=mieff,
        mieff_error=mieff_error,
        ni=ni,
        ni_error=ni_error,
        fp_area=fp_area,
        r_probe=r_probe,
        drift=drift,
        drift_error=drift_error,
        velocity_missing=velocity_missing,
    )


__all__ = ["FlagEvaluation", "FlagResult", "evaluate_flags"]
