"""
Per-record orchestration of the forward retrieval.

Each sample is solved independently in time order: the model mass seed is
taken from a mass model, the faceplate current is converted to an ion
collection current, the solver is run from the LP admittance seed and the
flag evaluator classifies the outcome. Samples without a faceplate current are
written as sentinels without calling the solver.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from tqdm import tqdm

from slidem import config
from slidem.flag_evaluator import FlagEvaluation, FlagResult, evaluate_flags
from slidem.flags import FlagSet, SlidemFlag
from slidem.physics.oml import FaceplateParams, ProbeParams
from slidem.processor.results import SlidemProducts
from slidem.samples import DayInputs, Sample
from slidem.solver import SolverInputs, SolverMode, SolverResult, ion_admittance, solve

logger = logging.getLogger(__name__)

MassModel = Callable[[Sample], float]

NANOAMPERE = 1.0e-9
PER_CM3 = 1.0e6  # m^-3 per cm^-3


@dataclass(frozen=True, slots=True)
class OMLSettings:
    """Probe geometry corrections applied by the solver."""

    fp_params: FaceplateParams = FaceplateParams()
    probe_params: ProbeParams = ProbeParams()
    faceplate_correction: bool = config.MODIFIED_OML_FACEPLATE_CORRECTION
    probe_correction: bool = config.MODIFIED_OML_SPHERICAL_PROBE_CORRECTION


def default_mass_model(sample: Sample) -> float:
    """Sample's own mass seed, or the default effective mass when it is NaN."""
    if math.isfinite(sample.mieff_seed):
        return sample.mieff_seed
    return config.DEFAULT_ION_EFFECTIVE_MASS


def ion_current(sample: Sample) -> float:
    """Faceplate ion collection current in A, positive for ions."""
    return -sample.faceplate_current * NANOAMPERE


def build_solver_inputs(
    sample: Sample, mieff_model: float, oml: OMLSettings = OMLSettings()
) -> SolverInputs:
    """Fixed solver quantities for ``sample``."""
    ram_speed = sample.ram_speed
    ni_seed = sample.ni * PER_CM3
    return SolverInputs(
        current=ion_current(sample),
        admittance=ion_admittance(ni_seed, ram_speed),
        ram_speed=ram_speed,
        mieff_model=mieff_model,
        qdlat=sample.qdlat,
        te=sample.te,
        vs=sample.vs,
        faceplate_voltage=sample.faceplate_voltage,
        ni_seed=ni_seed,
        fp_params=oml.fp_params,
        probe_params=oml.probe_params,
        faceplate_correction=oml.faceplate_correction,
        probe_correction=oml.probe_correction,
    )


def flag_evaluation(
    sample: Sample,
    result: SolverResult,
    iterations: int,
    drift: float | None = None,
    drift_error: float | None = None,
) -> FlagEvaluation:
    """Collect the flag evaluator inputs for a solved sample."""
    return FlagEvaluation(
        iterations=iterations,
        mieff=result.mieff,
        mieff_error=0.0,
        ni=result.ni,
        ni_error=0.0,
        fp_area=result.fp_area,
        r_probe=result.r_probe,
        te=sample.te,
        te_source=sample.te_source,
        vs=sample.vs,
        vs_source=sample.vs_source,
        lp_ni=sample.ni,
        probe_potential_difference=sample.probe_potential_difference,
        ram_speed=sample.ram_speed,
        diplat=sample.diplat,
        drift=drift,
        drift_error=drift_error,
    )


def density_cm3(ni: float) -> float:
    """Convert a density in m^-3 to cm^-3, leaving the sentinel untouched."""
    if ni == config.MISSING_NI_VALUE:
        return ni
    return ni / PER_CM3


def _store_flags(products: SlidemProducts, index: int, flags: FlagSet) -> None:
    products.mieff_flags[index] = flags.mass
    products.vi_flags[index] = flags.drift
    products.ni_flags[index] = flags.density


def _store_result(products: SlidemProducts, index: int, evaluated: FlagResult) -> None:
    products.mieff[index] = evaluated.mieff
    products.mieff_error[index] = evaluated.mieff_error
    products.ni[index] = density_cm3(evaluated.ni)
    products.ni_error[index] = evaluated.ni_error
    products.fp_area[index] = evaluated.fp_area
    products.r_probe[index] = evaluated.r_probe
    _store_flags(products, index, evaluated.flags)


def calculate_products(
    inputs: DayInputs,
    oml: OMLSettings = OMLSettings(),
    mass_model: MassModel | None = None,
    show_progress: bool = False,
) -> SlidemProducts:
    """
    Run the forward retrieval over every sample of a day.

    Args:
        inputs: Time-aligned input arrays.
        oml: Probe geometry correction settings.
        mass_model: Callable giving the model effective mass (amu) for a
            sample; defaults to `default_mass_model`.
        show_progress: Display a tqdm progress bar.

    Returns:
        Products with the forward drift in both ``vi_raw`` and ``vi``, and
        the post-processing-incomplete bit raised on every drift flag.
    """
    mass_model = mass_model or default_mass_model
    products = SlidemProducts.empty(inputs.time)
    converged = 0

    for index in tqdm(
        range(len(inputs)), desc="SLIDEM samples", disable=not show_progress
    ):
        sample = inputs.sample(index)
        ram_speed = sample.ram_speed
        flags = FlagSet().with_drift(SlidemFlag.POST_PROCESSING_ERROR)

        products.te[index] = sample.te
        products.vs[index] = sample.vs
        if math.isfinite(ram_speed):
            products.vn[index] = sample.vn
            products.ve[index] = sample.ve
            products.vc[index] = sample.vc

        if not math.isfinite(sample.faceplate_current):
            _store_flags(products, index, flags.with_all(SlidemFlag.NO_FACEPLATE_CURRENT))
            continue

        mieff_model = mass_model(sample)
        products.mieff_model[index] = mieff_model

        solver_inputs = build_solver_inputs(sample, mieff_model, oml)
        result = solve(
            solver_inputs,
            ni=solver_inputs.ni_seed,
            vions=ram_speed,
            mieff=mieff_model,
            mode=SolverMode.FORWARD,
        )
        if result.converged:
            converged += 1

        if sample.high_latitude:
            drift = ram_speed - result.vions
            drift_error = 0.0
        else:
            drift = config.MISSING_VI_VALUE
            drift_error = config.MISSING_ERROR_ESTIMATE_VALUE

        evaluated = evaluate_flags(
            flag_evaluation(sample, result, result.iterations, drift, drift_error),
            flags.merge(result.flags),
        )
        _store_result(products, index, evaluated)
        products.vi_raw[index] = evaluated.drift
        products.vi[index] = evaluated.drift
        products.vi_error[index] = evaluated.drift_error
        products.iterations[index] = result.iterations

    products.converged_count = converged
    logger.debug("Forward retrieval converged for %d of %d samples", converged, len(inputs))
    return products


__all__ = [
    "MassModel",
    "OMLSettings",
    "build_solver_inputs",
    "calculate_products",
    "default_mass_model",
    "density_cm3",
    "flag_evaluation",
    "ion_current",
]
