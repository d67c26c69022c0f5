"""
Removal of the along-track drift offset over high-latitude passes.

For every bracket found by the scanner, the forward drift in the two
mid-latitude calibration segments is fitted with a robust line in time. The
line is subtracted over the whole bracketed span, the fit MAD becomes the
drift uncertainty and the post-processing-incomplete bit is cleared. Mass and
density can then be refreshed by running the solver with the corrected ion
speed as the reference.

A bracket is skipped, and its samples left as produced by the forward pass,
when a faceplate current is missing in the span, when either segment has too
few usable points, or when the regression fails.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from slidem import config
from slidem.flag_evaluator import evaluate_flags
from slidem.flags import FlagSet, SlidemFlag
from slidem.post_process.regions import DEFAULT_FIT_REGIONS, FitRegion
from slidem.post_process.robust_fit import (
    RobustFitError,
    RobustFitResult,
    fit_robust_line,
    segment_statistics,
)
from slidem.post_process.scanner import Bracket, find_brackets
from slidem.processor.results import SlidemProducts
from slidem.products import (
    PER_CM3,
    OMLSettings,
    build_solver_inputs,
    density_cm3,
    flag_evaluation,
)
from slidem.samples import DayInputs
from slidem.solver import SolverMode, solve

logger = logging.getLogger(__name__)


class FitStatus(str, Enum):
    APPLIED = "applied"
    MISSING_CURRENT = "missing_current"
    INSUFFICIENT_POINTS = "insufficient_points"
    FIT_FAILED = "fit_failed"


@dataclass(frozen=True, slots=True)
class FitAttempt:
    """
    Outcome of one bracket.

    ``candidates1``/``candidates2`` count the samples in each segment,
    ``points1``/``points2`` the ones admitted to the fit.
    """

    region: FitRegion
    fit_number: int
    bracket: Bracket
    candidates1: int
    candidates2: int
    points1: int
    points2: int
    status: FitStatus
    fit: RobustFitResult | None = None
    median1: float = math.nan
    median2: float = math.nan
    mad1: float = math.nan
    mad2: float = math.nan
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status is FitStatus.APPLIED


@dataclass()
class PostProcessReport:
    attempts: list[FitAttempt] = field(default_factory=list)
    corrected_samples: int = 0
    refreshed_samples: int = 0

    @property
    def fits_applied(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.applied)


def _usable(products: SlidemProducts, segment: slice, flag_mask: int) -> np.ndarray:
    """Indices in ``segment`` whose drift may enter the fit."""
    indices = np.arange(segment.start, segment.stop)
    flags = products.vi_flags[segment].astype(np.uint64)
    drift = products.vi[segment]
    keep = ((flags & np.uint64(flag_mask)) == 0) & (drift != config.MISSING_VI_VALUE)
    return indices[keep]


def _flagset(products: SlidemProducts, index: int) -> FlagSet:
    return FlagSet(
        int(products.mieff_flags[index]),
        int(products.vi_flags[index]),
        int(products.ni_flags[index]),
    )


def refresh_mass_and_density(
    inputs: DayInputs,
    products: SlidemProducts,
    index: int,
    oml: OMLSettings = OMLSettings(),
) -> int:
    """
    Re-derive mass and density of sample ``index`` with the corrected drift.

    The reference ion speed is the ram speed minus the corrected drift and is
    held fixed. Flags are added to the existing mass and density masks; the
    drift mask is left untouched.

    Returns:
        Solver iterations used.
    """
    sample = inputs.sample(index)
    mieff_model = float(products.mieff_model[index])
    solver_inputs = build_solver_inputs(sample, mieff_model, oml)

    ni = float(products.ni[index])
    ni_seed = ni * PER_CM3 if ni != config.MISSING_NI_VALUE else solver_inputs.ni_seed
    mieff = float(products.mieff[index])
    mieff_seed = mieff if mieff != config.MISSING_MIEFF_VALUE else mieff_model
    vions = sample.ram_speed - float(products.vi[index])

    result = solve(
        solver_inputs,
        ni=ni_seed,
        vions=vions,
        mieff=mieff_seed,
        mode=SolverMode.POST_PROCESSING,
    )
    evaluated = evaluate_flags(
        flag_evaluation(sample, result, result.iterations),
        _flagset(products, index).merge(result.flags),
    )
    products.mieff[index] = evaluated.mieff
    products.mieff_error[index] = evaluated.mieff_error
    products.mieff_flags[index] = evaluated.flags.mass
    products.ni[index] = density_cm3(evaluated.ni)
    products.ni_error[index] = evaluated.ni_error
    products.ni_flags[index] = evaluated.flags.density
    products.fp_area[index] = evaluated.fp_area
    products.r_probe[index] = evaluated.r_probe
    products.iterations[index] = min(
        int(products.iterations[index]) + result.iterations, np.iinfo(np.uint16).max
    )
    return result.iterations


def _apply_fit(
    inputs: DayInputs,
    products: SlidemProducts,
    bracket: Bracket,
    fit: RobustFitResult,
    refresh: bool,
    oml: OMLSettings,
    report: PostProcessReport,
) -> None:
    time0 = float(inputs.time[0])
    mad = fit.sigma_mad
    for index in range(bracket.begin0, bracket.end1):
        if products.vi[index] == config.MISSING_VI_VALUE:
            continue
        offset = fit.intercept + fit.slope * (float(inputs.time[index]) - time0)
        if not (math.isfinite(offset) and math.isfinite(mad)):
            continue
        products.vi[index] -= offset
        products.vi_error[index] = mad
        products.vi_flags[index] = _flagset(products, index).without_drift(
            SlidemFlag.POST_PROCESSING_ERROR
        ).drift
        report.corrected_samples += 1

        if refresh and math.isfinite(inputs.faceplate_current[index]):
            refresh_mass_and_density(inputs, products, index, oml)
            report.refreshed_samples += 1


def _attempt(
    inputs: DayInputs,
    products: SlidemProducts,
    region: FitRegion,
    fit_number: int,
    bracket: Bracket,
    flag_mask: int,
    min_points: int,
    max_fit_iterations: int,
) -> FitAttempt:
    candidates1 = bracket.begin1 - bracket.begin0
    candidates2 = bracket.end1 - bracket.end0
    base = dict(
        region=region,
        fit_number=fit_number,
        bracket=bracket,
        candidates1=candidates1,
        candidates2=candidates2,
    )

    if not np.all(np.isfinite(inputs.faceplate_current[bracket.span])):
        return FitAttempt(
            **base,
            points1=0,
            points2=0,
            status=FitStatus.MISSING_CURRENT,
            message="faceplate current missing in bracketed span",
        )

    first = _usable(products, bracket.entry, flag_mask)
    second = _usable(products, bracket.exit, flag_mask)
    median1, mad1 = segment_statistics(products.vi[first])
    median2, mad2 = segment_statistics(products.vi[second])
    stats = dict(
        points1=len(first),
        points2=len(second),
        median1=median1,
        median2=median2,
        mad1=mad1,
        mad2=mad2,
    )

    if len(first) < min_points or len(second) < min_points:
        return FitAttempt(
            **base,
            **stats,
            status=FitStatus.INSUFFICIENT_POINTS,
            message=f"{len(first)} and {len(second)} usable points, need {min_points} in each segment",
        )

    indices = np.concatenate([first, second])
    fit_time = inputs.time[indices] - inputs.time[0]
    try:
        fit = fit_robust_line(fit_time, products.vi[indices], max_fit_iterations)
    except RobustFitError as exc:
        return FitAttempt(**base, **stats, status=FitStatus.FIT_FAILED, message=str(exc))
    return FitAttempt(**base, **stats, status=FitStatus.APPLIED, fit=fit)


def remove_drift_offsets(
    inputs: DayInputs,
    products: SlidemProducts,
    regions: Sequence[FitRegion] = DEFAULT_FIT_REGIONS,
    flag_mask: int = config.ION_DRIFT_POST_CALIBRATION_FLAG_MASK,
    refresh: bool = config.POST_PROCESS_ION_EFFECTIVE_MASS_AND_DENSITY,
    oml: OMLSettings = OMLSettings(),
    min_points: int = config.MINIMUM_POINTS_PER_FIT_REGION,
    max_segment_seconds: float = config.MAXIMUM_SEGMENT_SECONDS,
    max_fit_iterations: int = config.ROBUST_FIT_MAXIMUM_ITERATIONS,
) -> PostProcessReport:
    """
    Remove drift offsets from ``products`` in place.

    Args:
        inputs: Inputs the products were computed from.
        products: Forward products; updated in place.
        regions: Calibration regions to scan.
        flag_mask: Drift flag bits that exclude a sample from the fit.
        refresh: Re-derive mass and density with the corrected drift.
        oml: Probe geometry settings for the refresh.
        min_points: Minimum usable points in each calibration segment.
        max_segment_seconds: Maximum time between successive boundary crossings.
        max_fit_iterations: Reweighting cap for the robust regression.

    Returns:
        One `FitAttempt` per bracket and the number of corrected samples.
    """
    report = PostProcessReport()
    if len(inputs) == 0:
        return report

    for region in regions:
        brackets = find_brackets(inputs.time, inputs.qdlat, region, max_segment_seconds)
        for fit_number, bracket in enumerate(brackets, start=1):
            attempt = _attempt(
                inputs,
                products,
                region,
                fit_number,
                bracket,
                flag_mask,
                min_points,
                max_fit_iterations,
            )
            report.attempts.append(attempt)
            if attempt.applied:
                _apply_fit(inputs, products, bracket, attempt.fit, refresh, oml, report)
                fit = attempt.fit
                logger.info(
                    "%s fit %d: %d+%d points, offset %.3f m/s, slope %.3e m/s^2, "
                    "adj. R^2 %.3f, RMSE %.3f m/s, MAD %.3f m/s, "
                    "segment medians %.3f and %.3f m/s",
                    region.label,
                    fit_number,
                    attempt.points1,
                    attempt.points2,
                    fit.intercept,
                    fit.slope,
                    fit.adj_rsq,
                    fit.rmse,
                    fit.sigma_mad,
                    attempt.median1,
                    attempt.median2,
                )
            else:
                logger.warning(
                    "%s fit %d between t=%.1f s and t=%.1f s skipped: %s",
                    region.label,
                    fit_number,
                    bracket.t11,
                    bracket.t22,
                    attempt.message,
                )

    logger.info(
        "Drift offsets removed for %d of %d brackets (%d samples corrected)",
        report.fits_applied,
        len(report.attempts),
        report.corrected_samples,
    )
    return report


__all__ = [
    "FitAttempt",
    "FitStatus",
    "PostProcessReport",
    "refresh_mass_and_density",
    "remove_drift_offsets",
]
