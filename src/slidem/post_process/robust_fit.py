"""Bisquare-weighted linear regression of the drift offset against time."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import statsmodels.api as sm
from scipy.stats import median_abs_deviation

from slidem import config

_N_PARAMETERS = 2


class RobustFitError(RuntimeError):
    """The offset model could not be fitted."""


@dataclass(frozen=True, slots=True)
class RobustFitResult:
    """
    Robust line ``y = intercept + slope * t`` and its quality statistics.

    Attributes:
        intercept: Offset at t = 0.
        slope: Rate of change per unit t.
        adj_rsq: Adjusted coefficient of determination (weighted).
        rmse: Weighted root mean square residual.
        sigma_mad: Normal-consistent median absolute deviation of residuals.
        n_points: Number of points fitted.
        iterations: Reweighted passes after the least squares start.
    """

    intercept: float
    slope: float
    adj_rsq: float
    rmse: float
    sigma_mad: float
    n_points: int
    iterations: int

    def __call__(self, t):
        return self.intercept + self.slope * np.asarray(t, dtype=float)


def segment_statistics(values: np.ndarray) -> tuple[float, float]:
    """Median and normal-consistent MAD of one calibration segment."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return float("nan"), float("nan")
    return float(np.median(values)), float(median_abs_deviation(values, scale="normal"))


def fit_robust_line(
    t: np.ndarray,
    y: np.ndarray,
    max_iterations: int = config.ROBUST_FIT_MAXIMUM_ITERATIONS,
) -> RobustFitResult:
    """
    Fit a straight line with Tukey's bisquare weights.

    Args:
        t: Independent variable (seconds).
        y: Observations.
        max_iterations: IRLS iteration cap.

    Returns:
        The fitted line and statistics.

    Raises:
        RobustFitError: if the inputs cannot determine a line, or the
            reweighting is still changing the deviance at the iteration cap.
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    if t.shape != y.shape:
        raise RobustFitError(f"Shape mismatch: t{t.shape} vs y{y.shape}")
    n = t.size
    if n <= _N_PARAMETERS:
        raise RobustFitError(f"Need more than {_N_PARAMETERS} points, got {n}")
    if not (np.all(np.isfinite(t)) and np.all(np.isfinite(y))):
        raise RobustFitError("Non-finite fit input")
    if np.ptp(t) == 0.0:
        raise RobustFitError("Independent variable has no spread")

    design = sm.add_constant(t, has_constant="add")
    try:
        fit = sm.RLM(y, design, M=sm.robust.norms.TukeyBiweight()).fit(
            maxiter=max_iterations, tol=config.ROBUST_FIT_TOLERANCE
        )
    except (np.linalg.LinAlgError, ValueError, ZeroDivisionError) as exc:
        raise RobustFitError(f"Robust regression failed: {exc}") from exc

    # statsmodels counts the ordinary least squares start as the first pass
    # and stops once that count reaches the cap
    iterations = int(fit.fit_history["iteration"]) - 1
    deviance = fit.fit_history["deviance"]
    if (
        iterations + 1 >= max_iterations
        and abs(deviance[-1] - deviance[-2]) > config.ROBUST_FIT_TOLERANCE
    ):
        raise RobustFitError(
            f"Robust regression did not converge in {max_iterations} iterations"
        )

    intercept, slope = (float(c) for c in fit.params)
    if not (np.isfinite(intercept) and np.isfinite(slope)):
        raise RobustFitError("Robust regression produced non-finite coefficients")

    residuals = y - (intercept + slope * t)
    weights = np.asarray(fit.weights, dtype=float)
    dof = n - _N_PARAMETERS
    sse = float(np.sum(weights * residuals**2))
    weight_sum = float(np.sum(weights))
    if weight_sum > 0.0:
        y_mean = float(np.sum(weights * y) / weight_sum)
        sst = float(np.sum(weights * (y - y_mean) ** 2))
    else:
        sst = 0.0
    if sst > 0.0:
        rsq = 1.0 - sse / sst
        adj_rsq = 1.0 - (1.0 - rsq) * (n - 1) / dof
    else:
        adj_rsq = float("nan")

    return RobustFitResult(
        intercept=intercept,
        slope=slope,
        adj_rsq=adj_rsq,
        rmse=float(np.sqrt(sse / dof)),
        sigma_mad=float(median_abs_deviation(residuals, scale="normal")),
        n_points=n,
        iterations=iterations,
    )


__all__ = ["RobustFitError", "RobustFitResult", "fit_robust_line", "segment_statistics"]
