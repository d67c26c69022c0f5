"""Plain-text audit log of the drift offset fits."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from slidem import config
from slidem.post_process.offsets import FitAttempt
from slidem.post_process.regions import FitRegion

logger = logging.getLogger(__name__)

COLUMNS = (
    "regionNumber fitNumber status numPoints1 numPoints2 T11 T12 T21 T22 "
    "offset slope adjRsq rmse median1 median2 mad mad1 mad2"
)
_N_FIT_VALUES = 9


def _header(regions: Sequence[FitRegion]) -> list[str]:
    lines = [
        "SLIDEM along-track ion drift fit results by fit region.",
        "Each region consists of two mid-latitude segments bounded by times T11, T12, T21 and T22 (s).",
        "Bisquare-weighted linear models are subtracted from each region for which a fit can be obtained.",
        "Regions:",
    ]
    for region in regions:
        lines.append(
            f"{region.number} {region.label:>21s}: ({region.lat1: 5.1f}, {region.lat2: 5.1f})"
            f" -> ({region.lat3: 5.1f}, {region.lat4: 5.1f})"
        )
    lines += ["", "The columns are:", COLUMNS, ""]
    return lines


def format_attempt(attempt: FitAttempt) -> str:
    """One log row; fit values are placeholders when no fit was obtained."""
    bracket = attempt.bracket
    row = (
        f"{attempt.region.number} {attempt.fit_number} {attempt.status.value} "
        f"{attempt.points1} {attempt.points2} "
        f"{bracket.t11:f} {bracket.t12:f} {bracket.t21:f} {bracket.t22:f}"
    )
    fit = attempt.fit
    if fit is None:
        values = " ".join([str(config.FIT_ERROR_PLACEHOLDER)] * _N_FIT_VALUES)
    else:
        values = " ".join(
            f"{value:f}"
            for value in (
                fit.intercept,
                fit.slope,
                fit.adj_rsq,
                fit.rmse,
                attempt.median1,
                attempt.median2,
                fit.sigma_mad,
                attempt.mad1,
                attempt.mad2,
            )
        )
    return f"{row} {values}"


def write_fit_log(
    path: Path | str,
    regions: Sequence[FitRegion],
    attempts: Iterable[FitAttempt],
) -> Path:
    """
    Write the fit log to ``path``.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = _header(regions) + [format_attempt(attempt) for attempt in attempts]
    path.write_text("\n".join(lines) + "\n")
    logger.info(f"Saved fit log to {path}")
    return path


__all__ = ["COLUMNS", "format_attempt", "write_fit_log"]
