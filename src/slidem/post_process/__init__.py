"""
Latitude-segment offset post-processing of the along-track ion drift.
"""

from .fitlog import write_fit_log
from .offsets import (
    FitAttempt,
    FitStatus,
    PostProcessReport,
    refresh_mass_and_density,
    remove_drift_offsets,
)
from .regions import DEFAULT_FIT_REGIONS, Direction, FitRegion
from .robust_fit import RobustFitError, RobustFitResult, fit_robust_line
from .scanner import Bracket, BracketScanner, find_brackets

__all__ = [
    "Bracket",
    "BracketScanner",
    "DEFAULT_FIT_REGIONS",
    "Direction",
    "FitAttempt",
    "FitRegion",
    "FitStatus",
    "PostProcessReport",
    "RobustFitError",
    "RobustFitResult",
    "find_brackets",
    "fit_robust_line",
    "refresh_mass_and_density",
    "remove_drift_offsets",
    "write_fit_log",
]
