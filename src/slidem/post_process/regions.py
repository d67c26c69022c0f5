"""Latitude bands used to calibrate the along-track drift offset."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from slidem import config


class Direction(str, Enum):
    """Sense in which the quasi-dipole latitude must cross a band boundary."""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        if isinstance(value, Direction):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown crossing direction: {value!r}") from exc

    def crossed(self, previous: float, current: float, threshold: float) -> bool:
        """True when the step ``previous -> current`` crosses ``threshold``."""
        if self is Direction.ASCENDING:
            return current >= threshold and previous < threshold
        return current <= threshold and previous > threshold


@dataclass(frozen=True, slots=True)
class FitRegion:
    """
    Pair of calibration bands bracketing a high-latitude pass.

    The entry band runs from ``lat1`` to ``lat2`` crossed in
    ``entry_direction``; the exit band from ``lat3`` to ``lat4`` crossed in
    ``exit_direction``.
    """

    number: int
    label: str
    lat1: float
    lat2: float
    lat3: float
    lat4: float
    entry_direction: Direction
    exit_direction: Direction

    @classmethod
    def from_boundaries(
        cls, number: int, label: str, lat1: float, lat2: float, lat3: float, lat4: float
    ) -> FitRegion:
        """Infer the crossing directions from the ordering of the boundaries."""
        entry = Direction.ASCENDING if lat2 >= lat1 else Direction.DESCENDING
        exit_ = Direction.ASCENDING if lat4 >= lat3 else Direction.DESCENDING
        return cls(number, label, lat1, lat2, lat3, lat4, entry, exit_)

    @property
    def boundaries(self) -> tuple[float, float, float, float]:
        return self.lat1, self.lat2, self.lat3, self.lat4


_WIDTH = config.POST_PROCESSING_QDLAT_WIDTH
_CUTOFF = config.QDLAT_CUTOFF

DEFAULT_FIT_REGIONS: tuple[FitRegion, ...] = (
    FitRegion(
        number=1,
        label="Northern ascending",
        lat1=_CUTOFF,
        lat2=_CUTOFF + _WIDTH,
        lat3=_CUTOFF + _WIDTH,
        lat4=_CUTOFF,
        entry_direction=Direction.ASCENDING,
        exit_direction=Direction.DESCENDING,
    ),
    FitRegion(
        number=2,
        label="Southern descending",
        lat1=-_CUTOFF,
        lat2=-(_CUTOFF + _WIDTH),
        lat3=-(_CUTOFF + _WIDTH),
        lat4=-_CUTOFF,
        entry_direction=Direction.DESCENDING,
        exit_direction=Direction.ASCENDING,
    ),
)


__all__ = ["DEFAULT_FIT_REGIONS", "Direction", "FitRegion"]
