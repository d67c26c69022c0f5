"""
Detection of calibration brackets around high-latitude passes.

A bracket is complete once the quasi-dipole latitude has crossed, in order,
the four boundaries of a `FitRegion`. Each crossing after the first must
occur within half an orbital period of the previous one, otherwise the search
is abandoned. A fresh crossing of the first boundary restarts the search from
any state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto

import numpy as np

from slidem import config
from slidem.post_process.regions import FitRegion

logger = logging.getLogger(__name__)


class ScanState(Enum):
    IDLE = auto()
    GOT_ENTRY_START = auto()
    GOT_ENTRY_END = auto()
    GOT_EXIT_START = auto()


@dataclass(frozen=True, slots=True)
class Bracket:
    """
    Sample indices and times of a completed bracket.

    The entry segment is ``[begin0, begin1)``, the exit segment
    ``[end0, end1)`` and the corrected span ``[begin0, end1)``.
    """

    begin0: int
    begin1: int
    end0: int
    end1: int
    t11: float
    t12: float
    t21: float
    t22: float

    @property
    def entry(self) -> slice:
        return slice(self.begin0, self.begin1)

    @property
    def exit(self) -> slice:
        return slice(self.end0, self.end1)

    @property
    def span(self) -> slice:
        return slice(self.begin0, self.end1)

    @property
    def times(self) -> tuple[float, float, float, float]:
        return self.t11, self.t12, self.t21, self.t22


class BracketScanner:
    """Incremental bracket detector for one region, fed samples in time order."""

    def __init__(
        self,
        region: FitRegion,
        max_segment_seconds: float = config.MAXIMUM_SEGMENT_SECONDS,
    ):
        self.region = region
        self.max_segment_seconds = max_segment_seconds
        self.state = ScanState.IDLE
        self._indices: list[int] = []
        self._times: list[float] = []

    def reset(self) -> None:
        self.state = ScanState.IDLE
        self._indices = []
        self._times = []

    def _mark(self, index: int, time: float, state: ScanState) -> None:
        self._indices.append(index)
        self._times.append(time)
        self.state = state

    def _within_bound(self, time: float) -> bool:
        return time - self._times[-1] < self.max_segment_seconds

    def step(
        self, index: int, time: float, previous_lat: float, lat: float
    ) -> Bracket | None:
        """
        Advance the state machine by one sample.

        Returns:
            The completed bracket when this sample crosses the last boundary
            in time, otherwise None.
        """
        region = self.region
        entry = region.entry_direction
        exit_ = region.exit_direction

        if entry.crossed(previous_lat, lat, region.lat1):
            self.reset()
            self._mark(index, time, ScanState.GOT_ENTRY_START)
            return None

        if self.state is ScanState.GOT_ENTRY_START:
            next_boundary, direction, next_state = region.lat2, entry, ScanState.GOT_ENTRY_END
        elif self.state is ScanState.GOT_ENTRY_END:
            next_boundary, direction, next_state = region.lat3, exit_, ScanState.GOT_EXIT_START
        elif self.state is ScanState.GOT_EXIT_START:
            next_boundary, direction, next_state = region.lat4, exit_, None
        else:
            return None

        if not direction.crossed(previous_lat, lat, next_boundary):
            return None

        if not self._within_bound(time):
            logger.debug(
                "%s: boundary %.1f crossed %.0f s after the previous one, restarting search",
                region.label,
                next_boundary,
                time - self._times[-1],
            )
            self.reset()
            return None

        if next_state is not None:
            self._mark(index, time, next_state)
            return None

        begin0, begin1, end0 = self._indices
        t11, t12, t21 = self._times
        self.reset()
        return Bracket(begin0, begin1, end0, index, t11, t12, t21, time)


def find_brackets(
    times: np.ndarray,
    qdlat: np.ndarray,
    region: FitRegion,
    max_segment_seconds: float = config.MAXIMUM_SEGMENT_SECONDS,
) -> Iterator[Bracket]:
    """Yield every completed bracket of ``region`` in time order."""
    scanner = BracketScanner(region, max_segment_seconds)
    if len(qdlat) == 0:
        return
    previous = float(qdlat[0])
    for index in range(len(qdlat)):
        lat = float(qdlat[index])
        bracket = scanner.step(index, float(times[index]), previous, lat)
        if bracket is not None:
            yield bracket
        previous = lat


__all__ = ["Bracket", "BracketScanner", "ScanState", "find_brackets"]
