"""
Input containers for one processing day.

`DayInputs` holds the time-aligned input arrays (one entry per 2 Hz LP epoch).
`Sample` is the read-only view of a single epoch that is handed to the solver
and the flag evaluator, so no computation depends on a shared loop index.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields

import numpy as np
import pandas as pd

from slidem import config
from slidem.physics.langmuir import LpSource


@dataclass(frozen=True, slots=True)
class Sample:
    """
    One half-second epoch.

    Attributes:
        time: Seconds, strictly increasing through the day.
        faceplate_current: Measured faceplate current in nA (negative for ion
            collection); NaN when no measurement could be interpolated.
        vn, ve, vc: Satellite velocity NEC components in m/s.
        qdlat: Quasi-dipole magnetic latitude in degrees.
        diplat: Dip latitude in degrees, `MISSING_DIPLAT_VALUE` if unavailable.
        te: Electron temperature in K.
        te_source: `LpSource` of the electron temperature.
        vs: Spacecraft floating potential in V.
        vs_source: `LpSource` of the spacecraft potential.
        ni: Ion density from the LP ion admittance in cm^-3.
        mieff_seed: Model ion effective mass in amu, NaN if it must be computed.
        faceplate_voltage: Faceplate bias in V.
        vs_hgn, vs_lgn: Potentials from the high- and low-gain probes in V.
        height_km, latitude, solar_zenith_angle: Optional ephemeris used by
            composition models.
    """

    time: float
    faceplate_current: float
    vn: float
    ve: float
    vc: float
    qdlat: float
    diplat: float
    te: float
    te_source: int
    vs: float
    vs_source: int
    ni: float
    mieff_seed: float = math.nan
    faceplate_voltage: float = config.FACEPLATE_VOLTAGE_MAGNITUDE
    vs_hgn: float = math.nan
    vs_lgn: float = math.nan
    height_km: float = math.nan
    latitude: float = math.nan
    solar_zenith_angle: float = math.nan

    @property
    def ram_speed(self) -> float:
        """Magnitude of the satellite velocity in m/s."""
        return math.sqrt(self.vn * self.vn + self.ve * self.ve + self.vc * self.vc)

    @property
    def probe_potential_difference(self) -> float:
        return self.vs_hgn - self.vs_lgn

    @property
    def high_latitude(self) -> bool:
        """True at or poleward of the quasi-dipole latitude cutoff."""
        return abs(self.qdlat) >= config.QDLAT_CUTOFF


_OPTIONAL_DEFAULTS = {
    "diplat": config.MISSING_DIPLAT_VALUE,
    "te": config.MISSING_TE_VALUE,
    "te_source": int(LpSource.BLENDED),
    "vs": config.MISSING_VS_VALUE,
    "vs_source": int(LpSource.BLENDED),
    "mieff_seed": math.nan,
    "faceplate_voltage": config.FACEPLATE_VOLTAGE_MAGNITUDE,
    "vs_hgn": math.nan,
    "vs_lgn": math.nan,
    "height_km": math.nan,
    "latitude": math.nan,
    "solar_zenith_angle": math.nan,
}

_INTEGER_FIELDS = ("te_source", "vs_source")


@dataclass()
class DayInputs:
    """
    Time-aligned input arrays for one day.

    Required arrays share length N. Optional arrays left as None are filled
    with their missing-value defaults.
    """

    time: np.ndarray
    faceplate_current: np.ndarray
    vn: np.ndarray
    ve: np.ndarray
    vc: np.ndarray
    qdlat: np.ndarray
    ni: np.ndarray
    diplat: np.ndarray | None = None
    te: np.ndarray | None = None
    te_source: np.ndarray | None = None
    vs: np.ndarray | None = None
    vs_source: np.ndarray | None = None
    mieff_seed: np.ndarray | None = None
    faceplate_voltage: np.ndarray | None = None
    vs_hgn: np.ndarray | None = None
    vs_lgn: np.ndarray | None = None
    height_km: np.ndarray | None = None
    latitude: np.ndarray | None = None
    solar_zenith_angle: np.ndarray | None = None

    def __post_init__(self):
        n = len(np.asarray(self.time))
        for f in fields(self):
            value = getattr(self, f.name)
            dtype = np.uint32 if f.name in _INTEGER_FIELDS else np.float64
            if value is None:
                value = np.full(n, _OPTIONAL_DEFAULTS[f.name], dtype=dtype)
            else:
                value = np.asarray(value, dtype=dtype)
            if value.shape != (n,):
                raise ValueError(
                    f"{f.name} has shape {value.shape}, expected ({n},)"
                )
            setattr(self, f.name, value)

        if n > 1 and np.any(np.diff(self.time) <= 0):
            raise ValueError("Sample times must be strictly increasing")

    def __len__(self) -> int:
        return len(self.time)

    def sample(self, index: int) -> Sample:
        """Return the read-only view of epoch ``index``."""
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)[index]
            values[f.name] = int(value) if f.name in _INTEGER_FIELDS else float(value)
        return Sample(**values)

    def __iter__(self):
        for index in range(len(self)):
            yield self.sample(index)

    @property
    def ram_speed(self) -> np.ndarray:
        return np.sqrt(self.vn**2 + self.ve**2 + self.vc**2)

    @classmethod
    def from_dataframe(cls, data: pd.DataFrame) -> DayInputs:
        """
        Build inputs from a table whose columns are named after the fields.

        Raises:
            ValueError: if a required column is missing.
        """
        missing = [col for col in config.REQUIRED_COLUMNS if col not in data.columns]
        if missing:
            raise ValueError(f"Input table is missing required columns: {missing}")
        kwargs = {
            f.name: data[f.name].to_numpy()
            for f in fields(cls)
            if f.name in data.columns
        }
        return cls(**kwargs)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({f.name: getattr(self, f.name) for f in fields(self)})


__all__ = ["DayInputs", "Sample"]
