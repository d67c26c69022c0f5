from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np
import pandas as pd

from slidem import config


@dataclass()
class SlidemProducts:
    """
    Sample-aligned outputs for one day.

    Arrays share the same length N as the inputs:
    - mieff, mieff_error, mieff_flags: Ion effective mass (amu), uncertainty and flags.
    - mieff_model: Model effective mass used as the seed (amu).
    - ni, ni_error, ni_flags: Ion density (cm^-3), uncertainty and flags.
    - vi_raw: Along-track ion drift before offset removal (m/s).
    - vi, vi_error, vi_flags: Along-track ion drift (m/s), uncertainty and flags.
    - fp_area: Corrected faceplate area (m^2).
    - r_probe: Corrected probe radius (m).
    - te, vs: Electron temperature (K) and spacecraft potential (V) used.
    - vn, ve, vc: Satellite velocity (m/s), sentinel where unavailable.
    - iterations: Solver passes per sample, including any post-processing refresh.
    converged_count is the number of samples whose forward solve converged.
    """

    time: np.ndarray
    mieff: np.ndarray
    mieff_error: np.ndarray
    mieff_model: np.ndarray
    mieff_flags: np.ndarray
    ni: np.ndarray
    ni_error: np.ndarray
    ni_flags: np.ndarray
    vi_raw: np.ndarray
    vi: np.ndarray
    vi_error: np.ndarray
    vi_flags: np.ndarray
    fp_area: np.ndarray
    r_probe: np.ndarray
    te: np.ndarray
    vs: np.ndarray
    vn: np.ndarray
    ve: np.ndarray
    vc: np.ndarray
    iterations: np.ndarray
    converged_count: int = 0

    @classmethod
    def empty(cls, time: np.ndarray) -> SlidemProducts:
        """Allocate products for ``len(time)`` samples, filled with sentinels."""
        n = len(time)

        def filled(value: float) -> np.ndarray:
            return np.full(n, value, dtype=np.float64)

        def flags() -> np.ndarray:
            return np.zeros(n, dtype=np.uint32)

        return cls(
            time=np.asarray(time, dtype=np.float64).copy(),
            mieff=filled(config.MISSING_MIEFF_VALUE),
            mieff_error=filled(config.MISSING_ERROR_ESTIMATE_VALUE),
            mieff_model=filled(config.MISSING_MIEFF_VALUE),
            mieff_flags=flags(),
            ni=filled(config.MISSING_NI_VALUE),
            ni_error=filled(config.MISSING_ERROR_ESTIMATE_VALUE),
            ni_flags=flags(),
            vi_raw=filled(config.MISSING_VI_VALUE),
            vi=filled(config.MISSING_VI_VALUE),
            vi_error=filled(config.MISSING_ERROR_ESTIMATE_VALUE),
            vi_flags=flags(),
            fp_area=filled(config.MISSING_FPAREA_VALUE),
            r_probe=filled(config.MISSING_RPROBE_VALUE),
            te=filled(config.MISSING_TE_VALUE),
            vs=filled(config.MISSING_VS_VALUE),
            vn=filled(config.MISSING_VNEC_VALUE),
            ve=filled(config.MISSING_VNEC_VALUE),
            vc=filled(config.MISSING_VNEC_VALUE),
            iterations=np.zeros(n, dtype=np.uint16),
        )

    def __len__(self) -> int:
        return len(self.time)

    def _array_fields(self) -> list[str]:
        return [f.name for f in fields(self) if f.name != "converged_count"]

    def as_dict(self) -> dict[str, np.ndarray]:
        """Arrays keyed by field name, suitable for ``np.savez``."""
        out = {name: getattr(self, name) for name in self._array_fields()}
        out["converged_count"] = np.asarray(self.converged_count)
        return out

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({name: getattr(self, name) for name in self._array_fields()})

    @property
    def converged_fraction(self) -> float:
        if len(self) == 0:
            return 0.0
        return self.converged_count / len(self)


__all__ = ["SlidemProducts"]
