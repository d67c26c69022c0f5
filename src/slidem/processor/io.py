"""
Reading day inputs from tables and writing products.

Input tables hold one row per 2 Hz epoch with columns named after the
`DayInputs` fields. Optional raw columns are turned into processor inputs:

- ``bn``, ``be``, ``bc`` (and ``flags_b``, ``flags_q``) give the dip latitude
  when ``diplat`` is absent;
- ``te_hgn``, ``te_lgn`` and ``lp_flags`` give a calibrated, probe-selected Te
  when blended Te is not used;
- ``vs_hgn``, ``vs_lgn`` and ``lp_flags`` likewise for the spacecraft
  potential.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from slidem import config
from slidem.physics.geomagnetic import dip_latitude
from slidem.physics.langmuir import select_electron_temperature, select_spacecraft_potential
from slidem.processor.results import SlidemProducts
from slidem.samples import DayInputs

logger = logging.getLogger(__name__)

_TABLE_SUFFIXES = (".csv", ".parquet", ".npz")


def read_table(path: Path | str) -> pd.DataFrame:
    """
    Read a CSV, Parquet or NPZ table.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: for an unsupported file type.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Input file {path} not found")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix == ".npz":
        with np.load(path) as archive:
            return pd.DataFrame({key: archive[key] for key in archive.files})
    raise ValueError(
        f"Unsupported input type {suffix!r}, expected one of {', '.join(_TABLE_SUFFIXES)}"
    )


def prepare_columns(
    data: pd.DataFrame,
    satellite: str | None = None,
    blended_te: bool = config.BLENDED_TE,
    blended_vs: bool = config.BLENDED_VS,
) -> pd.DataFrame:
    """Derive dip latitude and probe-selected LP values from raw columns."""
    data = data.copy()

    if config.DIPLAT_COLUMN not in data.columns and all(
        col in data.columns for col in config.B_NEC_COLUMNS
    ):
        data[config.DIPLAT_COLUMN] = dip_latitude(
            data["bn"].to_numpy(),
            data["be"].to_numpy(),
            data["bc"].to_numpy(),
            data["flags_b"].to_numpy() if "flags_b" in data.columns else None,
            data["flags_q"].to_numpy() if "flags_q" in data.columns else None,
        )
        logger.debug("Dip latitude derived from B_NEC")

    has_lp_flags = "lp_flags" in data.columns
    if not blended_te:
        if satellite is None:
            raise ValueError("Satellite letter is required for non-blended Te")
        if not (has_lp_flags and {"te_hgn", "te_lgn"} <= set(data.columns)):
            raise ValueError("Non-blended Te requires te_hgn, te_lgn and lp_flags columns")
        te, source = select_electron_temperature(
            satellite,
            data["te_hgn"].to_numpy(),
            data["te_lgn"].to_numpy(),
            data["lp_flags"].to_numpy(),
        )
        data[config.TE_COLUMN] = te
        data["te_source"] = source
    if not blended_vs:
        if not (has_lp_flags and {"vs_hgn", "vs_lgn"} <= set(data.columns)):
            raise ValueError("Non-blended Vs requires vs_hgn, vs_lgn and lp_flags columns")
        vs, source = select_spacecraft_potential(
            data["vs_hgn"].to_numpy(),
            data["vs_lgn"].to_numpy(),
            data["lp_flags"].to_numpy(),
        )
        data[config.VS_COLUMN] = vs
        data["vs_source"] = source
    return data


def load_day_inputs(
    path: Path | str,
    satellite: str | None = None,
    blended_te: bool = config.BLENDED_TE,
    blended_vs: bool = config.BLENDED_VS,
) -> DayInputs:
    """
    Load one day of time-aligned inputs.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: for an unsupported file type or missing columns.
    """
    data = read_table(path)
    data = prepare_columns(data, satellite, blended_te, blended_vs)
    inputs = DayInputs.from_dataframe(data)
    logger.info(f"Loaded {len(inputs)} samples from {path}")
    return inputs


def save_products(path: Path | str, products: SlidemProducts) -> Path:
    """
    Write products to ``path``: NPZ by default, CSV or Parquet by suffix.

    NPZ files are written atomically.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        products.to_dataframe().to_csv(path, index=False)
    elif suffix == ".parquet":
        products.to_dataframe().to_parquet(path, index=False)
    else:
        with tempfile.NamedTemporaryFile(
            dir=path.parent, suffix=".tmp", delete=False
        ) as tmp:
            np.savez_compressed(tmp, **products.as_dict())
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)
        os.replace(tmp_path, path)
    logger.info(f"Saved products to {path}")
    return path


__all__ = ["load_day_inputs", "prepare_columns", "read_table", "save_products"]
