import numpy as np
import pytest

from slidem import config
from slidem.flags import SlidemFlag
from slidem.post_process.fitlog import COLUMNS, write_fit_log
from slidem.post_process.offsets import remove_drift_offsets
from slidem.post_process.regions import DEFAULT_FIT_REGIONS
from slidem.products import calculate_products


def _report(day, flagged=False):
    products = calculate_products(day)
    high = np.abs(day.qdlat) >= config.QDLAT_CUTOFF
    products.vi[high] = 100.0 + np.where(np.arange(len(day)) % 2 == 0, 1.0, -1.0)[high]
    mask = 0
    if flagged:
        mask = int(SlidemFlag.ESTIMATE_TOO_LARGE)
        products.vi_flags[10:24] |= mask
    return remove_drift_offsets(day, products, flag_mask=mask, refresh=False)


def test_header_and_successful_row(tmp_path, make_day, northern_track):
    report = _report(make_day(northern_track))
    path = write_fit_log(tmp_path / "day.npz.fitlog", DEFAULT_FIT_REGIONS, report.attempts)

    lines = path.read_text().splitlines()
    assert "Northern ascending" in lines[4]
    assert "Southern descending" in lines[5]
    assert COLUMNS in lines
    row = lines[-1].split()
    assert row[:5] == ["1", "1", "applied", "20", "20"]
    assert len(row) == 18
    assert float(row[9]) == pytest.approx(100.0, abs=1.0)


def test_failed_fit_prints_placeholders(tmp_path, make_day, northern_track):
    report = _report(make_day(northern_track), flagged=True)
    path = write_fit_log(tmp_path / "log", DEFAULT_FIT_REGIONS, report.attempts)
    row = path.read_text().splitlines()[-1].split()
    assert row[2] == "insufficient_points"
    assert row[9:] == [str(config.FIT_ERROR_PLACEHOLDER)] * 9
