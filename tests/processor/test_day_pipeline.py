import numpy as np

from slidem.flags import SlidemFlag
from slidem.processor.pipeline import ProcessingSettings, process_day

POST = int(SlidemFlag.POST_PROCESSING_ERROR)


def test_forward_only(make_day, northern_track):
    day = make_day(northern_track)
    result = process_day(day, ProcessingSettings(post_process_drift=False))
    assert result.report is None
    assert result.products.converged_count == len(day)
    high = np.abs(day.qdlat) >= 50.0
    assert np.all(result.products.vi_flags[high] & POST)


def test_post_processing_and_fit_log(tmp_path, make_day, northern_track):
    day = make_day(northern_track)
    log_path = tmp_path / "out.npz.fitlog"
    result = process_day(day, ProcessingSettings(fit_log_path=log_path))

    assert result.report is not None
    assert result.report.fits_applied == 1
    assert not np.any(result.products.vi_flags[10:90] & POST)
    assert log_path.exists()


def test_coverage_is_logged(caplog, make_day):
    day = make_day(np.array([30.0, 60.0]))
    with caplog.at_level("INFO"):
        process_day(day, ProcessingSettings(post_process_drift=False))
    assert "100.0% of samples converged" in caplog.text
