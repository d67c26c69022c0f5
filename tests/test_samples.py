import numpy as np
import pandas as pd
import pytest

from slidem import config
from slidem.physics.langmuir import LpSource
from slidem.samples import DayInputs


def _required(n=3):
    return dict(
        time=np.arange(n, dtype=float),
        faceplate_current=np.full(n, -10.0),
        vn=np.full(n, 7500.0),
        ve=np.zeros(n),
        vc=np.zeros(n),
        qdlat=np.linspace(0.0, 60.0, n),
        ni=np.full(n, 1.0e5),
    )


class TestDayInputs:
    def test_optional_fields_filled(self):
        inputs = DayInputs(**_required())
        assert len(inputs) == 3
        assert np.all(inputs.diplat == config.MISSING_DIPLAT_VALUE)
        assert np.all(inputs.te_source == LpSource.BLENDED)
        assert inputs.te_source.dtype == np.uint32
        assert np.all(np.isnan(inputs.mieff_seed))
        assert np.all(inputs.faceplate_voltage == config.FACEPLATE_VOLTAGE_MAGNITUDE)

    def test_shape_mismatch_raises(self):
        arrays = _required()
        arrays["qdlat"] = np.zeros(2)
        with pytest.raises(ValueError, match="qdlat"):
            DayInputs(**arrays)

    def test_non_increasing_time_raises(self):
        arrays = _required()
        arrays["time"] = np.array([0.0, 1.0, 1.0])
        with pytest.raises(ValueError, match="strictly increasing"):
            DayInputs(**arrays)

    def test_sample_view(self):
        inputs = DayInputs(**_required())
        sample = inputs.sample(2)
        assert sample.qdlat == pytest.approx(60.0)
        assert sample.ram_speed == pytest.approx(7500.0)
        assert sample.high_latitude
        assert not inputs.sample(0).high_latitude
        assert isinstance(sample.te_source, int)

    def test_iteration_yields_samples_in_order(self):
        inputs = DayInputs(**_required())
        assert [s.time for s in inputs] == [0.0, 1.0, 2.0]

    def test_dataframe_round_trip(self):
        inputs = DayInputs(**_required())
        restored = DayInputs.from_dataframe(inputs.to_dataframe())
        np.testing.assert_allclose(restored.qdlat, inputs.qdlat)
        np.testing.assert_array_equal(restored.vs_source, inputs.vs_source)

    def test_from_dataframe_missing_column(self):
        data = pd.DataFrame(_required()).drop(columns=["qdlat"])
        with pytest.raises(ValueError, match="qdlat"):
            DayInputs.from_dataframe(data)


def test_probe_potential_difference(make_sample):
    sample = make_sample(vs_hgn=-2.0, vs_lgn=-2.5)
    assert sample.probe_potential_difference == pytest.approx(0.5)
