import pytest

from slidem import config
from slidem.utils.units import ureg


def test_faceplate_area_has_area_units():
    area = config.FACEPLATE_AREA.to(ureg.centimeter**2)
    assert area.magnitude == pytest.approx(803.79)


def test_magnitudes_match_quantities():
    assert config.PROBE_RADIUS.to(ureg.meter).magnitude == config.PROBE_RADIUS_MAGNITUDE
    assert config.FACEPLATE_VOLTAGE.to(ureg.volt).magnitude == -3.5
    assert config.ELEMENTARY_CHARGE_MAGNITUDE == 1.602e-19


def test_sentinels_are_negative_and_distinct_from_nan():
    sentinels = [
        config.MISSING_MIEFF_VALUE,
        config.MISSING_VI_VALUE,
        config.MISSING_NI_VALUE,
        config.MISSING_DIPLAT_VALUE,
        config.MISSING_RPROBE_VALUE,
        config.MISSING_FPAREA_VALUE,
        config.MISSING_ERROR_ESTIMATE_VALUE,
    ]
    assert all(value < 0 and value == value for value in sentinels)
