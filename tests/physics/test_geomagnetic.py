import numpy as np
import pytest

from slidem import config
from slidem.physics.geomagnetic import MAG_FLAG_INVALID, dip_latitude


def test_horizontal_field_is_zero_dip_latitude():
    assert dip_latitude([20000.0], [0.0], [0.0]) == pytest.approx([0.0])


def test_dip_latitude_from_inclination():
    # tan(I) = 2, so atan(tan(I) / 2) is 45 deg
    bh = 20000.0
    result = dip_latitude([bh * 0.6], [bh * 0.8], [2.0 * bh])
    assert result == pytest.approx([45.0])


def test_southern_hemisphere_is_negative():
    assert dip_latitude([20000.0], [0.0], [-40000.0])[0] == pytest.approx(-45.0)


def test_flagged_samples_get_sentinel():
    bn = np.array([20000.0, 20000.0, 20000.0])
    zeros = np.zeros(3)
    result = dip_latitude(
        bn,
        zeros,
        zeros,
        flags_b=np.array([0, MAG_FLAG_INVALID, 0]),
        flags_q=np.array([0, 0, MAG_FLAG_INVALID]),
    )
    assert result[0] == pytest.approx(0.0)
    assert result[1] == config.MISSING_DIPLAT_VALUE
    assert result[2] == config.MISSING_DIPLAT_VALUE
