import math
from datetime import date

import numpy as np
import pytest

from slidem import config
from slidem.physics.composition import (
    dk_mass_model,
    f107_adjusted,
    ion_composition_dk,
    ion_effective_mass,
    ion_effective_mass_dk,
    load_f107,
    load_f107_adjusted,
    seasonal_decimal_month,
)


class TestEffectiveMass:
    def test_pure_oxygen(self):
        assert ion_effective_mass([100.0, 0.0, 0.0, 0.0]) == pytest.approx(16.0)

    def test_reciprocal_mass_average(self):
        expected = 1.0 / (0.5 / 16.0 + 0.5 / 1.0)
        assert ion_effective_mass([50.0, 0.0, 0.0, 50.0]) == pytest.approx(expected)

    def test_no_ions_gives_zero(self):
        assert ion_effective_mass(np.zeros(4)) == 0.0


def test_dk_composition_is_normalised():
    percentages = ion_composition_dk(450.0, 60.0, 30.0, 120.0, 3.5)
    assert percentages.shape == (4,)
    assert np.all(percentages >= 0.0)
    assert percentages.sum() == pytest.approx(100.0)


def test_dk_effective_mass_is_bounded():
    mass = ion_effective_mass_dk(450.0, 60.0, 30.0, 120.0, 3.5)
    assert 1.0 <= mass <= 16.0


def test_seasonal_month_shifts_in_south():
    day = date(2020, 1, 15)
    north = seasonal_decimal_month(day, 10.0)
    south = seasonal_decimal_month(day, -10.0)
    assert north == pytest.approx(1.0 + 14.5 / 31.0)
    assert south == pytest.approx(north + 6.0)


def test_f107_adjusted_at_perihelion():
    eexc = 0.01675
    expected = (100.0 + 120.0) / 2.0 / (1.0 - eexc) ** 2
    assert f107_adjusted(100.0, 120.0, 3) == pytest.approx(expected)


@pytest.fixture
def apf107_file(tmp_path):
    path = tmp_path / "apf107.dat"
    rows = []
    for dd, (daily, mean81, yearly) in zip((14, 15), ((69.0, 71.2, 70.1), (70.5, 72.3, 71.0))):
        rows.append(
            f"{20:3d}{1:3d}{dd:3d}" + f"{0:3d}" * 10 + f"{daily:5.1f}{mean81:5.1f}{yearly:5.1f}"
        )
    path.write_text("\n".join(rows) + "\n")
    return path


class TestLoadF107:
    def test_reads_requested_day(self, apf107_file):
        assert load_f107(date(2020, 1, 15), apf107_file) == pytest.approx((70.5, 72.3, 71.0))

    def test_adjusted(self, apf107_file):
        day = date(2020, 1, 15)
        assert load_f107_adjusted(day, apf107_file) == pytest.approx(
            f107_adjusted(70.5, 72.3, 15)
        )

    def test_missing_day_raises(self, apf107_file):
        with pytest.raises(KeyError):
            load_f107(date(2020, 2, 1), apf107_file)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_f107(date(2020, 1, 15), tmp_path / "absent.dat")


class TestMassModel:
    def test_defaults_without_ephemeris(self, make_sample):
        model = dk_mass_model(120.0, date(2020, 1, 15))
        assert model(make_sample()) == config.DEFAULT_ION_EFFECTIVE_MASS

    def test_uses_ephemeris(self, make_sample):
        model = dk_mass_model(120.0, date(2020, 1, 15))
        sample = make_sample(height_km=450.0, latitude=30.0, solar_zenith_angle=60.0)
        mass = model(sample)
        assert math.isfinite(mass)
        assert mass == pytest.approx(
            ion_effective_mass_dk(450.0, 60.0, 30.0, 120.0, seasonal_decimal_month(date(2020, 1, 15), 30.0))
        )
