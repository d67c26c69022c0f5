import math

import pytest

from slidem import config
from slidem.physics.oml import (
    FaceplateParams,
    ModifiedOMLConfigError,
    ProbeParams,
    debye_length,
    faceplate_area,
    load_modified_oml_params,
    probe_radius,
)


def test_debye_length_value():
    ni, te = 1.0e11, 2000.0
    expected = math.sqrt(
        config.VACUUM_PERMITTIVITY_MAGNITUDE
        * config.BOLTZMANN_CONSTANT_MAGNITUDE
        * te
        / (ni * config.ELEMENTARY_CHARGE_MAGNITUDE**2)
    )
    assert debye_length(ni, te) == pytest.approx(expected)
    assert debye_length(ni, te) == pytest.approx(9.76e-3, rel=1e-2)


@pytest.mark.parametrize("ni,te", [(1.0e11, -1.0), (0.0, 2000.0), (-1.0e11, 2000.0)])
def test_debye_length_invalid_is_nan(ni, te):
    assert math.isnan(debye_length(ni, te))


def test_zero_parameters_give_nominal_geometry():
    area = faceplate_area(1.0e11, 2000.0, -2.0, 16.0, 7500.0, -3.5, FaceplateParams())
    radius = probe_radius(1.0e11, 2000.0, -2.0, 16.0, 7500.0, ProbeParams())
    assert area == pytest.approx(config.FACEPLATE_AREA_MAGNITUDE)
    assert radius == pytest.approx(config.PROBE_RADIUS_MAGNITUDE)


def test_area_modifier_scales_area():
    area = faceplate_area(
        1.0e11, 2000.0, -2.0, 16.0, 7500.0, -3.5, FaceplateParams(area_modifier=0.1)
    )
    assert area == pytest.approx(1.1 * config.FACEPLATE_AREA_MAGNITUDE)


def test_probe_radius_negative_radicand_is_nan():
    assert math.isnan(
        probe_radius(1.0e11, 2000.0, -2.0, 16.0, 7500.0, ProbeParams(eta=2.0))
    )


def test_faceplate_area_zero_potential_is_nan():
    # bias cancelled by the spacecraft potential
    area = faceplate_area(
        1.0e11, 2000.0, 3.5, 16.0, 7500.0, -3.5, FaceplateParams(alpha=1.0, gamma=1.0)
    )
    assert math.isnan(area)


class TestLoadParams:
    def test_reads_faceplate_then_probe_values(self, tmp_path):
        path = tmp_path / "oml"
        path.write_text("0.1 0.2 0.3 0.4\n1 2 3 4 5 6\n")
        fp, probe = load_modified_oml_params(path)
        assert fp == FaceplateParams(0.1, 0.2, 0.3, 0.4)
        assert probe == ProbeParams(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ModifiedOMLConfigError):
            load_modified_oml_params(tmp_path / "absent")

    def test_short_file_raises(self, tmp_path):
        path = tmp_path / "oml"
        path.write_text("0 0 0 0 1 2")
        with pytest.raises(ModifiedOMLConfigError, match="spherical probe"):
            load_modified_oml_params(path)

    def test_non_numeric_raises(self, tmp_path):
        path = tmp_path / "oml"
        path.write_text("0 0 x 0 0 0 0 0 0 0")
        with pytest.raises(ModifiedOMLConfigError):
            load_modified_oml_params(path)
