import numpy as np
import pytest

from slidem import config
from slidem.samples import DayInputs, Sample

RAM_SPEED = 7500.0  # m/s
NI_CM3 = 1.0e5
TE = 2000.0  # K
VS = -2.0  # V


def consistent_current_na(ni_cm3, speed=RAM_SPEED):
    """
    Measured faceplate current (nA, negative) for an O+ plasma of density
    ``ni_cm3`` hitting the geometric faceplate at ``speed``.

    With nominal probe geometry this current yields an effective mass of
    16 amu, the seed density and zero drift.
    """
    return (
        -np.asarray(ni_cm3, dtype=float)
        * 1.0e6
        * config.ELEMENTARY_CHARGE_MAGNITUDE
        * config.FACEPLATE_AREA_MAGNITUDE
        * speed
        * 1.0e9
    )


@pytest.fixture
def make_sample():
    """Factory for a well-behaved low-latitude sample; override any field."""

    def _make(**overrides) -> Sample:
        values = dict(
            time=0.0,
            faceplate_current=float(consistent_current_na(NI_CM3)),
            vn=RAM_SPEED,
            ve=0.0,
            vc=0.0,
            qdlat=30.0,
            diplat=20.0,
            te=TE,
            te_source=3,
            vs=VS,
            vs_source=3,
            ni=NI_CM3,
        )
        values.update(overrides)
        return Sample(**values)

    return _make


@pytest.fixture
def make_day():
    """Factory for a day of consistent inputs along a given QD latitude track."""

    def _make(qdlat, dt=0.5, ni_cm3=NI_CM3, **overrides) -> DayInputs:
        qdlat = np.asarray(qdlat, dtype=float)
        n = qdlat.size
        ni = np.full(n, ni_cm3, dtype=float)
        arrays = dict(
            time=np.arange(n) * dt,
            faceplate_current=consistent_current_na(ni),
            vn=np.full(n, RAM_SPEED),
            ve=np.zeros(n),
            vc=np.zeros(n),
            qdlat=qdlat,
            ni=ni,
            diplat=np.full(n, 20.0),
            te=np.full(n, TE),
            vs=np.full(n, VS),
        )
        arrays.update(overrides)
        return DayInputs(**arrays)

    return _make


def northern_pass(n_entry=20, n_exit=20, n_polar=20):
    """
    QD latitude track crossing the northern calibration bands once.

    The entry band occupies indices [10, 10 + n_entry) and the exit band the
    ``n_exit`` samples that start after ``2 * n_polar`` polar samples.
    """
    before = np.linspace(45.0, 49.9, 10)
    entry = np.linspace(50.0, 50.95, n_entry)
    up = np.linspace(51.0, 80.0, n_polar)
    down = np.linspace(80.0, 51.05, n_polar)
    exit_ = np.linspace(51.0, 50.05, n_exit)
    after = np.linspace(50.0, 45.0, 10)
    return np.concatenate([before, entry, up, down, exit_, after])


@pytest.fixture
def northern_track():
    return northern_pass()


@pytest.fixture
def make_northern_track():
    return northern_pass


@pytest.fixture
def current_for():
    return consistent_current_na
