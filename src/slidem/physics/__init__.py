"""
Physics module for the SLIDEM processor.

Probe geometry corrections, empirical ion composition, geomagnetic helpers and
Langmuir probe input selection.
"""

from .composition import (
    dk_mass_model,
    f107_adjusted,
    ion_composition_dk,
    ion_effective_mass,
    ion_effective_mass_dk,
)
from .geomagnetic import dip_latitude
from .langmuir import LpSource, select_electron_temperature, select_spacecraft_potential
from .oml import (
    FaceplateParams,
    ModifiedOMLConfigError,
    ProbeParams,
    debye_length,
    faceplate_area,
    load_modified_oml_params,
    probe_radius,
)

__all__ = [
    "FaceplateParams",
    "LpSource",
    "ModifiedOMLConfigError",
    "ProbeParams",
    "debye_length",
    "dip_latitude",
    "dk_mass_model",
    "f107_adjusted",
    "faceplate_area",
    "ion_composition_dk",
    "ion_effective_mass",
    "ion_effective_mass_dk",
    "load_modified_oml_params",
    "probe_radius",
    "select_electron_temperature",
    "select_spacecraft_potential",
]
