"""
Central configuration constants for the SLIDEM ion drift, density and effective
mass processor.
"""

from pathlib import Path

from .utils.units import (
    AreaType,
    ChargeType,
    EntropyType,
    LengthType,
    MassType,
    PermittivityType,
    VoltageType,
    ureg,
)

# ========== Product identification ==========
SOFTWARE_VERSION_STRING = "SLIDEM version 2022-05-17"
SOFTWARE_VERSION = "02.02"
EXPORT_VERSION_STRING = "0101"

# ========== Physical parameters ==========
# Rounded values are part of the product definition, do not swap for CODATA.
BOLTZMANN_CONSTANT: EntropyType = 1.38e-23 * ureg.joule / ureg.kelvin
BOLTZMANN_CONSTANT_MAGNITUDE: float = BOLTZMANN_CONSTANT.magnitude  # J/K
VACUUM_PERMITTIVITY: PermittivityType = 8.85e-12 * ureg.farad / ureg.meter
VACUUM_PERMITTIVITY_MAGNITUDE: float = VACUUM_PERMITTIVITY.magnitude  # F/m
ELEMENTARY_CHARGE: ChargeType = 1.602e-19 * ureg.coulomb
ELEMENTARY_CHARGE_MAGNITUDE: float = ELEMENTARY_CHARGE.magnitude  # C
ATOMIC_MASS_UNIT: MassType = 1.66e-27 * ureg.kilogram
ATOMIC_MASS_UNIT_MAGNITUDE: float = ATOMIC_MASS_UNIT.magnitude  # kg

# ========== Sensor geometry ==========
PROBE_RADIUS: LengthType = 0.004 * ureg.meter  # spherical LP probe
PROBE_RADIUS_MAGNITUDE: float = PROBE_RADIUS.magnitude
FACEPLATE_WIDTH: LengthType = 0.351 * ureg.meter
FACEPLATE_HEIGHT: LengthType = 0.229 * ureg.meter
FACEPLATE_WIDTH_MAGNITUDE: float = FACEPLATE_WIDTH.magnitude
FACEPLATE_HEIGHT_MAGNITUDE: float = FACEPLATE_HEIGHT.magnitude
FACEPLATE_AREA: AreaType = FACEPLATE_WIDTH * FACEPLATE_HEIGHT
FACEPLATE_AREA_MAGNITUDE: float = FACEPLATE_AREA.magnitude  # geometric, m^2
FACEPLATE_PERIMETER_MAGNITUDE: float = 2.0 * (
    FACEPLATE_WIDTH_MAGNITUDE + FACEPLATE_HEIGHT_MAGNITUDE
)
FACEPLATE_VOLTAGE: VoltageType = -3.5 * ureg.volt  # bias assumed for every sample
FACEPLATE_VOLTAGE_MAGNITUDE: float = FACEPLATE_VOLTAGE.magnitude

# ========== Retrieval settings ==========
DEFAULT_ION_EFFECTIVE_MASS = 16.0  # amu, used when no composition model is given
ADMITTANCE_REFERENCE_MASS = 16.0  # amu, LP ion admittance assumes O+
QDLAT_CUTOFF = 50.0  # deg, drift retrieved at or poleward of this |QDLat|
POST_PROCESSING_QDLAT_WIDTH = 1.0  # deg, width of each calibration band

MAX_ITERATIONS = 100
NI_ITERATION_THRESHOLD = 0.01  # fraction 0 to 1
MIEFF_ITERATION_THRESHOLD = 0.01  # fraction 0 to 1
VI_ITERATION_THRESHOLD = 1.0  # m/s

MODIFIED_OML_FACEPLATE_CORRECTION = True
MODIFIED_OML_SPHERICAL_PROBE_CORRECTION = True
BLENDED_TE = True  # use EXTD blended Te without adjustment
BLENDED_VS = True  # use EXTD blended spacecraft potential

# ========== Post-processing ==========
POST_PROCESS_ION_DRIFT = True
POST_PROCESS_ION_EFFECTIVE_MASS_AND_DENSITY = True
MINIMUM_POINTS_PER_FIT_REGION = 10  # per calibration segment
ORBITAL_PERIOD_SECONDS = 5400.0
MAXIMUM_SEGMENT_SECONDS = ORBITAL_PERIOD_SECONDS / 2.0
# Drift points with any of these bits raised are left out of the offset model.
# 0 admits every point in the calibration bands.
ION_DRIFT_POST_CALIBRATION_FLAG_MASK = 0
ROBUST_FIT_MAXIMUM_ITERATIONS = 500
ROBUST_FIT_TOLERANCE = 1.0e-8  # change in bisquare deviance between passes
FIT_ERROR_PLACEHOLDER = -9999999999

# ========== Flag thresholds ==========
FLAGS_MAXIMUM_DRIFT_MAGNITUDE = 6000.0  # m/s
FLAGS_MINIMUM_MIEFF = 1.0  # amu
FLAGS_MAXIMUM_MIEFF = 40.0  # amu
FLAGS_MINIMUM_NI = 1.0e8  # m^-3
FLAGS_MAXIMUM_NI = 2.0e13  # m^-3
FLAGS_MINIMUM_FACEPLATE_AREA = 0.08  # m^2
FLAGS_MAXIMUM_FACEPLATE_AREA = 0.15  # m^2
FLAGS_MINIMUM_PROBE_RADIUS = 0.001  # m
FLAGS_MAXIMUM_PROBE_RADIUS = 0.005  # m
FLAGS_MAXIMUM_PROBE_POTENTIAL_DIFFERENCE = 0.3  # V, |Vs_hgn - Vs_lgn|
FLAGS_MINIMUM_LP_SPACECRAFT_POTENTIAL = -5.0  # V
FLAGS_MAXIMUM_LP_SPACECRAFT_POTENTIAL = 5.0  # V
FLAGS_MINIMUM_LP_TE = 0.0  # K
FLAGS_MAXIMUM_LP_TE = 20000.0  # K
FLAGS_MINIMUM_LP_NI = 0.0  # cm^-3
FLAGS_MAXIMUM_LP_NI = 1.0e7  # cm^-3

# ========== Missing-value sentinels ==========
MISSING_MIEFF_VALUE = -1.0
MISSING_VI_VALUE = -100000.0
MISSING_VNEC_VALUE = -100000.0
MISSING_DIPLAT_VALUE = -1000.0
MISSING_NI_VALUE = -1.0
MISSING_RPROBE_VALUE = -1.0
MISSING_FPAREA_VALUE = -1.0
MISSING_ERROR_ESTIMATE_VALUE = -1.0
MISSING_TE_VALUE = -1.0
MISSING_VS_VALUE = -1.0

# ========== Input column names ==========
TIME_COLUMN = "time"
CURRENT_COLUMN = "faceplate_current"
VNEC_COLUMNS = ["vn", "ve", "vc"]
QDLAT_COLUMN = "qdlat"
DIPLAT_COLUMN = "diplat"
NI_COLUMN = "ni"
TE_COLUMN = "te"
VS_COLUMN = "vs"
REQUIRED_COLUMNS = [
    TIME_COLUMN,
    CURRENT_COLUMN,
    *VNEC_COLUMNS,
    QDLAT_COLUMN,
    NI_COLUMN,
]
B_NEC_COLUMNS = ["bn", "be", "bc"]

# ========== Files ==========
HOME_DIR = Path.home()
MODIFIED_OML_CONFIG_FILE = HOME_DIR / f".slidem_modified_oml_configrc_{EXPORT_VERSION_STRING}"
F107_FILE = HOME_DIR / "bin" / "apf107.dat"
FIT_LOG_SUFFIX = ".fitlog"
