from typing import Annotated

import pint
from pint import Quantity

ureg = pint.UnitRegistry()

LengthType = Annotated[Quantity, ureg.meter]
AreaType = Annotated[Quantity, ureg.meter**2]
SpeedType = Annotated[Quantity, ureg.meter / ureg.second]
MassType = Annotated[Quantity, ureg.kilogram]
ChargeType = Annotated[Quantity, ureg.coulomb]
CurrentType = Annotated[Quantity, ureg.ampere]
TimeType = Annotated[Quantity, ureg.second]
VoltageType = Annotated[Quantity, ureg.volt]
TemperatureType = Annotated[Quantity, ureg.kelvin]
NumberDensityType = Annotated[Quantity, ureg.meter**-3]
PermittivityType = Annotated[Quantity, ureg.farad / ureg.meter]
EntropyType = Annotated[Quantity, ureg.joule / ureg.kelvin]


__all__ = [
    "ureg",
    "LengthType",
    "AreaType",
    "SpeedType",
    "MassType",
    "ChargeType",
    "CurrentType",
    "TimeType",
    "VoltageType",
    "TemperatureType",
    "NumberDensityType",
    "PermittivityType",
    "EntropyType",
]
