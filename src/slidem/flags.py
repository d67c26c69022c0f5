"""
Validity flag catalogue for the SLIDEM products.

Each product (ion effective mass, along-track ion drift, ion density) carries
its own unsigned 32-bit mask. Bit positions are fixed by the product
definition and must not be renumbered.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntFlag


class SlidemFlag(IntFlag):
    """Individual quality bits shared by the three product masks."""

    ESTIMATE_OK = 0
    NO_FACEPLATE_CURRENT = 1
    ESTIMATE_DID_NOT_CONVERGE = 1 << 1
    PRODUCT_ESTIMATE_NOT_FINITE = 1 << 2
    UNCERTAINTY_ESTIMATE_NOT_FINITE = 1 << 3
    FACEPLATE_AREA_ESTIMATE_NOT_FINITE = 1 << 4
    PROBE_RADIUS_ESTIMATE_NOT_FINITE = 1 << 5
    BEYOND_VALID_QDLATITUDE = 1 << 6
    OML_FACEPLATE_AREA_CORRECTION_INVALID = 1 << 7
    OML_PROBE_RADIUS_CORRECTION_INVALID = 1 << 8
    ESTIMATE_TOO_LARGE = 1 << 9
    ESTIMATE_TOO_SMALL = 1 << 10
    LP_INPUTS_INVALID = 1 << 11
    LP_PROBE_POTENTIAL_DIFFERENCE_TOO_LARGE = 1 << 12
    SPACECRAFT_POTENTIAL_TOO_NEGATIVE = 1 << 13
    SPACECRAFT_POTENTIAL_TOO_POSITIVE = 1 << 14
    NO_SATELLITE_VELOCITY = 1 << 15
    POST_PROCESSING_ERROR = 1 << 16
    MAG_INPUT_INVALID = 1 << 17


@dataclass(frozen=True, slots=True)
class FlagSet:
    """
    Mass, drift and density masks for one sample.

    The set is immutable: every update returns a new instance so that each
    processing stage hands an explicit value to the next one.
    """

    mass: int = 0
    drift: int = 0
    density: int = 0

    def with_all(self, bits: int) -> FlagSet:
        """Raise ``bits`` on all three masks."""
        return FlagSet(self.mass | bits, self.drift | bits, self.density | bits)

    def with_mass(self, bits: int) -> FlagSet:
        return replace(self, mass=self.mass | bits)

    def with_drift(self, bits: int) -> FlagSet:
        return replace(self, drift=self.drift | bits)

    def with_density(self, bits: int) -> FlagSet:
        return replace(self, density=self.density | bits)

    def merge(self, other: FlagSet) -> FlagSet:
        """Bitwise OR of two flag sets."""
        return FlagSet(
            self.mass | other.mass,
            self.drift | other.drift,
            self.density | other.density,
        )

    def without_drift(self, bits: int) -> FlagSet:
        """Clear ``bits`` on the drift mask only."""
        return replace(self, drift=self.drift & ~bits & 0xFFFFFFFF)

    def to_tuple(self) -> tuple[int, int, int]:
        return self.mass, self.drift, self.density


def has_flag(mask: int, flag: SlidemFlag) -> bool:
    """Return True when every bit of ``flag`` is raised in ``mask``."""
    return (int(mask) & int(flag)) == int(flag)


__all__ = ["FlagSet", "SlidemFlag", "has_flag"]
