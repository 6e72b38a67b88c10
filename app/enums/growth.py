"""
Growth-related Enumerations
============================

Care-profile enums for plants. Values are the stable tags written to the
shared store; human-facing labels are mapped at the HTTP boundary.
"""

from enum import Enum


class GrowthPeriod(str, Enum):
    """Current phase of a plant, modulating its effective watering interval."""

    ACTIVE = "active"
    DORMANT = "dormant"
    TRANSITION = "transition"

    def __str__(self):
        return self.value


class CaudexType(str, Enum):
    """Swollen-stem / root classification; anything but NONE is a caudex plant."""

    ABOVE_GROUND = "aboveGround"
    UNDERGROUND = "underground"
    STEM = "stem"
    ROOT = "root"
    NONE = "none"

    def __str__(self):
        return self.value
