"""
Common Enumerations
====================

Environment levels shared by the care profile fields.
"""

from enum import Enum


class LightLevel(str, Enum):
    """Light requirement of a plant."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class HumidityLevel(str, Enum):
    """Humidity requirement of a plant."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value
