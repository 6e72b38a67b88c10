"""
Enums Module
============

This module provides enumeration types for the PlantCare application.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.common import HumidityLevel, LightLevel
from app.enums.events import EventType, PlantEvent, ReminderEvent, ReminderKind, RuntimeEvent
from app.enums.growth import CaudexType, GrowthPeriod

__all__ = [
    # Care profile enums
    "GrowthPeriod",
    "CaudexType",
    "LightLevel",
    "HumidityLevel",
    # Event enums
    "ReminderKind",
    "PlantEvent",
    "ReminderEvent",
    "RuntimeEvent",
    "EventType",
]
