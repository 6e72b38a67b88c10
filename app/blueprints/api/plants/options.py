"""
Plant Form Options
==================

Choice lists for client forms. Display labels live here only; the rest of
the application works with the enum values.
"""

from __future__ import annotations

from flask import Response

from app.blueprints.api._common import success as _success
from app.domain.care_schedule import FERTILIZER_INTERVAL_DAYS
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod
from app.utils.http import safe_route

from . import plants_api

GROWTH_PERIOD_LABELS = {
    GrowthPeriod.ACTIVE: "Growing season",
    GrowthPeriod.DORMANT: "Dormant",
    GrowthPeriod.TRANSITION: "Transition",
}

CAUDEX_TYPE_LABELS = {
    CaudexType.ABOVE_GROUND: "Above-ground caudex",
    CaudexType.UNDERGROUND: "Underground caudex",
    CaudexType.STEM: "Swollen stem",
    CaudexType.ROOT: "Swollen root",
    CaudexType.NONE: "Not a caudex plant",
}

LIGHT_LEVEL_LABELS = {
    LightLevel.LOW: "Low light",
    LightLevel.MEDIUM: "Medium light",
    LightLevel.HIGH: "Bright light",
}

HUMIDITY_LEVEL_LABELS = {
    HumidityLevel.LOW: "Low humidity",
    HumidityLevel.MEDIUM: "Medium humidity",
    HumidityLevel.HIGH: "High humidity",
}


def _choices(labels: dict) -> list[dict[str, str]]:
    return [{"value": member.value, "label": label} for member, label in labels.items()]


@plants_api.get("/plants/options")
@safe_route("Failed to get plant options")
def plant_options() -> Response:
    """Allowed values and display labels for every care field."""
    return _success(
        {
            "growth_period": _choices(GROWTH_PERIOD_LABELS),
            "caudex_type": _choices(CAUDEX_TYPE_LABELS),
            "light_level": _choices(LIGHT_LEVEL_LABELS),
            "humidity_level": _choices(HUMIDITY_LEVEL_LABELS),
            "fertilizer_interval_days": FERTILIZER_INTERVAL_DAYS,
        }
    )
