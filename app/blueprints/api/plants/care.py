"""
Plant Care Endpoints
====================

Care actions (mark watered / fertilized), "what is due now" queries and
partitions of the collection by care field.
"""

from __future__ import annotations

import logging

from flask import Response, request

from app.blueprints.api._common import (
    fail as _fail,
    get_registry as _registry,
    require_plant as _require_plant,
    success as _success,
)
from app.domain.exceptions import ValidationError
from app.utils.http import safe_route
from app.utils.time import coerce_datetime

from . import plants_api

logger = logging.getLogger("plants_api.care")

_GROUPINGS = {
    "growth_period": "group_by_growth_period",
    "caudex_type": "group_by_caudex_type",
    "light_level": "group_by_light_level",
    "humidity_level": "group_by_humidity_level",
}


def _query_now():
    """Optional ``?at=<ISO-8601>`` evaluation time; None means registry clock."""
    raw = request.args.get("at")
    if raw is None:
        return None
    parsed = coerce_datetime(raw)
    if parsed is None:
        raise ValidationError(f"Invalid datetime format: {raw}. Expected ISO 8601.", detail={"at": raw})
    return parsed


# ============================================================================
# CARE ACTIONS
# ============================================================================


@plants_api.post("/plants/<plant_id>/water")
@safe_route("Failed to mark plant watered")
def water_plant(plant_id: str) -> Response:
    """Water now; the next watering uses the growth-adjusted interval."""
    _require_plant(plant_id)
    plant = _registry().mark_watered(plant_id)
    if plant is None:
        return _fail(f"Plant {plant_id} not found", 404)
    logger.info("Plant %s watered; next watering %s", plant_id, plant.next_watering_at.isoformat())
    return _success(plant.to_dict())


@plants_api.post("/plants/<plant_id>/fertilize")
@safe_route("Failed to mark plant fertilized")
def fertilize_plant(plant_id: str) -> Response:
    """Fertilize now; watering fields are unchanged."""
    _require_plant(plant_id)
    plant = _registry().mark_fertilized(plant_id)
    if plant is None:
        return _fail(f"Plant {plant_id} not found", 404)
    logger.info("Plant %s fertilized", plant_id)
    return _success(plant.to_dict())


# ============================================================================
# QUERIES
# ============================================================================


@plants_api.get("/plants/due/watering")
@safe_route("Failed to list plants due for watering")
def plants_due_for_watering() -> Response:
    plants = _registry().plants_due_for_watering(_query_now())
    return _success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@plants_api.get("/plants/due/fertilizing")
@safe_route("Failed to list plants due for fertilizing")
def plants_due_for_fertilizing() -> Response:
    plants = _registry().plants_due_for_fertilizing(_query_now())
    return _success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@plants_api.get("/plants/caudex")
@safe_route("Failed to list caudex plants")
def caudex_plants() -> Response:
    plants = _registry().caudex_plants()
    return _success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@plants_api.get("/plants/groups/<field>")
@safe_route("Failed to group plants")
def group_plants(field: str) -> Response:
    """Partition the collection by one care field; every value is present."""
    method = _GROUPINGS.get(field)
    if method is None:
        return _fail(f"Unknown grouping field: {field}", 400, details={"allowed": sorted(_GROUPINGS)})
    groups = getattr(_registry(), method)()
    return _success(
        {
            "field": field,
            "groups": {key.value: [p.to_dict() for p in plants] for key, plants in groups.items()},
        }
    )
