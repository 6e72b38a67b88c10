"""
Plant CRUD Operations
=====================

Endpoints for creating, reading, updating, and deleting plants.
"""

from __future__ import annotations

import logging

from flask import Response, request
from pydantic import ValidationError

from app.blueprints.api._common import (
    fail as _fail,
    get_json as _get_json,
    get_registry as _registry,
    require_plant as _require_plant,
    success as _success,
)
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod
from app.schemas import CreatePlantRequest, UpdatePlantRequest
from app.utils.http import safe_route

from . import plants_api

logger = logging.getLogger("plants_api.crud")

# query parameter -> (enum, registry filter method)
_LIST_FILTERS = {
    "growth_period": (GrowthPeriod, "filter_by_growth_period"),
    "caudex_type": (CaudexType, "filter_by_caudex_type"),
    "light_level": (LightLevel, "filter_by_light_level"),
    "humidity_level": (HumidityLevel, "filter_by_humidity_level"),
}


# ============================================================================
# PLANT CRUD OPERATIONS
# ============================================================================


@plants_api.get("/plants")
@safe_route("Failed to list plants")
def list_plants() -> Response:
    """List plants in insertion order, optionally filtered by one care field."""
    registry = _registry()
    plants = None
    for param, (enum_cls, method) in _LIST_FILTERS.items():
        raw = request.args.get(param)
        if raw is None:
            continue
        try:
            value = enum_cls(raw)
        except ValueError:
            allowed = [member.value for member in enum_cls]
            return _fail(f"Invalid {param}: {raw}", 400, details={"allowed": allowed})
        plants = getattr(registry, method)(value)
        break
    if plants is None:
        plants = registry.plants()

    return _success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@plants_api.post("/plants")
@safe_route("Failed to add plant")
def add_plant() -> Response:
    """Add a new plant; its next watering uses the base interval."""
    try:
        body = CreatePlantRequest.model_validate(_get_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False)})

    registry = _registry()
    plant = registry.add(body.to_plant(registry.now()))
    logger.info("Created plant %s (%s)", plant.plant_id, plant.name)
    return _success(plant.to_dict(), 201)


@plants_api.get("/plants/<plant_id>")
@safe_route("Failed to get plant")
def get_plant(plant_id: str) -> Response:
    """Get a specific plant by ID"""
    return _success(_require_plant(plant_id).to_dict())


@plants_api.put("/plants/<plant_id>")
@safe_route("Failed to update plant")
def update_plant(plant_id: str) -> Response:
    """Edit a plant; only the supplied fields change."""
    try:
        body = UpdatePlantRequest.model_validate(_get_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False)})

    current = _require_plant(plant_id)
    registry = _registry()
    registry.update(body.apply_to(current))
    updated = registry.get(plant_id)
    if updated is None:
        # Removed concurrently between the lookup and the update
        return _fail(f"Plant {plant_id} not found", 404)
    return _success(updated.to_dict())


@plants_api.delete("/plants/<plant_id>")
@safe_route("Failed to remove plant")
def remove_plant(plant_id: str) -> Response:
    """Remove a plant and cancel its reminders."""
    _require_plant(plant_id)
    _registry().remove(plant_id)
    logger.info("Removed plant %s", plant_id)
    return _success({"plant_id": plant_id}, message="Plant removed")
