"""
Plant Schemas
=============

Persisted record format of the shared plant collection, plus the
request schemas used by the HTTP boundary.

The persisted collection is one JSON array stored under a single key.
Keys are camelCase; timestamps are ISO-8601; absent optionals are omitted.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.domain.plant import Plant
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod

logger = logging.getLogger(__name__)


class PlantRecord(BaseModel):
    """One element of the persisted plant array."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    species: str = ""
    watering_interval_days: int = Field(..., ge=1)
    last_watered_at: datetime
    next_watering_at: datetime
    notes: str = ""
    image_ref: str | None = None
    light_level: LightLevel = LightLevel.MEDIUM
    humidity_level: HumidityLevel = HumidityLevel.MEDIUM
    caudex_type: CaudexType = CaudexType.NONE
    growth_period: GrowthPeriod = GrowthPeriod.ACTIVE
    last_fertilized_at: datetime | None = None

    @classmethod
    def from_plant(cls, plant: Plant) -> "PlantRecord":
        return cls(
            id=plant.plant_id,
            name=plant.name,
            species=plant.species,
            watering_interval_days=plant.watering_interval_days,
            last_watered_at=plant.last_watered_at,
            next_watering_at=plant.next_watering_at,
            notes=plant.notes,
            image_ref=plant.image_ref,
            light_level=plant.light_level,
            humidity_level=plant.humidity_level,
            caudex_type=plant.caudex_type,
            growth_period=plant.growth_period,
            last_fertilized_at=plant.last_fertilized_at,
        )

    def to_plant(self) -> Plant:
        return Plant(
            plant_id=self.id,
            name=self.name,
            species=self.species,
            watering_interval_days=self.watering_interval_days,
            last_watered_at=self.last_watered_at,
            next_watering_at=self.next_watering_at,
            notes=self.notes,
            image_ref=self.image_ref,
            light_level=self.light_level,
            humidity_level=self.humidity_level,
            caudex_type=self.caudex_type,
            growth_period=self.growth_period,
            last_fertilized_at=self.last_fertilized_at,
        )


_PLANT_ARRAY = TypeAdapter(list[PlantRecord])


def encode_plants(plants: Iterable[Plant]) -> bytes:
    """Serialize plants into the persisted JSON array."""
    records = [PlantRecord.from_plant(p) for p in plants]
    return _PLANT_ARRAY.dump_json(records, by_alias=True, exclude_none=True)


def decode_plants(data: bytes | None) -> list[Plant] | None:
    """Parse the persisted JSON array.

    Returns None when there is no data or when it cannot be decoded; a
    decode failure is treated as "no data" and never raised.
    """
    if not data:
        return None
    try:
        records = _PLANT_ARRAY.validate_json(data)
    except (PydanticValidationError, ValueError) as exc:
        logger.warning("Ignoring undecodable plant collection (%d bytes): %s", len(data), exc)
        return None
    return [record.to_plant() for record in records]


# ---------------------------------------------------------------------------
# HTTP request schemas
# ---------------------------------------------------------------------------


class CreatePlantRequest(BaseModel):
    """Request schema for adding a plant."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Display name")
    species: str = Field(default="", description="Botanical name")
    watering_interval_days: int = Field(..., ge=1, description="Base watering interval in days")
    last_watered_at: datetime | None = Field(default=None, description="Defaults to now")
    notes: str = ""
    image_ref: str | None = None
    light_level: LightLevel = LightLevel.MEDIUM
    humidity_level: HumidityLevel = HumidityLevel.MEDIUM
    caudex_type: CaudexType = CaudexType.NONE
    growth_period: GrowthPeriod = GrowthPeriod.ACTIVE
    last_fertilized_at: datetime | None = None

    def to_plant(self, now: datetime) -> Plant:
        return Plant(
            name=self.name,
            species=self.species,
            watering_interval_days=self.watering_interval_days,
            last_watered_at=self.last_watered_at or now,
            notes=self.notes,
            image_ref=self.image_ref,
            light_level=self.light_level,
            humidity_level=self.humidity_level,
            caudex_type=self.caudex_type,
            growth_period=self.growth_period,
            last_fertilized_at=self.last_fertilized_at,
        )


class UpdatePlantRequest(BaseModel):
    """Request schema for editing a plant; only supplied fields change."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(default=None, min_length=1)
    species: str | None = None
    watering_interval_days: int | None = Field(default=None, ge=1)
    last_watered_at: datetime | None = None
    next_watering_at: datetime | None = None
    notes: str | None = None
    image_ref: str | None = None
    light_level: LightLevel | None = None
    humidity_level: HumidityLevel | None = None
    caudex_type: CaudexType | None = None
    growth_period: GrowthPeriod | None = None
    last_fertilized_at: datetime | None = None

    def apply_to(self, plant: Plant) -> Plant:
        """Return an edited copy of ``plant``."""
        edited = plant.copy()
        for key, value in self.model_dump(exclude_unset=True).items():
            if value is None and key not in {"image_ref", "last_fertilized_at"}:
                continue
            setattr(edited, key, value)
        # Re-run coercion so timestamps end up aware UTC.
        return edited.copy()
