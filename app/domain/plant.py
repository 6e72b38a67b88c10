"""
Plant Domain Entity
===================

One owned houseplant: its care profile plus the scheduling fields derived
from it.

``next_watering_at`` follows the last watering-affecting write:

- at creation it is ``last_watered_at + watering_interval_days`` (base
  interval, no growth adjustment);
- after a "mark watered" action the registry sets it to
  ``now + adjusted_interval(...)``.

The registry owns the authoritative copy of every plant. Callers receive
copies (:meth:`Plant.copy`) and route changes back through the registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from app.domain import care_schedule
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod
from app.utils.time import coerce_datetime, ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _aware(now: datetime | None) -> datetime:
    """Evaluation time as aware UTC; naive values are taken as UTC."""
    return utc_now() if now is None else ensure_utc(now)


@dataclass
class Plant:
    """
    Care profile and derived schedule of a single plant.

    Attributes:
        plant_id: Opaque stable identifier (None until the registry assigns one)
        name: Display name
        species: Botanical name, free text
        watering_interval_days: Base watering interval in days (>= 1)
        last_watered_at: Last watering timestamp (defaults to creation time)
        next_watering_at: Derived due date for the next watering
        notes: Free-form care notes
        image_ref: Opaque image reference, not interpreted by the engine
        light_level: Light requirement
        humidity_level: Humidity requirement
        caudex_type: Caudex classification (NONE for ordinary plants)
        growth_period: Current growth period
        last_fertilized_at: Last feed timestamp, None means never fertilized
    """

    name: str
    species: str = ""
    watering_interval_days: int = 7
    last_watered_at: datetime = field(default_factory=utc_now)
    next_watering_at: datetime | None = None
    notes: str = ""
    image_ref: str | None = None
    light_level: LightLevel = LightLevel.MEDIUM
    humidity_level: HumidityLevel = HumidityLevel.MEDIUM
    caudex_type: CaudexType = CaudexType.NONE
    growth_period: GrowthPeriod = GrowthPeriod.ACTIVE
    last_fertilized_at: datetime | None = None
    plant_id: str | None = None

    def __post_init__(self):
        """Ensure enums and timestamps are proper types after initialization."""
        if isinstance(self.light_level, str):
            self.light_level = LightLevel(self.light_level)
        if isinstance(self.humidity_level, str):
            self.humidity_level = HumidityLevel(self.humidity_level)
        if isinstance(self.caudex_type, str):
            self.caudex_type = CaudexType(self.caudex_type)
        if isinstance(self.growth_period, str):
            self.growth_period = GrowthPeriod(self.growth_period)

        self.last_watered_at = coerce_datetime(self.last_watered_at) or utc_now()
        self.last_fertilized_at = coerce_datetime(self.last_fertilized_at)
        self.next_watering_at = coerce_datetime(self.next_watering_at)
        if self.next_watering_at is None:
            self.reset_next_watering()

    # ---- derived care state ----

    @property
    def is_caudex_plant(self) -> bool:
        return self.caudex_type != CaudexType.NONE

    @property
    def adjusted_watering_interval(self) -> int:
        """Watering interval in days after the growth-period adjustment."""
        return care_schedule.adjusted_interval(self.watering_interval_days, self.growth_period)

    def needs_fertilizer(self, now: datetime | None = None) -> bool:
        return care_schedule.is_fertilizer_due(self.last_fertilized_at, self.growth_period, _aware(now))

    def needs_water(self, now: datetime | None = None) -> bool:
        return self.next_watering_at <= _aware(now)

    def next_fertilizing_at(self, now: datetime | None = None) -> datetime:
        return care_schedule.next_fertilizing_at(self.last_fertilized_at, _aware(now))

    # ---- schedule writes ----

    def reset_next_watering(self) -> None:
        """Apply the creation rule: base interval from the last watering."""
        self.next_watering_at = care_schedule.base_next_watering(self.last_watered_at, self.watering_interval_days)

    def record_watering(self, now: datetime) -> None:
        """Apply the re-water rule: growth-adjusted interval from ``now``."""
        self.last_watered_at = now
        self.next_watering_at = care_schedule.compute_next_watering(
            now, self.watering_interval_days, self.growth_period
        )

    def record_fertilizing(self, now: datetime) -> None:
        self.last_fertilized_at = now

    def copy(self) -> "Plant":
        return replace(self)

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.plant_id,
            "name": self.name,
            "species": self.species,
            "watering_interval_days": self.watering_interval_days,
            "last_watered_at": self.last_watered_at.isoformat(),
            "next_watering_at": self.next_watering_at.isoformat(),
            "notes": self.notes,
            "image_ref": self.image_ref,
            "light_level": self.light_level.value,
            "humidity_level": self.humidity_level.value,
            "caudex_type": self.caudex_type.value,
            "growth_period": self.growth_period.value,
            "last_fertilized_at": self.last_fertilized_at.isoformat() if self.last_fertilized_at else None,
            "is_caudex_plant": self.is_caudex_plant,
            "adjusted_watering_interval": self.adjusted_watering_interval,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Plant":
        return Plant(
            plant_id=data.get("id") or data.get("plant_id"),
            name=data.get("name", ""),
            species=data.get("species", ""),
            watering_interval_days=int(data.get("watering_interval_days", 7)),
            last_watered_at=data.get("last_watered_at") or utc_now(),
            next_watering_at=data.get("next_watering_at"),
            notes=data.get("notes", ""),
            image_ref=data.get("image_ref"),
            light_level=data.get("light_level", LightLevel.MEDIUM),
            humidity_level=data.get("humidity_level", HumidityLevel.MEDIUM),
            caudex_type=data.get("caudex_type", CaudexType.NONE),
            growth_period=data.get("growth_period", GrowthPeriod.ACTIVE),
            last_fertilized_at=data.get("last_fertilized_at"),
        )
