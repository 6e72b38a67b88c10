"""
Starter plant collection seeded into an empty registry.

Five common foliage plants (the Monstera already due for water) and ten
caudex succulents with staggered feeding dates, so both due queries have
something to show on first launch.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.domain.plant import Plant
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod


@dataclass(frozen=True)
class SamplePlant:
    name: str
    species: str
    watering_interval_days: int
    notes: str
    light_level: LightLevel
    humidity_level: HumidityLevel
    caudex_type: CaudexType = CaudexType.NONE
    growth_period: GrowthPeriod = GrowthPeriod.ACTIVE
    watered_days_ago: int = 0
    fertilized_days_ago: int | None = None

    def build(self, now: datetime) -> Plant:
        return Plant(
            name=self.name,
            species=self.species,
            watering_interval_days=self.watering_interval_days,
            last_watered_at=now - timedelta(days=self.watered_days_ago),
            notes=self.notes,
            light_level=self.light_level,
            humidity_level=self.humidity_level,
            caudex_type=self.caudex_type,
            growth_period=self.growth_period,
            last_fertilized_at=(
                now - timedelta(days=self.fertilized_days_ago) if self.fertilized_days_ago is not None else None
            ),
        )


SAMPLE_PLANTS: tuple[SamplePlant, ...] = (
    SamplePlant(
        "Monstera", "Monstera deliciosa", 7,
        "Likes moist surroundings, but do not overwater",
        LightLevel.MEDIUM, HumidityLevel.HIGH, watered_days_ago=7,
    ),
    SamplePlant(
        "Peace Lily", "Spathiphyllum", 3,
        "Water as soon as the leaves start to droop",
        LightLevel.LOW, HumidityLevel.HIGH, watered_days_ago=2,
    ),
    SamplePlant(
        "Snake Plant", "Sansevieria trifasciata", 14,
        "Drought tolerant and easy going",
        LightLevel.LOW, HumidityLevel.LOW,
    ),
    SamplePlant(
        "ZZ Plant", "Zamioculcas zamiifolia", 10,
        "Shade tolerant, needs little water",
        LightLevel.LOW, HumidityLevel.LOW,
    ),
    SamplePlant(
        "Golden Pothos", "Epipremnum aureum", 7,
        "Adapts to almost anything",
        LightLevel.MEDIUM, HumidityLevel.MEDIUM,
    ),
    SamplePlant(
        "Desert Rose", "Adenium obesum", 7,
        "Wants full sun and a fast draining mix",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.ABOVE_GROUND, fertilized_days_ago=35,
    ),
    SamplePlant(
        "Elephant's Foot Tree", "Pachypodium lamerei", 10,
        "Needs plenty of sun, drought tolerant",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.STEM, fertilized_days_ago=25,
    ),
    SamplePlant(
        "Tortoise Plant", "Dioscorea elephantipes", 14,
        "Stop watering completely while dormant",
        LightLevel.MEDIUM, HumidityLevel.LOW, CaudexType.UNDERGROUND, GrowthPeriod.DORMANT,
        fertilized_days_ago=45,
    ),
    SamplePlant(
        "Dorstenia", "Dorstenia gigas", 10,
        "Socotra endemic tree succulent, needs plenty of sun",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.STEM, fertilized_days_ago=20,
    ),
    SamplePlant(
        "Buddha Belly Plant", "Jatropha podagrica", 7,
        "Swollen stem and red flowers, use a well draining mix",
        LightLevel.HIGH, HumidityLevel.MEDIUM, CaudexType.STEM, fertilized_days_ago=15,
    ),
    SamplePlant(
        "Baseball Plant", "Euphorbia obesa", 14,
        "Globular succulent, water sparingly and avoid harsh direct sun",
        LightLevel.MEDIUM, HumidityLevel.LOW, CaudexType.STEM, fertilized_days_ago=40,
    ),
    SamplePlant(
        "Adenia", "Adenia glauca", 10,
        "Blue-green leaves, keep warm and do not overwater",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.ABOVE_GROUND, fertilized_days_ago=30,
    ),
    SamplePlant(
        "Fockea", "Fockea edulis", 8,
        "Edible caudex, needs a well draining mix",
        LightLevel.HIGH, HumidityLevel.MEDIUM, CaudexType.UNDERGROUND, fertilized_days_ago=35,
    ),
    SamplePlant(
        "Namibian Grape", "Cyphostemma juttae", 10,
        "Large caudex, full sun, drought tolerant",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.STEM, fertilized_days_ago=20,
    ),
    SamplePlant(
        "Madagascar Palm", "Pachypodium geayi", 12,
        "Tree succulent, plenty of sun, drought tolerant",
        LightLevel.HIGH, HumidityLevel.LOW, CaudexType.STEM, fertilized_days_ago=25,
    ),
)


def build_sample_plants(now: datetime) -> list[Plant]:
    """Fresh Plant instances (without ids) for every starter plant."""
    return [sample.build(now) for sample in SAMPLE_PLANTS]
