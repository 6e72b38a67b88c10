"""
Schemas Module
==============

This module provides Pydantic models for request/response validation and
for the persisted plant record.
Schemas ensure data integrity and provide automatic validation.
"""

from app.schemas.events import PlantsChangedPayload, ReminderPayload, StoreChangedPayload
from app.schemas.plants import (
    CreatePlantRequest,
    UpdatePlantRequest,
    PlantRecord,
    decode_plants,
    encode_plants,
)

__all__ = [
    # Persisted record
    "PlantRecord",
    "encode_plants",
    "decode_plants",
    # Requests
    "CreatePlantRequest",
    "UpdatePlantRequest",
    # Events
    "PlantsChangedPayload",
    "ReminderPayload",
    "StoreChangedPayload",
]
