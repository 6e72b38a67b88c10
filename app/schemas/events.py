from pydantic import BaseModel, Field

from app.enums.events import ReminderKind


class PlantsChangedPayload(BaseModel):
    """Payload for plant collection change events."""

    schema_version: int = Field(default=1)
    reason: str
    plant_ids: list[str] = Field(default_factory=list)
    count: int = Field(..., ge=0)
    timestamp: str


class ReminderPayload(BaseModel):
    """Payload for reminders delivered by the local notification backend."""

    schema_version: int = Field(default=1)
    identifier: str
    plant_id: str | None = None
    kind: ReminderKind | None = None
    title: str
    body: str
    fire_at: str
    delivered_at: str


class StoreChangedPayload(BaseModel):
    """Payload emitted when another process rewrote the shared store."""

    schema_version: int = Field(default=1)
    store_key: str
    timestamp: str
