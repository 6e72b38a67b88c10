"""
Reminder Gateway
================

Thin translation from care-registry mutations to schedule/cancel calls on
the notification backend.

Reminder identifiers are derived deterministically from the plant id
(``watering-<id>`` / ``fertilizing-<id>``), so cancelling is idempotent and
re-scheduling an identifier never produces a duplicate reminder.

Author: PlantCare Team
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from app.enums.events import ReminderKind

if TYPE_CHECKING:
    from app.domain.plant import Plant
    from app.services.protocols import NotificationBackend

logger = logging.getLogger(__name__)

_REMINDER_TEXT = {
    ReminderKind.WATERING: ("Time to water", "{name} needs watering"),
    ReminderKind.FERTILIZING: ("Time to fertilize", "{name} needs fertilizing"),
}


def reminder_identifier(kind: ReminderKind | str, plant_id: str) -> str:
    """Stable backend identifier of one plant's reminder of ``kind``."""
    return f"{ReminderKind(kind).value}-{plant_id}"


def parse_reminder_identifier(identifier: str) -> tuple[ReminderKind, str] | None:
    """Inverse of :func:`reminder_identifier`; None for foreign identifiers."""
    prefix, sep, plant_id = identifier.partition("-")
    if not sep or not plant_id:
        return None
    try:
        return ReminderKind(prefix), plant_id
    except ValueError:
        return None


class ReminderGateway:
    """Keeps the backend's pending reminders in line with the plant collection."""

    def __init__(self, backend: "NotificationBackend"):
        self._backend = backend

    def schedule(self, plant_id: str, kind: ReminderKind, fire_at: datetime, title: str, body: str) -> None:
        self._backend.schedule(reminder_identifier(kind, plant_id), fire_at, title, body)

    def cancel(self, plant_id: str, kind: ReminderKind) -> None:
        self._backend.cancel([reminder_identifier(kind, plant_id)])

    def cancel_plant(self, plant_id: str) -> None:
        """Cancel both reminder kinds of a plant."""
        self._backend.cancel([reminder_identifier(kind, plant_id) for kind in ReminderKind])
        logger.debug("Cancelled reminders for plant %s", plant_id)

    def resync(self, plant: "Plant", now: datetime) -> None:
        """Cancel then reschedule every reminder of ``plant``.

        The watering reminder fires at ``next_watering_at``; caudex plants
        also get a fertilizing reminder 30 days after their last feed (or
        30 days from ``now`` when never fed).
        """
        self.cancel_plant(plant.plant_id)
        self._schedule_plant(plant, now)

    def resync_all(self, plants: Iterable["Plant"], now: datetime) -> None:
        """Drop every pending reminder, then schedule each plant in order."""
        self._backend.cancel_all()
        count = 0
        for plant in plants:
            self._schedule_plant(plant, now)
            count += 1
        logger.info("Rescheduled reminders for %d plants", count)

    def _schedule_plant(self, plant: "Plant", now: datetime) -> None:
        self._schedule_kind(plant, ReminderKind.WATERING, plant.next_watering_at)
        if plant.is_caudex_plant:
            self._schedule_kind(plant, ReminderKind.FERTILIZING, plant.next_fertilizing_at(now))

    def _schedule_kind(self, plant: "Plant", kind: ReminderKind, fire_at: datetime) -> None:
        title, body = _REMINDER_TEXT[kind]
        self.schedule(plant.plant_id, kind, fire_at, title, body.format(name=plant.name))
