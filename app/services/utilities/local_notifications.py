"""
Local Notification Backend
==========================

In-process delivery of reminders: every reminder is a one-shot job on the
UnifiedScheduler whose job id is the reminder identifier, so scheduling an
identifier again replaces the pending reminder instead of adding a second
one.

When a reminder fires it is logged and published on the EventBus as
``ReminderEvent.REMINDER_DUE``; listeners (event logger, UI push) take it
from there.

Author: PlantCare Team
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable

from app.enums.events import ReminderEvent
from app.schemas.events import ReminderPayload
from app.services.application.reminder_gateway import parse_reminder_identifier
from app.utils.time import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.utils.event_bus import EventBus
    from app.workers.unified_scheduler import UnifiedScheduler

logger = logging.getLogger(__name__)

REMINDER_NAMESPACE = "reminders"
DELIVER_TASK = "reminders.deliver"


@dataclass(frozen=True)
class PendingReminder:
    """A reminder waiting in the scheduler."""

    identifier: str
    fire_at: datetime
    title: str
    body: str

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "fire_at": self.fire_at.isoformat(),
            "title": self.title,
            "body": self.body,
        }


class LocalNotificationBackend:
    """Notification backend on top of the UnifiedScheduler."""

    def __init__(
        self,
        scheduler: "UnifiedScheduler",
        event_bus: "EventBus | None" = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._scheduler = scheduler
        self._event_bus = event_bus
        self._clock = clock
        self._scheduler.register_task(DELIVER_TASK, self._deliver)

    def schedule(self, identifier: str, fire_at: datetime, title: str, body: str) -> None:
        fire_at = ensure_utc(fire_at)
        if fire_at <= self._clock():
            # A trigger date already in the past never fires.
            self._scheduler.remove_job(identifier)
            logger.debug("Reminder %s not queued; fire time %s has passed", identifier, fire_at.isoformat())
            return
        self._scheduler.schedule_once(
            DELIVER_TASK,
            fire_at,
            job_id=identifier,
            namespace=REMINDER_NAMESPACE,
            args=(identifier, title, body, fire_at),
        )

    def cancel(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            self._scheduler.remove_job(identifier)

    def cancel_all(self) -> None:
        removed = self._scheduler.remove_namespace(REMINDER_NAMESPACE)
        logger.debug("Cancelled %d pending reminders", removed)

    def pending(self) -> list[PendingReminder]:
        """Pending reminders ordered by fire time."""
        reminders = [
            PendingReminder(
                identifier=job.job_id,
                fire_at=job.run_at,
                title=job.args[1],
                body=job.args[2],
            )
            for job in self._scheduler.get_jobs(REMINDER_NAMESPACE)
            if job.next_run is not None
        ]
        return sorted(reminders, key=lambda r: r.fire_at)

    def _deliver(self, identifier: str, title: str, body: str, fire_at: datetime) -> None:
        logger.info("Reminder due: %s (%s: %s)", identifier, title, body)
        if self._event_bus is None:
            return
        parsed = parse_reminder_identifier(identifier)
        kind, plant_id = parsed if parsed else (None, None)
        self._event_bus.publish(
            ReminderEvent.REMINDER_DUE,
            ReminderPayload(
                identifier=identifier,
                plant_id=plant_id,
                kind=kind,
                title=title,
                body=body,
                fire_at=fire_at.isoformat(),
                delivered_at=self._clock().isoformat(),
            ),
        )
