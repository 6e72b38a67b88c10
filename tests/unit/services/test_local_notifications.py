from datetime import timedelta

import pytest

from app.enums.events import ReminderEvent
from app.services.application.reminder_gateway import ReminderGateway
from app.services.utilities.local_notifications import DELIVER_TASK, LocalNotificationBackend
from app.utils.event_bus import EventBus
from app.workers.unified_scheduler import UnifiedScheduler


@pytest.fixture()
def scheduler(clock):
    return UnifiedScheduler(clock=clock)


@pytest.fixture()
def bus():
    event_bus = EventBus(worker_count=1)
    yield event_bus
    event_bus.shutdown()


@pytest.fixture()
def notifications(scheduler, bus, clock):
    return LocalNotificationBackend(scheduler, event_bus=bus, clock=clock)


def test_schedule_creates_one_shot_job(notifications, scheduler, clock):
    fire_at = clock() + timedelta(days=1)
    notifications.schedule("watering-p1", fire_at, "Time to water", "Fern needs watering")

    job = scheduler.get_job("watering-p1")
    assert job.task_name == DELIVER_TASK
    assert job.namespace == "reminders"
    assert job.run_at == fire_at
    [pending] = notifications.pending()
    assert pending.identifier == "watering-p1"
    assert pending.body == "Fern needs watering"


def test_rescheduling_replaces_pending_reminder(notifications, clock):
    notifications.schedule("watering-p1", clock() + timedelta(days=1), "t", "b")
    notifications.schedule("watering-p1", clock() + timedelta(days=3), "t", "b2")

    [pending] = notifications.pending()
    assert pending.fire_at == clock() + timedelta(days=3)
    assert pending.body == "b2"


def test_past_fire_time_is_not_queued_and_drops_previous(notifications, clock):
    notifications.schedule("watering-p1", clock() + timedelta(days=1), "t", "b")
    notifications.schedule("watering-p1", clock() - timedelta(minutes=1), "t", "b")
    assert notifications.pending() == []


def test_cancel_and_cancel_all_leave_other_jobs_alone(notifications, scheduler, clock):
    scheduler.register_task("store.poll", lambda: None)
    scheduler.schedule_interval("store.poll", 5, job_id="store_poll", namespace="store")
    for identifier in ("watering-a", "watering-b", "fertilizing-b"):
        notifications.schedule(identifier, clock() + timedelta(days=1), "t", "b")

    notifications.cancel(["watering-a", "unknown"])
    assert {r.identifier for r in notifications.pending()} == {"watering-b", "fertilizing-b"}

    notifications.cancel_all()
    assert notifications.pending() == []
    assert scheduler.get_job("store_poll") is not None


def test_pending_sorted_by_fire_time(notifications, clock):
    notifications.schedule("watering-late", clock() + timedelta(days=9), "t", "b")
    notifications.schedule("watering-early", clock() + timedelta(days=2), "t", "b")
    assert [r.identifier for r in notifications.pending()] == ["watering-early", "watering-late"]


def test_due_reminder_is_delivered_on_the_bus(notifications, scheduler, bus, clock):
    received = []
    bus.subscribe(ReminderEvent.REMINDER_DUE, received.append)
    fire_at = clock() + timedelta(hours=2)
    notifications.schedule("fertilizing-p9", fire_at, "Time to fertilize", "Fockea needs fertilizing")

    assert scheduler.run_pending() == 0
    clock.advance(hours=2)
    assert scheduler.run_pending() == 1
    assert bus.wait_idle(timeout=2.0)

    [payload] = received
    assert payload["identifier"] == "fertilizing-p9"
    assert payload["plant_id"] == "p9"
    assert payload["kind"] == "fertilizing"
    assert payload["fire_at"] == fire_at.isoformat()
    # Delivered reminders are gone
    assert notifications.pending() == []
    assert scheduler.run_pending() == 0


def test_gateway_on_local_backend_keeps_one_reminder_per_kind(scheduler, clock, plant_factory):
    backend = LocalNotificationBackend(scheduler, clock=clock)
    gateway = ReminderGateway(backend)
    plant = plant_factory("Adenium", plant_id="p1", caudex_type="stem")

    gateway.resync(plant, clock())
    gateway.resync(plant, clock())

    assert sorted(r.identifier for r in backend.pending()) == ["fertilizing-p1", "watering-p1"]


def test_delivery_without_bus_only_logs(scheduler, clock):
    backend = LocalNotificationBackend(scheduler, clock=clock)
    backend.schedule("watering-p1", clock() + timedelta(seconds=1), "t", "b")
    clock.advance(seconds=1)

    assert scheduler.run_pending() == 1
    [result] = scheduler.get_history()
    assert result.success is True
