"""
Shared test fixtures for the PlantCare test suite.

Provides:
- A fixed, adjustable clock
- An in-memory fake of the byte store (with an "external write" helper)
- A recording fake of the notification backend
- A CareRegistry wired to those fakes with inline side effects
- A Flask app + test client backed by a temporary store directory

Usage:
    def test_example(registry, backend, plant_factory):
        plant = registry.add(plant_factory("Fern"))
        assert backend.pending_ids() == {f"watering-{plant.plant_id}"}
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from app.domain.plant import Plant
from app.services.application.care_registry import CareRegistry
from app.services.application.reminder_gateway import ReminderGateway
from app.utils.concurrency import InlineDispatcher

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("app").setLevel(logging.WARNING)

FIXED_NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeStore:
    """In-memory PlantStore; ``write_external`` simulates another process."""

    key = "SavedPlants"

    def __init__(self, data: bytes | None = None):
        self.data = data
        self.saves: list[bytes] = []
        self.fail_saves = False
        self._external_change = False

    def load(self) -> bytes | None:
        return self.data

    def save(self, data: bytes) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        self.saves.append(data)
        self.data = data

    def write_external(self, data: bytes) -> None:
        self.data = data
        self._external_change = True

    def poll_external_change(self) -> bool:
        changed, self._external_change = self._external_change, False
        return changed


class FakeNotificationBackend:
    """NotificationBackend that records every call and keeps pending reminders."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.pending: dict[str, tuple[datetime, str, str]] = {}
        self.fail = False

    def schedule(self, identifier: str, fire_at: datetime, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification center unavailable")
        self.calls.append(("schedule", identifier))
        self.pending[identifier] = (fire_at, title, body)

    def cancel(self, identifiers) -> None:
        identifiers = list(identifiers)
        self.calls.append(("cancel", tuple(identifiers)))
        for identifier in identifiers:
            self.pending.pop(identifier, None)

    def cancel_all(self) -> None:
        self.calls.append(("cancel_all",))
        self.pending.clear()

    def pending_ids(self) -> set[str]:
        return set(self.pending)


def make_plant(name: str = "Fern", **kwargs: Any) -> Plant:
    kwargs.setdefault("watering_interval_days", 7)
    kwargs.setdefault("last_watered_at", FIXED_NOW)
    return Plant(name=name, **kwargs)


# ========================== Core Fixtures ==================================


@pytest.fixture()
def plant_factory():
    """``plant_factory(name, **fields)``: a Plant last watered at FIXED_NOW, 7-day interval."""
    return make_plant


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def backend() -> FakeNotificationBackend:
    return FakeNotificationBackend()


@pytest.fixture()
def registry(store, backend, clock) -> CareRegistry:
    """Registry with inline side effects and sequential ids (plant-1, plant-2, ...)."""
    counter = itertools.count(1)
    return CareRegistry(
        store,
        ReminderGateway(backend),
        dispatcher=InlineDispatcher(),
        clock=clock,
        id_factory=lambda: f"plant-{next(counter)}",
    )


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path):
    from app import create_app

    flask_app = create_app(
        {
            "store_dir": str(tmp_path / "store"),
            "log_dir": str(tmp_path / "logs"),
            "seed_sample_plants": False,
        }
    )
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.config["CONTAINER"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()
