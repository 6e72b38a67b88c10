"""
Care Registry
=============
Application service owning the plant collection.

Responsibilities:
- Own the ordered in-memory collection (single source of truth)
- CRUD and care actions (mark watered / mark fertilized)
- "What is due now" queries and simple partitions
- After every committed mutation: persist the collection and resync the
  affected reminders as fire-and-forget side effects
- Reload the whole collection when another process rewrites the store

Concurrency:
- ``_lock`` (RLock) is the serialization point for every mutation; external
  change signals from the scheduler thread go through the same lock.
- The collection is an immutable tuple swapped wholesale on commit, so a
  reader either sees the old collection or the new one, never a mix.
- Side effects are submitted to the dispatcher while the lock is held, so
  they are queued in commit order (cancel-before-schedule per plant).

Unknown ids are silent no-ops for update/remove/mark_*; persistence and
reminder failures are logged by the dispatcher and never reach the caller.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from app.domain.plant import Plant
from app.enums.common import HumidityLevel, LightLevel
from app.enums.events import PlantEvent, RuntimeEvent
from app.enums.growth import CaudexType, GrowthPeriod
from app.schemas.events import PlantsChangedPayload, StoreChangedPayload
from app.schemas.plants import decode_plants, encode_plants
from app.services.application.sample_plants import build_sample_plants
from app.utils.concurrency import InlineDispatcher, synchronized
from app.utils.time import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.services.application.reminder_gateway import ReminderGateway
    from app.services.protocols import PlantStore
    from app.utils.concurrency import Dispatcher
    from app.utils.event_bus import EventBus

logger = logging.getLogger(__name__)


def _new_plant_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class PlantsChange:
    """What a committed mutation did, handed to registry listeners."""

    reason: str  # "added", "updated", "watered", "fertilized", "removed", "reloaded"
    plant_ids: tuple[str, ...]
    snapshot: tuple[Plant, ...]


_REASON_EVENTS = {
    "added": PlantEvent.PLANT_ADDED,
    "updated": PlantEvent.PLANT_UPDATED,
    "watered": PlantEvent.PLANT_UPDATED,
    "fertilized": PlantEvent.PLANT_UPDATED,
    "removed": PlantEvent.PLANT_REMOVED,
    "reloaded": PlantEvent.PLANTS_RELOADED,
}


class CareRegistry:
    """
    Registry of the owner's plants and their care schedule.

    Callers always receive copies; changes go back through :meth:`update`
    or the care actions.
    """

    def __init__(
        self,
        store: "PlantStore",
        reminders: "ReminderGateway",
        *,
        dispatcher: Optional["Dispatcher"] = None,
        event_bus: Optional["EventBus"] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = _new_plant_id,
        seed_samples: bool = False,
    ):
        """
        Initialize the registry.

        Args:
            store: Byte store holding the serialized collection
            reminders: Gateway to the notification backend
            dispatcher: Runs persistence / reminder side effects (inline if omitted)
            event_bus: Optional bus receiving plant change events
            clock: Source of aware UTC "now"
            id_factory: Produces fresh plant ids
            seed_samples: Seed the starter plants when the store is empty on start()
        """
        self._store = store
        self._reminders = reminders
        self._dispatcher = dispatcher or InlineDispatcher()
        self._event_bus = event_bus
        self._clock = clock
        self._id_factory = id_factory
        self._seed_samples = seed_samples

        self._plants: tuple[Plant, ...] = ()
        self._lock = threading.RLock()
        self._listeners: list[Callable[[PlantsChange], None]] = []

    # ==================== Lifecycle ====================

    def start(self) -> None:
        """Load the stored collection, seeding the starter plants if empty."""
        snapshot = decode_plants(self._store.load())
        if snapshot is not None:
            self.reload(snapshot)
        with self._lock:
            empty = not self._plants
        if empty and self._seed_samples:
            samples = build_sample_plants(self._clock())
            for plant in samples:
                self.add(plant)
            logger.info("Seeded %d sample plants", len(samples))
        logger.info("CareRegistry started with %d plants", len(self._plants))

    def handle_external_change(self) -> bool:
        """Reload from the store; an undecodable store keeps the current state."""
        snapshot = decode_plants(self._store.load())
        if snapshot is None:
            logger.warning("Store changed but holds no decodable collection; keeping current state")
            return False
        self.reload(snapshot)
        return True

    def sync_from_store(self) -> bool:
        """Poll the store and reload when another process wrote it."""
        if not self._store.poll_external_change():
            return False
        if self._event_bus is not None:
            self._event_bus.publish(
                RuntimeEvent.STORE_CHANGED,
                StoreChangedPayload(store_key=getattr(self._store, "key", ""), timestamp=self._clock().isoformat()),
            )
        return self.handle_external_change()

    # ==================== Listeners ====================

    def add_listener(self, callback: Callable[[PlantsChange], None]) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(callback)
                except ValueError:
                    return

        return unsubscribe

    # ==================== Mutations ====================

    @synchronized
    def add(self, plant: Plant) -> Plant:
        """Append a plant; assigns an id if missing and applies the creation rule."""
        new_plant = plant.copy()
        if not new_plant.plant_id or self._index_of(new_plant.plant_id) is not None:
            if new_plant.plant_id:
                logger.warning("Plant id %s already in use; assigning a fresh id", new_plant.plant_id)
            new_plant.plant_id = self._id_factory()
        new_plant.reset_next_watering()

        self._plants = self._plants + (new_plant,)
        self._after_commit("added", (new_plant,))
        logger.info("Added plant %s (%s)", new_plant.plant_id, new_plant.name)
        return new_plant.copy()

    @synchronized
    def update(self, plant: Plant) -> None:
        """Replace the plant with the same id; unknown ids are ignored."""
        self._replace(plant.copy(), "updated")

    @synchronized
    def remove(self, plant_id: str) -> None:
        """Delete every entry with ``plant_id`` and cancel its reminders."""
        kept = tuple(p for p in self._plants if p.plant_id != plant_id)
        if len(kept) == len(self._plants):
            logger.debug("remove(%s): no such plant", plant_id)
            return
        self._plants = kept
        self._submit_persist()
        self._dispatcher.submit(f"cancel reminders {plant_id}", self._reminders.cancel_plant, plant_id)
        self._notify("removed", (plant_id,))
        logger.info("Removed plant %s", plant_id)

    @synchronized
    def mark_watered(self, plant_id: str) -> Optional[Plant]:
        """Water now: the next watering uses the growth-adjusted interval."""
        index = self._index_of(plant_id)
        if index is None:
            return None
        watered = self._plants[index].copy()
        watered.record_watering(self._clock())
        self._replace(watered, "watered")
        return watered.copy()

    @synchronized
    def mark_fertilized(self, plant_id: str) -> Optional[Plant]:
        """Fertilize now; watering fields are left alone."""
        index = self._index_of(plant_id)
        if index is None:
            return None
        fed = self._plants[index].copy()
        fed.record_fertilizing(self._clock())
        self._replace(fed, "fertilized")
        return fed.copy()

    @synchronized
    def reload(self, snapshot: Iterable[Plant]) -> None:
        """Swap in ``snapshot`` wholesale and reschedule every reminder."""
        self._plants = tuple(p.copy() for p in snapshot)
        plants = self._plants
        self._dispatcher.submit("resync all reminders", self._reminders.resync_all, plants, self._clock())
        self._notify("reloaded", tuple(p.plant_id for p in plants))
        logger.info("Reloaded %d plants", len(plants))

    def _replace(self, plant: Plant, reason: str) -> None:
        index = self._index_of(plant.plant_id)
        if index is None:
            logger.debug("%s: unknown plant %s ignored", reason, plant.plant_id)
            return
        self._plants = self._plants[:index] + (plant,) + self._plants[index + 1 :]
        self._after_commit(reason, (plant,))

    def _after_commit(self, reason: str, changed: tuple[Plant, ...]) -> None:
        now = self._clock()
        self._submit_persist()
        for plant in changed:
            self._dispatcher.submit(f"resync reminders {plant.plant_id}", self._reminders.resync, plant, now)
        self._notify(reason, tuple(p.plant_id for p in changed))

    def _submit_persist(self) -> None:
        self._dispatcher.submit("persist plants", self._persist, self._plants)

    def _persist(self, plants: tuple[Plant, ...]) -> None:
        try:
            data = encode_plants(plants)
        except (ValueError, TypeError) as exc:
            logger.warning("Could not encode %d plants; save dropped: %s", len(plants), exc)
            return
        self._store.save(data)

    def _notify(self, reason: str, plant_ids: tuple[str, ...]) -> None:
        change = PlantsChange(reason=reason, plant_ids=plant_ids, snapshot=tuple(p.copy() for p in self._plants))
        for callback in list(self._listeners):
            try:
                callback(change)
            except Exception as exc:
                logger.error("Plants listener failed on %s: %s", reason, exc, exc_info=True)
        if self._event_bus is not None:
            self._event_bus.publish(
                _REASON_EVENTS[reason],
                PlantsChangedPayload(
                    reason=reason,
                    plant_ids=list(plant_ids),
                    count=len(self._plants),
                    timestamp=self._clock().isoformat(),
                ),
            )

    def _index_of(self, plant_id: str | None) -> Optional[int]:
        for index, plant in enumerate(self._plants):
            if plant.plant_id == plant_id:
                return index
        return None

    # ==================== Queries ====================

    def now(self) -> datetime:
        """Current time according to the registry clock."""
        return self._clock()

    def _snapshot(self) -> tuple[Plant, ...]:
        with self._lock:
            return self._plants

    def plants(self) -> list[Plant]:
        return [p.copy() for p in self._snapshot()]

    def get(self, plant_id: str) -> Optional[Plant]:
        for plant in self._snapshot():
            if plant.plant_id == plant_id:
                return plant.copy()
        return None

    def __len__(self) -> int:
        return len(self._snapshot())

    def plants_due_for_watering(self, now: datetime | None = None) -> list[Plant]:
        """Plants whose next watering is at or before ``now``."""
        now = ensure_utc(now) if now is not None else self._clock()
        return [p.copy() for p in self._snapshot() if p.needs_water(now)]

    def plants_due_for_fertilizing(self, now: datetime | None = None) -> list[Plant]:
        """Caudex plants that need fertilizer at ``now``."""
        now = ensure_utc(now) if now is not None else self._clock()
        return [p.copy() for p in self._snapshot() if p.is_caudex_plant and p.needs_fertilizer(now)]

    def caudex_plants(self) -> list[Plant]:
        return [p.copy() for p in self._snapshot() if p.is_caudex_plant]

    def _filter(self, attr: str, value: Any) -> list[Plant]:
        return [p.copy() for p in self._snapshot() if getattr(p, attr) == value]

    def _group(self, attr: str, values: Iterable[Any]) -> dict[Any, list[Plant]]:
        snapshot = self._snapshot()
        return {value: [p.copy() for p in snapshot if getattr(p, attr) == value] for value in values}

    def filter_by_growth_period(self, period: GrowthPeriod) -> list[Plant]:
        return self._filter("growth_period", GrowthPeriod(period))

    def filter_by_caudex_type(self, caudex_type: CaudexType) -> list[Plant]:
        return self._filter("caudex_type", CaudexType(caudex_type))

    def filter_by_light_level(self, level: LightLevel) -> list[Plant]:
        return self._filter("light_level", LightLevel(level))

    def filter_by_humidity_level(self, level: HumidityLevel) -> list[Plant]:
        return self._filter("humidity_level", HumidityLevel(level))

    def group_by_growth_period(self) -> dict[GrowthPeriod, list[Plant]]:
        return self._group("growth_period", GrowthPeriod)

    def group_by_caudex_type(self) -> dict[CaudexType, list[Plant]]:
        return self._group("caudex_type", CaudexType)

    def group_by_light_level(self) -> dict[LightLevel, list[Plant]]:
        return self._group("light_level", LightLevel)

    def group_by_humidity_level(self) -> dict[HumidityLevel, list[Plant]]:
        return self._group("humidity_level", HumidityLevel)
