from __future__ import annotations

import threading
from datetime import datetime, timedelta

from app.domain.plant import Plant
from app.enums.common import HumidityLevel, LightLevel
from app.enums.events import PlantEvent
from app.enums.growth import CaudexType, GrowthPeriod
from app.schemas.plants import decode_plants, encode_plants
from app.services.application.care_registry import CareRegistry
from app.services.application.reminder_gateway import ReminderGateway
from app.services.application.sample_plants import SAMPLE_PLANTS
from app.utils.concurrency import InlineDispatcher
from app.utils.event_bus import EventBus


# ========================== add ============================================


def test_add_assigns_id_and_base_next_watering(registry, clock, plant_factory):
    plant = registry.add(plant_factory("Tortoise", growth_period=GrowthPeriod.DORMANT))

    assert plant.plant_id == "plant-1"
    # Creation uses the base interval even for dormant plants
    assert plant.next_watering_at == clock.now + timedelta(days=7)
    assert [p.plant_id for p in registry.plants()] == ["plant-1"]


def test_add_keeps_supplied_id(registry, plant_factory):
    plant = registry.add(plant_factory("Fern", plant_id="mine"))
    assert plant.plant_id == "mine"


def test_add_recomputes_stale_next_watering(registry, clock, plant_factory):
    stale = plant_factory("Fern", next_watering_at=clock.now + timedelta(days=99))
    plant = registry.add(stale)
    assert plant.next_watering_at == clock.now + timedelta(days=7)


def test_add_with_duplicate_id_gets_fresh_id(registry, plant_factory):
    registry.add(plant_factory("Fern", plant_id="dup"))
    second = registry.add(plant_factory("Ivy", plant_id="dup"))
    assert second.plant_id != "dup"
    assert len({p.plant_id for p in registry.plants()}) == 2


def test_add_preserves_insertion_order(registry, plant_factory):
    for name in ("A", "B", "C"):
        registry.add(plant_factory(name))
    assert [p.name for p in registry.plants()] == ["A", "B", "C"]


def test_add_persists_and_schedules_watering_only_for_ordinary_plant(registry, store, backend, plant_factory):
    plant = registry.add(plant_factory("Fern"))

    assert [p.plant_id for p in decode_plants(store.data)] == [plant.plant_id]
    assert backend.pending_ids() == {f"watering-{plant.plant_id}"}
    fire_at, title, body = backend.pending[f"watering-{plant.plant_id}"]
    assert fire_at == plant.next_watering_at
    assert "Fern" in body


def test_add_caudex_plant_schedules_fertilizing(registry, backend, clock, plant_factory):
    fed = clock.now - timedelta(days=10)
    plant = registry.add(plant_factory("Adenium", caudex_type=CaudexType.ABOVE_GROUND, last_fertilized_at=fed))

    assert backend.pending_ids() == {f"watering-{plant.plant_id}", f"fertilizing-{plant.plant_id}"}
    assert backend.pending[f"fertilizing-{plant.plant_id}"][0] == fed + timedelta(days=30)


def test_never_fertilized_caudex_reminder_fires_thirty_days_from_now(registry, backend, clock, plant_factory):
    plant = registry.add(plant_factory("Fockea", caudex_type=CaudexType.UNDERGROUND))
    assert backend.pending[f"fertilizing-{plant.plant_id}"][0] == clock.now + timedelta(days=30)


# ========================== update =========================================


def test_update_replaces_wholesale(registry, plant_factory):
    plant = registry.add(plant_factory("Fern"))
    plant.name = "Boston Fern"
    plant.light_level = LightLevel.LOW
    registry.update(plant)

    stored = registry.get(plant.plant_id)
    assert stored.name == "Boston Fern"
    assert stored.light_level is LightLevel.LOW


def test_update_unknown_id_is_a_silent_no_op(registry, store, backend, plant_factory):
    registry.add(plant_factory("Fern"))
    before = registry.plants()
    saves, calls = len(store.saves), len(backend.calls)

    registry.update(plant_factory("Ghost", plant_id="missing"))

    assert registry.plants() == before
    assert len(store.saves) == saves
    assert len(backend.calls) == calls


def test_update_twice_leaves_one_reminder_per_kind(registry, backend, plant_factory):
    plant = registry.add(plant_factory("Adenium", caudex_type=CaudexType.STEM))
    registry.update(plant)
    registry.update(plant)

    assert backend.pending_ids() == {f"watering-{plant.plant_id}", f"fertilizing-{plant.plant_id}"}


def test_update_resync_cancels_before_scheduling(registry, backend, plant_factory):
    plant = registry.add(plant_factory("Fern"))
    backend.calls.clear()
    registry.update(plant)

    assert backend.calls[0] == ("cancel", (f"watering-{plant.plant_id}", f"fertilizing-{plant.plant_id}"))
    assert backend.calls[1] == ("schedule", f"watering-{plant.plant_id}")


def test_update_turning_caudex_off_drops_fertilizing_reminder(registry, backend, plant_factory):
    plant = registry.add(plant_factory("Adenium", caudex_type=CaudexType.STEM))
    plant.caudex_type = CaudexType.NONE
    registry.update(plant)
    assert backend.pending_ids() == {f"watering-{plant.plant_id}"}


def test_returned_copies_do_not_leak_mutations(registry, plant_factory):
    plant = registry.add(plant_factory("Fern"))
    plant.name = "Mutated"
    registry.plants()[0].notes = "also mutated"
    stored = registry.get(plant.plant_id)
    assert stored.name == "Fern"
    assert stored.notes == ""


# ========================== remove =========================================


def test_remove_deletes_and_cancels_reminders(registry, store, backend, plant_factory):
    keep = registry.add(plant_factory("Keep"))
    gone = registry.add(plant_factory("Gone", caudex_type=CaudexType.ROOT))

    registry.remove(gone.plant_id)

    assert [p.plant_id for p in registry.plants()] == [keep.plant_id]
    assert [p.plant_id for p in decode_plants(store.data)] == [keep.plant_id]
    assert backend.pending_ids() == {f"watering-{keep.plant_id}"}


def test_remove_deletes_every_entry_with_the_id(store, backend, clock, plant_factory):
    registry = CareRegistry(store, ReminderGateway(backend), dispatcher=InlineDispatcher(), clock=clock)
    twin = plant_factory("Twin", plant_id="same")
    registry.reload([twin, plant_factory("Other", plant_id="other"), twin])

    registry.remove("same")

    assert [p.plant_id for p in registry.plants()] == ["other"]


def test_remove_unknown_id_is_a_no_op(registry, store, plant_factory):
    registry.add(plant_factory("Fern"))
    saves = len(store.saves)
    registry.remove("missing")
    assert len(registry) == 1
    assert len(store.saves) == saves


# ========================== care actions ===================================


def test_mark_watered_uses_growth_adjusted_interval(registry, clock, plant_factory):
    plant = registry.add(plant_factory("Tortoise", growth_period=GrowthPeriod.DORMANT))
    watered_at = clock.advance(days=3)

    updated = registry.mark_watered(plant.plant_id)

    assert updated.last_watered_at == watered_at
    assert updated.next_watering_at == watered_at + timedelta(days=14)
    assert registry.get(plant.plant_id).next_watering_at == watered_at + timedelta(days=14)


def test_mark_watered_reschedules_watering_reminder(registry, backend, clock, plant_factory):
    plant = registry.add(plant_factory("Fern"))
    watered_at = clock.advance(days=1)
    registry.mark_watered(plant.plant_id)
    assert backend.pending[f"watering-{plant.plant_id}"][0] == watered_at + timedelta(days=7)


def test_mark_fertilized_only_touches_fertilizer_date(registry, clock, plant_factory):
    plant = registry.add(plant_factory("Adenium", caudex_type=CaudexType.STEM))
    fed_at = clock.advance(days=2)

    updated = registry.mark_fertilized(plant.plant_id)

    assert updated.last_fertilized_at == fed_at
    assert updated.last_watered_at == plant.last_watered_at
    assert updated.next_watering_at == plant.next_watering_at


def test_care_actions_on_unknown_id_return_none(registry, store):
    assert registry.mark_watered("missing") is None
    assert registry.mark_fertilized("missing") is None
    assert store.saves == []


# ========================== queries ========================================


def test_due_for_watering_boundary_is_inclusive(registry, clock, plant_factory):
    plant = registry.add(plant_factory("Fern"))
    due_at = plant.next_watering_at

    assert registry.plants_due_for_watering(due_at - timedelta(seconds=1)) == []
    assert [p.plant_id for p in registry.plants_due_for_watering(due_at)] == [plant.plant_id]


def test_due_for_watering_defaults_to_clock(registry, clock, plant_factory):
    registry.add(plant_factory("Fern"))
    assert registry.plants_due_for_watering() == []
    clock.advance(days=7)
    assert len(registry.plants_due_for_watering()) == 1


def test_due_queries_accept_naive_evaluation_time(registry, plant_factory):
    fern = registry.add(plant_factory("Fern", last_watered_at=datetime(2024, 1, 1)))
    adenium = registry.add(plant_factory("Adenium", caudex_type=CaudexType.STEM,
                                         last_watered_at=datetime(2024, 1, 1),
                                         last_fertilized_at=datetime(2024, 1, 1)))

    assert registry.plants_due_for_watering(datetime(2024, 1, 7)) == []
    assert {p.plant_id for p in registry.plants_due_for_watering(datetime(2024, 1, 8))} == {
        fern.plant_id,
        adenium.plant_id,
    }
    assert registry.plants_due_for_fertilizing(datetime(2024, 1, 15)) == []
    assert [p.plant_id for p in registry.plants_due_for_fertilizing(datetime(2024, 3, 1))] == [adenium.plant_id]


def test_fertilizer_gating_by_growth_period(registry, clock, plant_factory):
    fed = clock.now - timedelta(days=40)
    registry.add(plant_factory("Sleeper", caudex_type=CaudexType.UNDERGROUND, growth_period=GrowthPeriod.DORMANT,
                               last_fertilized_at=fed))
    active = registry.add(plant_factory("Grower", caudex_type=CaudexType.UNDERGROUND, last_fertilized_at=fed))

    assert [p.plant_id for p in registry.plants_due_for_fertilizing()] == [active.plant_id]


def test_non_caudex_plants_never_due_for_fertilizing(registry, plant_factory):
    registry.add(plant_factory("Fern"))
    assert registry.plants_due_for_fertilizing() == []


def test_caudex_plants_and_filters(registry, plant_factory):
    registry.add(plant_factory("Fern", light_level=LightLevel.LOW))
    registry.add(plant_factory("Adenium", caudex_type=CaudexType.ABOVE_GROUND, light_level=LightLevel.HIGH))
    registry.add(plant_factory("Euphorbia", caudex_type=CaudexType.STEM, humidity_level=HumidityLevel.LOW,
                               growth_period=GrowthPeriod.TRANSITION))

    assert [p.name for p in registry.caudex_plants()] == ["Adenium", "Euphorbia"]
    assert [p.name for p in registry.filter_by_light_level(LightLevel.HIGH)] == ["Adenium"]
    assert [p.name for p in registry.filter_by_humidity_level(HumidityLevel.LOW)] == ["Euphorbia"]
    assert [p.name for p in registry.filter_by_caudex_type(CaudexType.STEM)] == ["Euphorbia"]
    assert [p.name for p in registry.filter_by_growth_period(GrowthPeriod.ACTIVE)] == ["Fern", "Adenium"]


def test_group_by_includes_every_value_and_keeps_order(registry, plant_factory):
    registry.add(plant_factory("A", growth_period=GrowthPeriod.DORMANT))
    registry.add(plant_factory("B"))
    registry.add(plant_factory("C", growth_period=GrowthPeriod.DORMANT))

    groups = registry.group_by_growth_period()

    assert set(groups) == set(GrowthPeriod)
    assert [p.name for p in groups[GrowthPeriod.DORMANT]] == ["A", "C"]
    assert [p.name for p in groups[GrowthPeriod.ACTIVE]] == ["B"]
    assert groups[GrowthPeriod.TRANSITION] == []
    assert set(registry.group_by_caudex_type()) == set(CaudexType)
    assert set(registry.group_by_light_level()) == set(LightLevel)
    assert set(registry.group_by_humidity_level()) == set(HumidityLevel)


# ========================== reload / store sync ============================


def test_reload_swaps_collection_and_resyncs_everything(registry, backend, plant_factory):
    old = registry.add(plant_factory("Old"))
    snapshot = [
        plant_factory("New A", plant_id="a"),
        plant_factory("New B", plant_id="b", caudex_type=CaudexType.STEM),
    ]
    backend.calls.clear()

    registry.reload(snapshot)

    assert [p.plant_id for p in registry.plants()] == ["a", "b"]
    assert backend.calls[0] == ("cancel_all",)
    assert backend.calls[1:] == [("schedule", "watering-a"), ("schedule", "watering-b"), ("schedule", "fertilizing-b")]
    assert f"watering-{old.plant_id}" not in backend.pending_ids()


def test_reload_does_not_persist(registry, store, plant_factory):
    registry.reload([plant_factory("A", plant_id="a")])
    assert store.saves == []


def test_reload_is_atomic_for_concurrent_readers(registry, clock, plant_factory):
    old = [plant_factory(f"old-{i}", plant_id=f"old-{i}", last_watered_at=clock.now - timedelta(days=30))
           for i in range(50)]
    new = [plant_factory(f"new-{i}", plant_id=f"new-{i}", last_watered_at=clock.now - timedelta(days=30))
           for i in range(50)]
    registry.reload(old)

    mixed: list[set[str]] = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            prefixes = {p.plant_id.split("-")[0] for p in registry.plants_due_for_watering()}
            if len(prefixes) > 1:
                mixed.append(prefixes)

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for _ in range(20):
            registry.reload(new)
            registry.reload(old)
    finally:
        stop.set()
        thread.join(timeout=5)

    assert mixed == []


def test_handle_external_change_reloads_from_store(registry, store, backend, plant_factory):
    registry.add(plant_factory("Mine"))
    store.write_external(encode_plants([plant_factory("Theirs", plant_id="theirs")]))

    assert registry.sync_from_store() is True
    assert [p.plant_id for p in registry.plants()] == ["theirs"]
    assert backend.pending_ids() == {"watering-theirs"}


def test_sync_without_external_change_does_nothing(registry, plant_factory):
    registry.add(plant_factory("Mine"))
    assert registry.sync_from_store() is False
    assert len(registry) == 1


def test_undecodable_external_change_keeps_current_state(registry, store, plant_factory):
    registry.add(plant_factory("Mine"))
    store.write_external(b"{ definitely not a plant list")

    assert registry.sync_from_store() is False
    assert [p.name for p in registry.plants()] == ["Mine"]


# ========================== start ==========================================


def test_start_loads_stored_collection(store, backend, clock, plant_factory):
    store.data = encode_plants([plant_factory("Stored", plant_id="s1")])
    registry = CareRegistry(store, ReminderGateway(backend), clock=clock, seed_samples=True)

    registry.start()

    assert [p.plant_id for p in registry.plants()] == ["s1"]
    assert backend.pending_ids() == {"watering-s1"}


def test_start_seeds_samples_when_empty(store, backend, clock):
    registry = CareRegistry(store, ReminderGateway(backend), clock=clock, seed_samples=True)
    registry.start()

    plants = registry.plants()
    assert len(plants) == len(SAMPLE_PLANTS) == 15
    assert len(registry.caudex_plants()) == 10
    assert {p.name for p in registry.plants_due_for_watering()} == {"Monstera"}
    assert len(decode_plants(store.data)) == 15


def test_start_with_corrupt_store_and_no_seeding_stays_empty(store, backend, clock):
    store.data = b"garbage"
    registry = CareRegistry(store, ReminderGateway(backend), clock=clock)
    registry.start()
    assert registry.plants() == []


# ========================== failure absorption =============================


def test_persistence_failure_is_not_raised(registry, store, plant_factory):
    store.fail_saves = True
    plant = registry.add(plant_factory("Fern"))
    assert registry.get(plant.plant_id) is not None


def test_reminder_failure_is_not_raised(registry, backend, plant_factory):
    backend.fail = True
    plant = registry.add(plant_factory("Fern"))
    registry.mark_watered(plant.plant_id)
    assert len(registry) == 1


# ========================== listeners / events =============================


def test_listeners_receive_committed_snapshot(registry, plant_factory):
    changes = []
    unsubscribe = registry.add_listener(changes.append)

    plant = registry.add(plant_factory("Fern"))
    registry.mark_watered(plant.plant_id)
    registry.remove(plant.plant_id)
    unsubscribe()
    registry.add(plant_factory("Ignored"))

    assert [c.reason for c in changes] == ["added", "watered", "removed"]
    assert changes[0].plant_ids == (plant.plant_id,)
    assert [p.name for p in changes[0].snapshot] == ["Fern"]
    assert changes[2].snapshot == ()


def test_failing_listener_does_not_break_mutation(registry, plant_factory):
    def boom(_change):
        raise RuntimeError("listener exploded")

    registry.add_listener(boom)
    plant = registry.add(plant_factory("Fern"))
    assert registry.get(plant.plant_id) is not None


def test_changes_are_published_on_event_bus(store, backend, clock, plant_factory):
    bus = EventBus(worker_count=1)
    received = []
    bus.subscribe(PlantEvent.PLANT_ADDED, received.append)
    try:
        registry = CareRegistry(store, ReminderGateway(backend), event_bus=bus, clock=clock)
        plant = registry.add(plant_factory("Fern"))
        assert bus.wait_idle(timeout=2.0)
    finally:
        bus.shutdown()

    assert received[0]["reason"] == "added"
    assert received[0]["plant_ids"] == [plant.plant_id]
    assert received[0]["count"] == 1


def test_plain_plant_objects_are_accepted(registry):
    plant = registry.add(Plant(name="Bare", watering_interval_days=3))
    assert plant.plant_id
