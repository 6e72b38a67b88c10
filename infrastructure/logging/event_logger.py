# infrastructure/logging/event_logger.py
import logging
from typing import Callable

from app.enums.events import PlantEvent, ReminderEvent, RuntimeEvent
from app.utils.event_bus import EventBus

logger = logging.getLogger("plantcare.events")


class PlantEventLogger:
    """Listens for plant, reminder and runtime events and logs them."""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._unsubscribers: list[Callable[[], None]] = [
            self.event_bus.subscribe(PlantEvent.PLANT_ADDED, self.log_plants_changed),
            self.event_bus.subscribe(PlantEvent.PLANT_UPDATED, self.log_plants_changed),
            self.event_bus.subscribe(PlantEvent.PLANT_REMOVED, self.log_plants_changed),
            self.event_bus.subscribe(PlantEvent.PLANTS_RELOADED, self.log_plants_reloaded),
            self.event_bus.subscribe(ReminderEvent.REMINDER_DUE, self.log_reminder_due),
            self.event_bus.subscribe(RuntimeEvent.STORE_CHANGED, self.log_store_changed),
            self.event_bus.subscribe(RuntimeEvent.SYSTEM_STARTUP, self.log_runtime),
            self.event_bus.subscribe(RuntimeEvent.SYSTEM_SHUTDOWN, self.log_runtime),
        ]

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def log_plants_changed(self, data):
        reason = data.get("reason", "changed")
        plant_ids = ", ".join(data.get("plant_ids", [])) or "-"
        logger.info(f"🌱 Plant {reason}: {plant_ids} (collection size {data.get('count')})")

    def log_plants_reloaded(self, data):
        logger.info(f"🔄 Plant collection reloaded: {data.get('count')} plants")

    def log_reminder_due(self, data):
        kind = data.get("kind") or "reminder"
        icon = "💧" if kind == "watering" else "🧪"
        logger.info(f"{icon} {data.get('title')}: {data.get('body')} [{data.get('identifier')}]")

    def log_store_changed(self, data):
        logger.info(f"📦 Store '{data.get('store_key')}' changed in another process")

    def log_runtime(self, data):
        logger.info(f"⚙️ Runtime event: {data}")
