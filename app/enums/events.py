from enum import Enum
from typing import TypeAlias


class ReminderKind(str, Enum):
    """Kinds of one-shot reminders kept per plant."""

    WATERING = "watering"
    FERTILIZING = "fertilizing"


class PlantEvent(str, Enum):
    PLANTS_CHANGED = "plants_changed"
    PLANT_ADDED = "plant_added"
    PLANT_UPDATED = "plant_updated"
    PLANT_REMOVED = "plant_removed"
    PLANTS_RELOADED = "plants_reloaded"


class ReminderEvent(str, Enum):
    REMINDER_DUE = "reminder_due"


class RuntimeEvent(str, Enum):
    STORE_CHANGED = "store_changed"
    SYSTEM_STARTUP = "system_startup"
    SYSTEM_SHUTDOWN = "system_shutdown"


EventType: TypeAlias = PlantEvent | ReminderEvent | RuntimeEvent
