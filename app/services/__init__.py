"""
Service Organization
====================
Services are organized by their lifecycle and instantiation pattern:

**application/**
  Services managed by ServiceContainer. One instance per application.
  Examples: CareRegistry, ReminderGateway

**utilities/**
  Backends the application services talk to through protocols.
  Examples: LocalNotificationBackend
"""

from .application.care_registry import CareRegistry, PlantsChange
from .application.reminder_gateway import ReminderGateway, reminder_identifier
from .utilities.local_notifications import LocalNotificationBackend

__all__ = [
    "CareRegistry",
    "LocalNotificationBackend",
    "PlantsChange",
    "ReminderGateway",
    "reminder_identifier",
]
