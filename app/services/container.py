from __future__ import annotations

import logging
from dataclasses import dataclass, field

from app.config import AppConfig
from app.enums.events import RuntimeEvent
from app.services.application.care_registry import CareRegistry
from app.services.application.reminder_gateway import ReminderGateway
from app.services.utilities.local_notifications import LocalNotificationBackend
from app.utils.concurrency import Dispatcher, InlineDispatcher, SerialDispatcher
from app.utils.event_bus import EventBus
from app.utils.persistent_store import KeyValueFileStore
from app.utils.time import iso_now
from app.workers.unified_scheduler import UnifiedScheduler
from infrastructure.logging.event_logger import PlantEventLogger

logger = logging.getLogger(__name__)

STORE_POLL_TASK = "store.poll"


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    event_bus: EventBus
    event_logger: PlantEventLogger
    store: KeyValueFileStore
    scheduler: UnifiedScheduler
    notifications: LocalNotificationBackend
    reminders: ReminderGateway
    dispatcher: Dispatcher
    registry: CareRegistry
    workers_started: bool = False
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def build(cls, config: AppConfig, *, start_workers: bool = False) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            start_workers: Start the scheduler loop and run side effects on a
                background dispatcher. When False, side effects run inline and
                due jobs only run through ``scheduler.run_pending()``.
        """
        logger.info("Building ServiceContainer...")
        event_bus = EventBus(
            queue_size=config.eventbus_queue_size,
            worker_count=config.eventbus_worker_count,
        )
        event_logger = PlantEventLogger(event_bus)
        store = KeyValueFileStore(config.store_dir, config.store_key, lock_timeout=config.store_lock_timeout)
        scheduler = UnifiedScheduler(
            check_interval_seconds=config.scheduler_check_interval,
            max_workers=config.scheduler_max_workers,
        )
        notifications = LocalNotificationBackend(scheduler, event_bus)
        reminders = ReminderGateway(notifications)
        dispatcher: Dispatcher = SerialDispatcher() if start_workers else InlineDispatcher()
        registry = CareRegistry(
            store,
            reminders,
            dispatcher=dispatcher,
            event_bus=event_bus,
            seed_samples=config.seed_sample_plants,
        )

        container = cls(
            config=config,
            event_bus=event_bus,
            event_logger=event_logger,
            store=store,
            scheduler=scheduler,
            notifications=notifications,
            reminders=reminders,
            dispatcher=dispatcher,
            registry=registry,
        )

        registry.start()
        scheduler.register_task(STORE_POLL_TASK, registry.sync_from_store)
        scheduler.schedule_interval(
            STORE_POLL_TASK,
            config.store_poll_seconds,
            job_id="store_poll",
            namespace="store",
        )
        if start_workers:
            scheduler.start()
            container.workers_started = True
            logger.info("✓ UnifiedScheduler started")

        event_bus.publish(RuntimeEvent.SYSTEM_STARTUP, {"timestamp": iso_now(), "plants": len(registry)})
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release background resources before process exit."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True
        self.event_bus.publish(RuntimeEvent.SYSTEM_SHUTDOWN, {"timestamp": iso_now()})

        try:
            self.scheduler.shutdown()
            logger.info("✓ UnifiedScheduler stopped")
        except Exception as e:
            logger.warning(f"Failed to stop UnifiedScheduler: {e}")

        # Pending persistence / reminder side effects run before exit
        if not self.dispatcher.drain(timeout=self.config.shutdown_drain_seconds):
            logger.warning(
                "Side effects still pending after %.1fs; waiting for them", self.config.shutdown_drain_seconds
            )
        self.dispatcher.shutdown(wait=True)

        self.event_logger.close()
        self.event_bus.shutdown()
        logger.info("ServiceContainer shutdown complete.")
