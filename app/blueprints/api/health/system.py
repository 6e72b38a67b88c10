"""
System Health Endpoints
=======================

Core runtime health endpoints.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_container as _container, success as _success
from app.utils.http import safe_route
from app.utils.time import iso_now

logger = logging.getLogger("health_api")


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("")
    @safe_route("Failed to get system health")
    def get_system_health() -> Response:
        """
        Overall health of the care engine.

        Returns:
            {
                "status": "healthy|degraded",
                "plants": {"count": ..., "due_for_watering": ..., "due_for_fertilizing": ...},
                "scheduler": {"running": ..., "pending_reminders": ..., "recent_failures": [...]},
                "event_bus": {...},
                "timestamp": "..."
            }
        """
        container = _container()
        registry = container.registry
        scheduler = container.scheduler
        bus_metrics = container.event_bus.get_metrics()
        history = scheduler.get_history(limit=20)
        recent_failures = [r for r in history if not r.success]

        degraded = bool(bus_metrics.get("is_dropping")) or (
            container.workers_started and not scheduler.is_running()
        )
        return _success(
            {
                "status": "degraded" if degraded else "healthy",
                "plants": {
                    "count": len(registry),
                    "due_for_watering": len(registry.plants_due_for_watering()),
                    "due_for_fertilizing": len(registry.plants_due_for_fertilizing()),
                },
                "scheduler": {
                    "running": scheduler.is_running(),
                    "pending_reminders": len(container.notifications.pending()),
                    "recent_runs": len(history),
                    "recent_failures": [
                        {"job_id": r.job_id, "error": r.error, "at": r.completed_at.isoformat()}
                        for r in recent_failures
                    ],
                },
                "event_bus": bus_metrics,
                "timestamp": iso_now(),
            }
        )

    @health_api.get("/ping")
    @safe_route("Failed to handle ping request")
    def ping() -> Response:
        """
        Basic liveness check for monitoring tools.

        Returns:
            {"status": "ok", "timestamp": "..."}
        """
        return _success({"status": "ok", "timestamp": iso_now()})
