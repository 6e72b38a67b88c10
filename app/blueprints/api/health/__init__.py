"""
Health API Blueprint
====================

Liveness and runtime health of the care engine.

Routes:
- GET /api/health - Overall status with registry, scheduler and event bus metrics
- GET /api/health/ping - Basic liveness check
"""

from __future__ import annotations

import logging

from flask import Blueprint

logger = logging.getLogger("health_api")

# Create the blueprint
health_api = Blueprint("health_api", __name__, url_prefix="/api/health")

# Import and register routes from submodules
from app.blueprints.api.health.system import register_system_routes

register_system_routes(health_api)

__all__ = ["health_api"]
