"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, success, fail, get_registry,
    )

This module centralizes:
- Service container access
- Request JSON parsing
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import current_app, request

from app.domain.exceptions import NotFoundError, ServiceError
from app.utils.http import error_response, success_response

if TYPE_CHECKING:
    from app.domain.plant import Plant
    from app.services.application.care_registry import CareRegistry

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        ServiceError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise ServiceError("ServiceContainer not found in app config")
    return container


def get_registry() -> "CareRegistry":
    """Get the care registry from the container."""
    return get_container().registry


def require_plant(plant_id: str) -> "Plant":
    """
    Look a plant up, turning an unknown id into a 404.

    The registry treats unknown ids as no-ops; the HTTP layer reports them.
    """
    plant = get_registry().get(plant_id)
    if plant is None:
        raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
    return plant


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    return request.get_json(silent=True) or {}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Args:
        data: Response data (dict or list)
        status: HTTP status code (default 200)
        message: Optional success message

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Args:
        message: Error message
        status: HTTP status code (default 400)
        details: Optional error details dict

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)
