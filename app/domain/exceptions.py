"""Centralized exception hierarchy for PlantCare.

All domain and service exceptions inherit from :class:`PlantCareError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

The care registry itself never raises for valid input: unknown ids are
no-ops and persistence / reminder failures are absorbed. These classes are
raised at the boundary (HTTP, CLI) where input is validated, and mapped to
HTTP status codes by ``app/utils/http.safe_route``.

Hierarchy
---------
::

    PlantCareError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── NotFoundError            (404: plant does not exist)
    ├── ServiceError             (500: business-logic failure)
    │   └── RepositoryError      (500: store / persistence)
    └── ConfigurationError       (500: missing / invalid config)
"""

from __future__ import annotations


class PlantCareError(Exception):
    """Base exception for all PlantCare application errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(PlantCareError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(PlantCareError):
    """Requested plant does not exist (HTTP 404)."""

    http_status: int = 404


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(PlantCareError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Store / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class ConfigurationError(PlantCareError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
