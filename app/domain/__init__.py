"""
Domain Package
==============
Care-profile entity and the pure scheduling rules applied to it.
"""

from . import care_schedule
from .exceptions import (
    ConfigurationError,
    NotFoundError,
    PlantCareError,
    RepositoryError,
    ServiceError,
    ValidationError,
)
from .plant import Plant

__all__ = [
    "care_schedule",
    # Entity
    "Plant",
    # Errors
    "PlantCareError",
    "ValidationError",
    "NotFoundError",
    "ServiceError",
    "RepositoryError",
    "ConfigurationError",
]
