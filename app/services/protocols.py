"""
Service protocols (structural typing interfaces).

Protocols let the care registry declare the *minimal* surface it depends on
without importing the concrete class, breaking circular imports and making
tests trivially mockable.

Usage
-----
In a consumer service::

    from __future__ import annotations
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from app.services.protocols import PlantStore

    class CareRegistry:
        def __init__(self, store: "PlantStore", ...): ...

At runtime the concrete ``KeyValueFileStore`` already satisfies the protocol
via structural subtyping; no explicit inheritance needed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, runtime_checkable


@runtime_checkable
class PlantStore(Protocol):
    """Byte-level storage for the serialized plant collection."""

    def load(self) -> Optional[bytes]:
        """Return the stored bytes, or ``None`` when nothing is stored."""
        ...

    def save(self, data: bytes) -> None:
        """Replace the stored bytes."""
        ...

    def poll_external_change(self) -> bool:
        """Return ``True`` when another writer replaced the data since our last read/write."""
        ...


@runtime_checkable
class NotificationBackend(Protocol):
    """Platform facility that delivers a local notification at a given time."""

    def schedule(self, identifier: str, fire_at: datetime, title: str, body: str) -> None:
        """Register (or replace) a notification under ``identifier``."""
        ...

    def cancel(self, identifiers: Iterable[str]) -> None:
        """Remove pending notifications; unknown identifiers are ignored."""
        ...

    def cancel_all(self) -> None:
        """Remove every pending notification."""
        ...
