"""
Care Schedule Calculator
========================

Pure functions deriving care intervals and due dates from a plant's growth
period. No state, no side effects; callers guard ``base_days >= 1`` at the
boundary before reaching these helpers.

Growth-period adjustment of the base watering interval:

- active:     base
- dormant:    base * 2
- transition: int(base * 1.5), truncated toward zero (7 -> 10, not 11)
"""

from __future__ import annotations

from datetime import datetime, timedelta

from app.enums.growth import GrowthPeriod

FERTILIZER_INTERVAL_DAYS = 30


def adjusted_interval(base_days: int, phase: GrowthPeriod) -> int:
    """Return the watering interval in days for ``phase``."""
    if phase == GrowthPeriod.DORMANT:
        return base_days * 2
    if phase == GrowthPeriod.TRANSITION:
        return int(base_days * 1.5)
    return base_days


def compute_next_watering(start: datetime, base_days: int, phase: GrowthPeriod) -> datetime:
    """Due date for the next watering counted from ``start``, growth-adjusted."""
    return start + timedelta(days=adjusted_interval(base_days, phase))


def base_next_watering(last_watered_at: datetime, base_days: int) -> datetime:
    """Due date using the unadjusted base interval (creation-time rule)."""
    return last_watered_at + timedelta(days=base_days)


def days_since(then: datetime, now: datetime) -> int:
    """Whole days elapsed from ``then`` to ``now``."""
    return (now - then).days


def is_fertilizer_due(last_fertilized_at: datetime | None, phase: GrowthPeriod, now: datetime) -> bool:
    """Fertilizer is only ever due during the active period.

    Never-fertilized active plants are due immediately; otherwise the
    threshold is FERTILIZER_INTERVAL_DAYS whole days since the last feed.
    """
    if phase != GrowthPeriod.ACTIVE:
        return False
    if last_fertilized_at is None:
        return True
    return days_since(last_fertilized_at, now) >= FERTILIZER_INTERVAL_DAYS


def next_fertilizing_at(last_fertilized_at: datetime | None, now: datetime) -> datetime:
    """Fire time of the fertilizing reminder."""
    start = last_fertilized_at if last_fertilized_at is not None else now
    return start + timedelta(days=FERTILIZER_INTERVAL_DAYS)
