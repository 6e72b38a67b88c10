"""
Workers module for background services and scheduled tasks.

This module contains:
- unified_scheduler: Scheduler for one-shot reminders and interval jobs (store polling)
"""

__all__ = [
    "JobResult",
    "ScheduledJob",
    "ScheduleType",
    "UnifiedScheduler",
]

from app.workers.unified_scheduler import JobResult, ScheduledJob, ScheduleType, UnifiedScheduler
