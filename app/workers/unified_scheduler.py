"""
Centralized scheduling service for background work.

Runs the one-shot reminder jobs of the local notification backend and the
interval job that polls the shared store for changes written by other
processes.

Design Principles:
- Single scheduler loop thread
- Bounded worker pool for job execution (prevents unbounded thread creation)
- Support for interval and one-time schedules
- Job ids are caller-chosen, so scheduling an existing id replaces that job

Author: PlantCare Team
"""

from __future__ import annotations

import heapq
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable

from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class ScheduleType(Enum):
    """Types of schedules."""

    INTERVAL = "interval"  # Every N seconds
    ONCE = "once"  # One-time execution


@dataclass
class JobResult:
    """Result of a job execution."""

    job_id: str
    success: bool
    started_at: datetime
    completed_at: datetime
    result: Any = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


@dataclass
class ScheduledJob:
    """A scheduled job configuration."""

    job_id: str
    task_name: str
    namespace: str  # e.g., "reminders", "store"
    schedule_type: ScheduleType
    enabled: bool = True

    args: tuple = field(default_factory=tuple)
    kwargs: dict[str, Any] = field(default_factory=dict)

    interval_seconds: int | None = None  # For INTERVAL type
    run_at: datetime | None = None  # For ONCE type

    # Execution tracking
    next_run: datetime | None = None
    last_run: datetime | None = None
    run_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (for API responses)."""
        return {
            "job_id": self.job_id,
            "task_name": self.task_name,
            "namespace": self.namespace,
            "schedule_type": self.schedule_type.value,
            "enabled": self.enabled,
            "interval_seconds": self.interval_seconds,
            "run_at": self.run_at.isoformat() if self.run_at else None,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "run_count": self.run_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "last_error": self.last_error,
        }


class UnifiedScheduler:
    """
    Scheduler for background jobs.

    Implementation note on the heap:
    - Heap entries are tuples: (run_at_ts, seq, job_id)
    - seq is a monotonic counter to ensure stable ordering when timestamps match
    - Entries are never deleted in-place; stale ones are skipped when popped:
        - job removed -> skip
        - job disabled -> skip
        - job.next_run changed -> skip
    """

    def __init__(
        self,
        check_interval_seconds: float = 1.0,
        max_history: int = 500,
        max_workers: int = 2,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the scheduler.

        Args:
            check_interval_seconds: How often to check for due jobs (default 1s)
            max_history: Maximum job execution history to keep
            max_workers: Maximum number of concurrent job executions
            clock: Source of aware "now" timestamps
        """
        self._check_interval = float(check_interval_seconds)
        self._max_history = int(max_history)
        self._max_workers = int(max_workers)
        self._clock = clock

        self._jobs: dict[str, ScheduledJob] = {}
        self._tasks: dict[str, Callable] = {}  # task_name -> function

        self._job_heap: list[tuple[float, int, str]] = []
        self._heap_seq = 0

        self._history: list[JobResult] = []

        self._running = False
        self._thread: threading.Thread | None = None
        self._job_lock = threading.RLock()
        self._executor: ThreadPoolExecutor | None = None

    # ==================== Task Registration ====================

    def register_task(self, name: str, func: Callable) -> None:
        """Register a task function programmatically."""
        self._tasks[name] = func
        logger.debug("Registered task: %s", name)

    def _namespace_for(self, task_name: str, namespace: str | None) -> str:
        if namespace is not None:
            return namespace
        return task_name.split(".")[0] if "." in task_name else "default"

    # ==================== Heap Helpers ====================

    def _push_heap(self, job: ScheduledJob) -> None:
        if not job.enabled or not job.next_run:
            return
        self._heap_seq += 1
        heapq.heappush(self._job_heap, (job.next_run.timestamp(), self._heap_seq, job.job_id))

    # ==================== Job Scheduling ====================

    def schedule_interval(
        self,
        task_name: str,
        interval_seconds: int,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        start_immediately: bool = False,
    ) -> ScheduledJob:
        """Schedule a task to run at regular intervals."""
        if job_id is None:
            job_id = f"{task_name}_every_{int(interval_seconds)}s"

        now = self._clock()
        job = ScheduledJob(
            job_id=job_id,
            task_name=task_name,
            namespace=self._namespace_for(task_name, namespace),
            schedule_type=ScheduleType.INTERVAL,
            args=args,
            kwargs=kwargs or {},
            interval_seconds=int(interval_seconds),
            next_run=now if start_immediately else now + timedelta(seconds=int(interval_seconds)),
        )
        self._add_job(job)
        logger.info("Scheduled interval job: %s (every %ss)", job_id, interval_seconds)
        return job

    def schedule_once(
        self,
        task_name: str,
        run_at: datetime,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
    ) -> ScheduledJob:
        """Schedule a task to run once at a specific time."""
        if job_id is None:
            job_id = f"{task_name}_once_{int(run_at.timestamp())}"

        job = ScheduledJob(
            job_id=job_id,
            task_name=task_name,
            namespace=self._namespace_for(task_name, namespace),
            schedule_type=ScheduleType.ONCE,
            args=args,
            kwargs=kwargs or {},
            run_at=run_at,
            next_run=run_at,
        )
        self._add_job(job)
        logger.debug("Scheduled one-time job: %s (at %s)", job_id, run_at.isoformat())
        return job

    # ==================== Job Management ====================

    def _add_job(self, job: ScheduledJob) -> None:
        with self._job_lock:
            self._jobs[job.job_id] = job
            self._push_heap(job)

    def remove_job(self, job_id: str) -> bool:
        """Remove a job from the scheduler."""
        with self._job_lock:
            if job_id in self._jobs:
                del self._jobs[job_id]
                logger.debug("Removed job: %s", job_id)
                return True
        return False

    def remove_namespace(self, namespace: str) -> int:
        """Remove every job in ``namespace``; returns how many were removed."""
        with self._job_lock:
            doomed = [job_id for job_id, job in self._jobs.items() if job.namespace == namespace]
            for job_id in doomed:
                del self._jobs[job_id]
        if doomed:
            logger.debug("Removed %d jobs from namespace %s", len(doomed), namespace)
        return len(doomed)

    def get_job(self, job_id: str) -> ScheduledJob | None:
        """Get a job by ID."""
        with self._job_lock:
            return self._jobs.get(job_id)

    def get_jobs(self, namespace: str | None = None) -> list[ScheduledJob]:
        """Get all jobs, optionally filtered by namespace."""
        with self._job_lock:
            jobs = list(self._jobs.values())
        if namespace:
            jobs = [j for j in jobs if j.namespace == namespace]
        return jobs

    def get_history(self, limit: int = 50) -> list[JobResult]:
        with self._job_lock:
            return list(self._history[-limit:])

    # ==================== Scheduler Control ====================

    def start(self) -> None:
        """Start the scheduler background thread."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="UnifiedSchedulerJob",
            )
        self._running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="UnifiedScheduler")
        self._thread.start()
        logger.info("UnifiedScheduler started")

    def stop(self, wait: bool = True, timeout: float = 5.0) -> None:
        """
        Stop the scheduler.

        Args:
            wait: Wait for scheduler thread to finish
            timeout: Maximum wait time in seconds
        """
        if not self._running:
            return
        self._running = False

        if wait and self._thread:
            self._thread.join(timeout=timeout)

        if self._executor:
            self._executor.shutdown(wait=wait)
            self._executor = None

        logger.info("UnifiedScheduler stopped")

    def shutdown(self, wait: bool = True, timeout: float = 5.0) -> None:
        """Alias for stop(); matches other services' shutdown() convention."""
        self.stop(wait=wait, timeout=timeout)

    def is_running(self) -> bool:
        return self._running

    def _run_loop(self) -> None:
        logger.debug("Scheduler loop started")
        while self._running:
            try:
                for job_id, scheduled_for in self._collect_due_jobs():
                    if not self._executor:
                        logger.warning("Executor unavailable; skipping job %s", job_id)
                        continue
                    self._executor.submit(self._execute_job, job_id, scheduled_for)
                time.sleep(self._check_interval)
            except Exception as e:
                logger.error("Error in scheduler loop: %s", e, exc_info=True)
                time.sleep(1)
        logger.debug("Scheduler loop ended")

    def run_pending(self) -> int:
        """Run every due job synchronously on the calling thread.

        Returns the number of jobs executed.
        """
        due = self._collect_due_jobs()
        for job_id, scheduled_for in due:
            self._execute_job(job_id, scheduled_for)
        return len(due)

    # ==================== Core Scheduling Logic ====================

    def _collect_due_jobs(self) -> list[tuple[str, datetime]]:
        """Pop due heap entries and advance each job's next run."""
        now_ts = self._clock().timestamp()
        due: list[tuple[str, datetime]] = []

        with self._job_lock:
            while self._job_heap:
                run_at_ts, _seq, job_id = self._job_heap[0]
                if run_at_ts > now_ts:
                    break
                heapq.heappop(self._job_heap)

                job = self._jobs.get(job_id)
                if not job or not job.enabled or not job.next_run:
                    continue
                # Stale entry: the job was rescheduled after this entry was pushed
                if abs(job.next_run.timestamp() - run_at_ts) > 1e-6:
                    continue

                scheduled_for = job.next_run
                self._schedule_next_run(job, scheduled_for)
                self._push_heap(job)
                due.append((job_id, scheduled_for))
        return due

    def _schedule_next_run(self, job: ScheduledJob, scheduled_for: datetime) -> None:
        if job.schedule_type == ScheduleType.INTERVAL:
            # Fixed-rate: advance from the scheduled time, skipping missed slots
            step = timedelta(seconds=job.interval_seconds or 60)
            next_run = scheduled_for + step
            now = self._clock()
            while next_run <= now:
                next_run += step
            job.next_run = next_run
        else:
            job.next_run = None

    def _execute_job(self, job_id: str, scheduled_for: datetime) -> None:
        with self._job_lock:
            job = self._jobs.get(job_id)
        if not job or not job.enabled:
            return

        started_at = self._clock()
        try:
            func = self._tasks.get(job.task_name)
            if func is None:
                raise ValueError(f"Task function not found: {job.task_name}")
            result = func(*job.args, **job.kwargs)
            success, error = True, None
        except Exception as e:
            result, success, error = None, False, str(e)
            logger.error("Job %s failed: %s", job.job_id, e, exc_info=True)

        completed_at = self._clock()
        with self._job_lock:
            job.last_run = started_at
            job.run_count += 1
            if success:
                job.success_count += 1
                job.last_error = None
            else:
                job.failure_count += 1
                job.last_error = error
            # One-shot jobs leave the table once they ran, unless replaced meanwhile
            if job.schedule_type == ScheduleType.ONCE and self._jobs.get(job_id) is job:
                del self._jobs[job_id]

        self._record_history(
            JobResult(
                job_id=job.job_id,
                success=success,
                started_at=started_at,
                completed_at=completed_at,
                result=result,
                error=error,
            )
        )
        logger.debug("Job %s ran (scheduled_for=%s, success=%s)", job.job_id, scheduled_for.isoformat(), success)

    def _record_history(self, job_result: JobResult) -> None:
        with self._job_lock:
            self._history.append(job_result)
            if len(self._history) > self._max_history:
                del self._history[: len(self._history) - self._max_history]
