"""
Background Jobs

A single APScheduler AsyncIOScheduler runs periodic maintenance on the
application's event loop. Jobs are declared with ``register_job`` (usually
from a ``register_*_jobs()`` function called in the lifespan) and are added
to the scheduler when it starts:

    register_maintenance_jobs()
    await start_scheduler()
    ...
    await stop_scheduler()

Every job must be idempotent; a missed run is coalesced into one.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JOB_DEFAULTS = {
    "coalesce": True,
    "max_instances": 1,
    "misfire_grace_time": 300,
}


@dataclass(frozen=True)
class RegisteredJob:
    job_id: str
    func: Callable[[], Awaitable[None]]
    trigger: BaseTrigger


_registry: dict[str, RegisteredJob] = {}
_scheduler: AsyncIOScheduler | None = None


def _on_job_event(event: JobExecutionEvent) -> None:
    if event.exception:
        logger.error(f"Job {event.job_id} raised: {event.exception}", exc_info=event.exception)
    else:
        logger.debug(f"Job {event.job_id} finished")


def _schedule(job: RegisteredJob) -> None:
    _scheduler.add_job(job.func, trigger=job.trigger, id=job.job_id, replace_existing=True)
    logger.info(f"Scheduled job {job.job_id} ({job.trigger})")


def get_scheduler() -> AsyncIOScheduler | None:
    return _scheduler


def register_job(job_id: str, func: Callable[[], Awaitable[None]], trigger: BaseTrigger) -> None:
    """Declare a periodic job. Re-registering an id replaces the earlier job."""
    job = RegisteredJob(job_id=job_id, func=func, trigger=trigger)
    _registry[job_id] = job

    if _scheduler is not None and _scheduler.running:
        _schedule(job)


def clear_registry() -> None:
    _registry.clear()


async def start_scheduler() -> AsyncIOScheduler:
    """Start the scheduler with every registered job; a running one is reused."""
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        return _scheduler

    _scheduler = AsyncIOScheduler(timezone="UTC", job_defaults=JOB_DEFAULTS)
    _scheduler.add_listener(_on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job in _registry.values():
        _schedule(job)

    _scheduler.start()
    logger.info(f"Scheduler started with {len(_registry)} job(s)")
    return _scheduler


async def stop_scheduler() -> None:
    """Shut the scheduler down after running jobs finish."""
    global _scheduler

    if _scheduler is None:
        return

    if _scheduler.running:
        _scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
    _scheduler = None


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job now, outside its schedule.

    A failing job is reported in the result rather than raised.

    Raises:
        ValueError: If no job is registered under ``job_id``
    """
    job = _registry.get(job_id)
    if job is None:
        raise ValueError(f"Job {job_id} not found. Registered jobs: {sorted(_registry)}")

    result: dict[str, Any] = {
        "job_id": job_id,
        "executed_at": datetime.now(UTC).isoformat(),
    }

    logger.info(f"Running job {job_id} on demand")
    try:
        await job.func()
    except Exception as e:
        logger.error(f"On-demand run of {job_id} failed: {e}", exc_info=True)
        return {**result, "status": "error", "error": str(e)}

    return {**result, "status": "success"}


def list_registered_jobs() -> list[dict[str, Any]]:
    """Registered jobs with their next run time (None until the scheduler runs)."""
    listing = []
    for job_id in _registry:
        scheduled = _scheduler.get_job(job_id) if _scheduler is not None else None
        next_run = scheduled.next_run_time if scheduled else None
        listing.append(
            {"job_id": job_id, "next_run_time": next_run.isoformat() if next_run else None}
        )
    return listing
