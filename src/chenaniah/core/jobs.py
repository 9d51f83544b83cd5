"""
Maintenance Background Jobs

Periodic housekeeping that keeps long-running API processes healthy:
- Purge idle keys from the in-memory rate limit fallback

Jobs are idempotent and can be triggered manually via /debug/jobs in
development.
"""

import logging

from apscheduler.triggers.interval import IntervalTrigger

from chenaniah.core.rate_limit import purge_memory_store
from chenaniah.core.scheduler import register_job

logger = logging.getLogger(__name__)

# Longer than every rate limit window in use (the longest is 300 seconds)
RATE_LIMIT_RETENTION_SECONDS = 60 * 60

JOB_ID_PURGE_RATE_LIMITS = "purge_rate_limit_windows"


async def purge_rate_limit_windows() -> None:
    removed = purge_memory_store(RATE_LIMIT_RETENTION_SECONDS)
    if removed:
        logger.info(f"Purged {removed} idle rate limit key(s)")


def register_maintenance_jobs() -> None:
    """Register every maintenance job with the scheduler."""
    register_job(
        JOB_ID_PURGE_RATE_LIMITS,
        purge_rate_limit_windows,
        IntervalTrigger(minutes=15),
    )
