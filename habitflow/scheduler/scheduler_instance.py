from __future__ import annotations
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.executors.asyncio import AsyncIOExecutor
from pytz import utc

job_defaults = {
    'coalesce': True,  # Combine missed runs
    'max_instances': 1,  # One instance per job
    'misfire_grace_time': 30,  # a tick more than 30s late is dropped, not backfilled
}


def create_scheduler() -> AsyncIOScheduler:
    """Fresh AsyncIOScheduler with the app's executor and job defaults."""
    return AsyncIOScheduler(
        executors={'default': AsyncIOExecutor()},
        job_defaults=job_defaults,
        timezone=utc,
    )
