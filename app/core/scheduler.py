"""
Application Scheduler - APScheduler Integration

Runs the offer expiry sweep on an interval inside the API process, so offers
and sponsorship expire even when nobody is browsing the listings.

Author: Backend Team
"""

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings

logger = structlog.get_logger(__name__)

OFFER_SWEEP_JOB_ID = "offer_expiry_sweep"

# Global scheduler instance
scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={
        "coalesce": True,  # Combine multiple missed executions into one
        "max_instances": 1,  # Only one instance of each job at a time
        "misfire_grace_time": 300,
    },
)


def scheduler_listener(event):
    """Listener for scheduler events (executed jobs, errors)."""
    if event.exception:
        logger.error("scheduled_job_failed", job_id=event.job_id, error=str(event.exception))
    else:
        logger.debug("scheduled_job_executed", job_id=event.job_id)


scheduler.add_listener(scheduler_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)


async def run_offer_sweep() -> dict:
    """Scheduled task: close expired offers and clear ended sponsorship."""
    from app.db.session import AsyncSessionLocal
    from app.services.offer_expiry_sweeper import OfferExpirySweeper

    async with AsyncSessionLocal() as session:
        result = await OfferExpirySweeper(session).sweep()
    return result.to_dict()


def setup_jobs():
    scheduler.add_job(
        run_offer_sweep,
        trigger=IntervalTrigger(minutes=settings.OFFER_SWEEP_INTERVAL_MINUTES),
        id=OFFER_SWEEP_JOB_ID,
        name="Offer expiry sweep",
        replace_existing=True,
    )


def start_scheduler():
    """
    Start the scheduler.

    Called during application startup (in lifespan).
    """
    if scheduler.running:
        logger.warning("scheduler_already_running")
        return
    setup_jobs()
    scheduler.start()
    for job in scheduler.get_jobs():
        logger.info("scheduled_job", job_id=job.id, next_run=str(job.next_run_time), trigger=str(job.trigger))


def stop_scheduler():
    """
    Stop the scheduler.

    Called during application shutdown (in lifespan).
    """
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("scheduler_stopped")


def get_scheduler_status() -> dict:
    """Scheduler status and job information."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "total_jobs": len(jobs),
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            }
            for job in jobs
        ],
    }
