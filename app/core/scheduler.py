# ===================================
# File: app/core/scheduler.py
# ===================================
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.executors.pool import ThreadPoolExecutor
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

scheduler = None


def init_scheduler():
    """Start APScheduler"""
    global scheduler

    if not settings.scheduler_enabled or scheduler is not None:
        return

    executors = {
        'default': ThreadPoolExecutor(4),
    }

    job_defaults = {
        'coalesce': True,
        'max_instances': 1
    }

    scheduler = BackgroundScheduler(
        executors=executors,
        job_defaults=job_defaults,
        timezone='UTC'
    )

    # Periodic jobs
    add_periodic_jobs()

    scheduler.start()
    logger.info("APScheduler started")


def add_periodic_jobs():
    """Register the periodic jobs"""
    scheduler.add_job(
        func=cleanup_revoked_tokens_job,
        trigger='interval',
        minutes=settings.revoked_token_cleanup_minutes,
        id='cleanup_revoked_tokens',
        replace_existing=True
    )


def cleanup_revoked_tokens_job():
    """Drop revocation records of tokens that have expired"""
    try:
        from app.core.database import SessionLocal
        from app.repositories.user_repo import cleanup_expired_tokens

        with SessionLocal() as db:
            count = cleanup_expired_tokens(db)
            logger.info(f"Token cleanup: {count} expired revocations removed")
            return count
    except Exception as e:
        logger.error(f"Token cleanup failed: {e}")


def shutdown_scheduler():
    """Stop the scheduler"""
    global scheduler
    if scheduler:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("APScheduler stopped")
