"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from dash_backend.core.config import settings
from dash_backend.core.logging import configure_logging
from dash_backend.db.session import SessionLocal
from dash_backend.services.week_progression import advance_plan_weeks


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running week progression once on startup")
            run_week_progression_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_week_progression_job,
        trigger="cron",
        day_of_week=settings.week_progression_day,
        hour=settings.week_progression_hour,
        minute=settings.week_progression_minute,
        id="week_progression_job",
        replace_existing=True,
    )
    logger.info(
        "Registered week progression job (day=%s, time=%02d:%02d %s)",
        settings.week_progression_day,
        settings.week_progression_hour,
        settings.week_progression_minute,
        settings.scheduler_timezone,
    )


def run_week_progression_job() -> None:
    session = SessionLocal()
    try:
        result = advance_plan_weeks(session)
        logger.info(
            "Week progression complete: plans=%s, advanced=%s, domains_updated=%s",
            result.plans_checked,
            result.plans_advanced,
            result.domains_updated,
        )
    except Exception:  # pragma: no cover - keeps the worker alive for the next run
        session.rollback()
        logger.exception("Week progression job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
