"""
Timer process: the weekly report job and the hourly reminder job.

Run with:  goodday-scheduler
Both schedules are crontab expressions from settings, evaluated in UTC.
"""
from __future__ import annotations

import sys
from datetime import datetime, timezone

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from goodday.core.config import settings
from goodday.core.dependencies import get_notifier, get_renderer, get_store
from goodday.core.errors import MissingCredentialError
from goodday.core.logging import get_logger
from goodday.db.base import SessionLocal
from goodday.services.pipeline import run_weekly_reports
from goodday.services.reminders import send_reminders

logger = get_logger(__name__)


def weekly_report_job() -> None:
    db = SessionLocal()
    try:
        results = run_weekly_reports(
            db, get_store(), get_renderer(), get_notifier(),
            now=datetime.now(tz=timezone.utc),
        )
        failed = [r.slackid for r in results if not r.ok]
        if failed:
            logger.warning("Weekly reports failed for: %s", failed)
    finally:
        db.close()


def reminder_job() -> None:
    db = SessionLocal()
    try:
        send_reminders(db, get_notifier(), now=datetime.now(tz=timezone.utc))
    finally:
        db.close()


def build_scheduler() -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        weekly_report_job,
        trigger=CronTrigger.from_crontab(settings.WEEKLY_REPORT_CRON, timezone="UTC"),
        id="weekly_report",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        reminder_job,
        trigger=CronTrigger.from_crontab(settings.REMINDER_CRON, timezone="UTC"),
        id="hourly_reminder",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main() -> None:
    try:
        settings.require_github_token()
    except MissingCredentialError as e:
        logger.error("Cannot start scheduler: %s", e.message)
        sys.exit(1)

    scheduler = build_scheduler()
    logger.info(
        "Scheduler started: weekly reports %r, reminders %r",
        settings.WEEKLY_REPORT_CRON, settings.REMINDER_CRON,
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
