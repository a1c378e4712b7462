"""
Jobs router — manual triggers for the scheduled jobs.

POST /jobs/weekly-reports   — build and publish last week's report for every user
POST /jobs/reminders        — prompt users whose reminder hour is now
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from goodday.core.dependencies import get_notifier, get_renderer, get_store
from goodday.db.base import get_db
from goodday.schemas.common import ErrorResponse
from goodday.schemas.jobs import (
    ReminderItem,
    RemindersRequest,
    RemindersResponse,
    UserRunItem,
    WeeklyReportsRequest,
    WeeklyReportsResponse,
)
from goodday.services.notifier import Notifier
from goodday.services.pipeline import Renderer, RunStatus, UserRunResult, run_weekly_reports
from goodday.services.publisher import FileStore
from goodday.services.reminders import send_reminders

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _run_to_item(r: UserRunResult) -> UserRunItem:
    return UserRunItem(
        slackid=r.slackid,
        ok=r.ok,
        status=r.status.value,
        week_start=r.week_start,
        days=r.days,
        charts=r.charts,
        skipped_charts=r.skipped_charts,
        error=r.error,
    )


@router.post(
    "/weekly-reports",
    response_model=WeeklyReportsResponse,
    status_code=status.HTTP_207_MULTI_STATUS,
    summary="Run the weekly report job now",
    responses={
        207: {"description": "Multi-status: check each item's `ok` / `status`."},
        500: {"model": ErrorResponse, "description": "GitHub credential not configured."},
    },
)
def weekly_reports(
    payload: WeeklyReportsRequest | None = None,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_store),
    renderer: Renderer = Depends(get_renderer),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Same work as the weekly timer: for every user, chart last week's
    answers, commit the images and README, and send the summary notification.

    Users are processed independently. Users with no answers last week are
    reported as `no_data` and are not notified.
    """
    now = payload.now if payload else None
    results = run_weekly_reports(db, store, renderer, notifier, now=now)
    items = [_run_to_item(r) for r in results]
    return WeeklyReportsResponse(
        total=len(items),
        published=sum(1 for r in results if r.status == RunStatus.published),
        failed=sum(1 for i in items if not i.ok),
        items=items,
    )


@router.post(
    "/reminders",
    response_model=RemindersResponse,
    status_code=status.HTTP_207_MULTI_STATUS,
    summary="Send due survey reminders now",
)
def reminders(
    payload: RemindersRequest | None = None,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Prompt every subscribed user whose local prompt hour is the current hour."""
    now = payload.now if payload else None
    results = send_reminders(db, notifier, now=now)
    items = [ReminderItem(slackid=r.slackid, ok=r.ok, error=r.error) for r in results]
    succeeded = sum(1 for i in items if i.ok)
    return RemindersResponse(
        total=len(items),
        succeeded=succeeded,
        failed=len(items) - succeeded,
        items=items,
    )
