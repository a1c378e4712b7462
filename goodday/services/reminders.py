"""
Hourly reminders: prompt every subscribed user whose local clock has just
reached the hour of their configured prompt time.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from goodday.core.errors import NotificationError
from goodday.core.logging import get_logger
from goodday.models.user import User
from goodday.services.notifier import Notifier

logger = get_logger(__name__)


@dataclass
class ReminderResult:
    slackid: str
    ok: bool
    error: Optional[str] = None


def _prompt_hour(prompt_time: str) -> int:
    """Hour of an "HH:MM" (or "HH") wall-clock time."""
    hour = int(prompt_time.strip().split(":", 1)[0])
    if not 0 <= hour <= 23:
        raise ValueError(f"hour out of range: {prompt_time!r}")
    return hour


def is_due(user: User, now: datetime) -> bool:
    local_hour = now.astimezone(ZoneInfo(user.timezone)).hour
    return local_hour == _prompt_hour(user.prompt_time)


def users_to_prompt(db: Session, now: Optional[datetime] = None) -> list[User]:
    now = now or datetime.now(tz=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    subscribed = (
        db.query(User)
        .filter(User.is_unsubscribed.isnot(True))
        .order_by(User.id)
        .all()
    )
    due = []
    for user in subscribed:
        try:
            if is_due(user, now):
                due.append(user)
        except (ZoneInfoNotFoundError, ValueError) as e:
            logger.warning("Skipping %s: bad timezone or prompt time (%s)", user.slackid, e)
    return due


def send_reminders(
    db: Session,
    notifier: Notifier,
    now: Optional[datetime] = None,
) -> list[ReminderResult]:
    users = users_to_prompt(db, now)
    logger.info("Users to prompt: %s", [u.slackid for u in users])

    results = []
    for user in users:
        try:
            notifier.prompt(user.slackid)
            results.append(ReminderResult(slackid=user.slackid, ok=True))
        except NotificationError as e:
            logger.error("Prompt for %s failed: %s", user.slackid, e.message)
            results.append(ReminderResult(slackid=user.slackid, ok=False, error=e.message))
    return results
