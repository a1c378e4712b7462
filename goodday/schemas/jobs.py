"""
Job trigger schemas.

POST /jobs/weekly-reports → WeeklyReportsRequest → WeeklyReportsResponse
POST /jobs/reminders      → RemindersRequest     → RemindersResponse
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WeeklyReportsRequest(BaseModel):
    now: Optional[datetime] = Field(
        default=None,
        description="Reference instant; the report covers the week before it. Defaults to now (UTC).",
        examples=["2026-02-23T13:00:00Z"],
    )


class UserRunItem(BaseModel):
    """Outcome for a single user."""
    slackid: str
    ok: bool
    status: str = Field(
        description='"published" | "no_data" | "fetch_failed" | "publish_failed" | "notify_failed"'
    )
    week_start: Optional[str] = None
    days: int = 0
    charts: list[str] = Field(default_factory=list)
    skipped_charts: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class WeeklyReportsResponse(BaseModel):
    total: int
    published: int
    failed: int
    items: list[UserRunItem]


class RemindersRequest(BaseModel):
    now: Optional[datetime] = Field(default=None, examples=["2026-02-23T16:00:00Z"])


class ReminderItem(BaseModel):
    slackid: str
    ok: bool
    error: Optional[str] = None


class RemindersResponse(BaseModel):
    total: int
    succeeded: int
    failed: int
    items: list[ReminderItem]
