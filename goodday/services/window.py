"""
Week windower: which calendar week a weekly report covers.

The report job runs some time after a week has ended and always reports on
the previous complete week, never on the one in progress. A window is the
half-open range [start, end) of two local midnights seven days apart.

Public API
----------
window_for(now, time_zone, week_start)  -> WeekWindow
is_in_window(day, window)               -> bool
filter_rows(rows, window)               -> list[SurveyRow]
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from goodday.services.normalizer import SurveyRow, zone_for

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
MONDAY, SUNDAY, SATURDAY = 0, 6, 5
WEEK_LENGTH = 7


def weekday_number(name: str) -> int:
    """Python weekday number (Monday=0) for an English weekday name."""
    try:
        return [n.lower() for n in WEEKDAY_NAMES].index(name.strip().lower())
    except ValueError:
        raise ValueError(f"unknown weekday {name!r}") from None


@dataclass(frozen=True)
class WeekWindow:
    start: datetime   # local midnight, aware
    end: datetime     # local midnight of the next week start, aware

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    @property
    def length_days(self) -> int:
        return (self.end_date - self.start_date).days

    def contains(self, day: date) -> bool:
        return self.start_date <= day < self.end_date

    def day_offset(self, day: date) -> int:
        """Whole calendar days between the window start and `day`."""
        return (day - self.start_date).days

    def date_at(self, offset: int) -> date:
        return self.start_date + timedelta(days=offset)

    def day_name(self, offset: int) -> str:
        return WEEKDAY_NAMES[self.date_at(offset).weekday()]


def window_for(now: datetime, time_zone: str, week_start: int = SUNDAY) -> WeekWindow:
    """The complete week before the one containing `now`, in `time_zone`."""
    zone = zone_for(time_zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(zone)

    reference = local_now.date() - timedelta(weeks=1)
    start_date = reference - timedelta(days=(reference.weekday() - week_start) % WEEK_LENGTH)
    end_date = start_date + timedelta(days=WEEK_LENGTH)

    return WeekWindow(
        start=datetime.combine(start_date, time(0), tzinfo=zone),
        end=datetime.combine(end_date, time(0), tzinfo=zone),
    )


def is_in_window(day: date, window: WeekWindow) -> bool:
    return window.contains(day)


def filter_rows(rows: Iterable[SurveyRow], window: WeekWindow) -> list[SurveyRow]:
    """Rows dated inside the window, in their original order."""
    return [row for row in rows if window.contains(row.date)]
