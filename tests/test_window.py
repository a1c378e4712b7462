"""
Tests for the week windower: which calendar week a report covers.
"""
from datetime import date, datetime, timezone

import pytest

from goodday.services.normalizer import SurveyRow
from goodday.services.window import (
    MONDAY,
    SUNDAY,
    filter_rows,
    is_in_window,
    weekday_number,
    window_for,
)

REPORT_NOW = datetime(2024, 1, 22, 13, 0, tzinfo=timezone.utc)   # a Monday


class TestWindowFor:
    def test_previous_sunday_week(self):
        window = window_for(REPORT_NOW, "UTC")
        assert window.start_date == date(2024, 1, 14)
        assert window.end_date == date(2024, 1, 21)
        assert window.length_days == 7

    def test_monday_week_start(self):
        window = window_for(REPORT_NOW, "UTC", week_start=MONDAY)
        assert window.start_date == date(2024, 1, 15)
        assert window.end_date == date(2024, 1, 22)

    def test_never_the_week_in_progress(self):
        # Saturday, the last day of the current Sunday week.
        now = datetime(2024, 1, 27, 23, 0, tzinfo=timezone.utc)
        window = window_for(now, "UTC")
        assert window.start_date == date(2024, 1, 14)

    def test_bounds_are_local_midnights(self):
        window = window_for(REPORT_NOW, "America/New_York")
        assert window.start.hour == 0
        assert window.start.tzinfo.key == "America/New_York"
        assert window.end.tzinfo.key == "America/New_York"

    def test_time_zone_changes_the_week(self):
        # Sunday 03:00 UTC is still Saturday evening in Los Angeles.
        now = datetime(2024, 1, 21, 3, 0, tzinfo=timezone.utc)
        assert window_for(now, "UTC").start_date == date(2024, 1, 14)
        assert window_for(now, "America/Los_Angeles").start_date == date(2024, 1, 7)

    def test_naive_now_is_utc(self):
        naive = datetime(2024, 1, 22, 13, 0)
        assert window_for(naive, "UTC") == window_for(REPORT_NOW, "UTC")

    def test_week_across_dst_change_is_seven_days(self):
        # US clocks spring forward on 2024-03-10.
        now = datetime(2024, 3, 18, 13, 0, tzinfo=timezone.utc)
        window = window_for(now, "America/New_York", week_start=SUNDAY)
        assert window.start_date == date(2024, 3, 10)
        assert window.length_days == 7
        assert window.day_offset(date(2024, 3, 16)) == 6


class TestMembership:
    def test_half_open(self):
        window = window_for(REPORT_NOW, "UTC")
        assert is_in_window(date(2024, 1, 14), window)
        assert is_in_window(date(2024, 1, 20), window)
        assert not is_in_window(date(2024, 1, 21), window)
        assert not is_in_window(date(2024, 1, 13), window)

    def test_filter_rows_keeps_order(self):
        window = window_for(REPORT_NOW, "UTC")
        rows = [
            SurveyRow(date=date(2024, 1, 21)),
            SurveyRow(date=date(2024, 1, 16)),
            SurveyRow(date=date(2024, 1, 14)),
            SurveyRow(date=date(2024, 1, 13)),
        ]
        kept = filter_rows(rows, window)
        assert [r.date for r in kept] == [date(2024, 1, 16), date(2024, 1, 14)]

    def test_day_offset_and_name(self):
        window = window_for(REPORT_NOW, "UTC")
        assert window.day_offset(date(2024, 1, 14)) == 0
        assert window.day_offset(date(2024, 1, 20)) == 6
        assert window.day_name(0) == "Sunday"
        assert window.day_name(1) == "Monday"


class TestWeekdayNumber:
    def test_names(self):
        assert weekday_number("sunday") == SUNDAY
        assert weekday_number(" Monday ") == MONDAY

    def test_unknown(self):
        with pytest.raises(ValueError):
            weekday_number("funday")
