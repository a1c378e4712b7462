"""
Narrative README for the weekly report.
"""
from __future__ import annotations

from typing import Optional, Sequence

from goodday.services.aggregation import WeekStats
from goodday.services.charts import TIME_OF_DAY_FILENAME, week_of
from goodday.services.window import WeekWindow

GREAT_JOB_THRESHOLD = 3


def _image(filename: str) -> str:
    return f"![Image]({filename})"


def render_summary(
    stats: Optional[WeekStats],
    window: WeekWindow,
    chart_filenames: Sequence[str],
    total_days: Optional[int] = None,
) -> str:
    """
    Markdown summary of the week. Sections for charts that were not
    produced are left out rather than linking to missing images.

    Without stats (no workday quality question) only the day count is
    reported, taken from `total_days`.
    """
    time_of_day = [f for f in chart_filenames if f == TIME_OF_DAY_FILENAME]
    others = [f for f in chart_filenames if f != TIME_OF_DAY_FILENAME]

    days = stats.total_days if stats else (total_days or 0)
    great_job = " Great job!" if days > GREAT_JOB_THRESHOLD else ""
    lines = [
        "# The Good Day Project",
        "",
        f"## Week of {week_of(window.start_date)} summary",
        "",
        f"You logged {days} days this week.{great_job}",
        "",
    ]
    if stats:
        lines += [
            f"☀️ **{stats.good_days}** were Good days ({stats.good_pct}). "
            "*These are days you rated as Awesome or Good*",
            "",
            f"🌧 **{stats.not_so_good_days}** were Not-so-good days ({stats.not_so_good_pct}). "
            "*These are days you rated as OK, Bad, or Terrible*",
            "",
        ]
        if stats.average_label:
            lines += [f"On average, your workdays were {stats.average_label}.", ""]

    lines += ["Let's take a look at the data you logged for this week.", ""]

    if time_of_day:
        lines += [
            "## Do you have a typical time of day that feels productive?",
            "",
            "First, let's look at which parts of the day you were most and least "
            "productive. If there's a clear pattern, could you optimize your schedule "
            "to work with your natural productivity?",
            "",
            _image(time_of_day[0]),
            "",
        ]

    if others:
        lines += [
            "## How you answered each question",
            "",
            "Let's look at how you responded to each question over the week.",
            "",
            "Is there any relationship to how you answered the first *How was your "
            "workday* question? We colored the background of each day with your "
            "response - red for not-so-good days and green for great days.",
            "",
            *(_image(f) for f in others),
            "",
        ]

    return "\n".join(lines)
