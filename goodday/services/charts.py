"""
Chart builders: aggregated series → ChartSpec.

Fixed output filenames keep reruns idempotent: the same week written twice
lands on the same paths.

time-of-day.png            most / least productive time scatter
amount-of-day.png          amount-of-day grid
timeline-<question>.png    one per answered question, quality-tinted
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from goodday.core.errors import UnknownQuestionError
from goodday.core.logging import get_logger
from goodday.services.aggregation import (
    amount_of_day_grid,
    amount_scale,
    line_segments,
    option_ticks,
    productive_time_series,
    quality_bands,
    quality_scale,
    timeline_series,
    weekday_ticks,
    workweek_offsets,
    WORKWEEK,
)
from goodday.services.chart_spec import (
    Axis, ChartSpec, Legend, LegendEntry, Mark, Panel, Scale,
)
from goodday.services.normalizer import DATE_FIELD, SurveyRow
from goodday.services.questions import (
    AMOUNT_OF_DAY_QUESTION_IDS,
    QUALITY_QUESTION_ID,
    Question,
    QuestionCatalog,
    catalog as default_catalog,
)
from goodday.services.window import WEEKDAY_NAMES, WeekWindow

logger = get_logger(__name__)

TIME_OF_DAY_FILENAME = "time-of-day.png"
AMOUNT_OF_DAY_FILENAME = "amount-of-day.png"

LINE_COLOR = "#6366f1"
MOST_PRODUCTIVE_COLOR = "#6366f1"
LEAST_PRODUCTIVE_COLOR = "#f59e0c"


def week_of(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def timeline_filename(question: Question) -> str:
    return f"timeline-{question.id}.png"


# ---------------------------------------------------------------------------
# Timeline per question
# ---------------------------------------------------------------------------

def timeline_chart(
    rows: Sequence[SurveyRow],
    question: Question,
    window: WeekWindow,
    quality_question: Question,
) -> ChartSpec:
    points = timeline_series(rows, question, window)
    bands = quality_bands(rows, quality_question, window)
    # Weekdays always show; weekend days only when they carry data.
    shown = set(workweek_offsets(window)) | {p.day_offset for p in points}
    offsets = sorted(shown)

    band_mark = Mark(
        kind="band",
        data=tuple(
            {"x_start": b.x_start, "x_end": b.x_end, "color": b.color}
            for b in bands
        ),
        style={"opacity": 0.2},
    )
    line_marks = tuple(
        Mark(
            kind="line",
            data=tuple({"x": p.day_offset, "y": p.option_index} for p in segment),
            style={"color": LINE_COLOR, "width": 4},
        )
        for segment in line_segments(points)
    )
    symbol_mark = Mark(
        kind="symbol",
        data=tuple({"x": p.day_offset, "y": p.option_index} for p in points),
        style={"color": LINE_COLOR, "size": 370, "shape": "circle"},
    )

    panel = Panel(
        x=Scale(kind="linear", domain=(offsets[0], offsets[-1]), padding=0.5),
        y=Scale(kind="linear", domain=(0, question.max_index), padding=0.3),
        axes=(
            Axis(
                orient="bottom",
                ticks=tuple((t.value, t.label) for t in weekday_ticks(window, offsets)),
            ),
            Axis(
                orient="left",
                ticks=tuple((t.value, t.label) for t in option_ticks(question, plain=True)),
                grid=True,
            ),
        ),
        marks=(band_mark,) + line_marks + (symbol_mark,),
    )

    scale = quality_scale(quality_question)
    legend = Legend(
        title="Quality of day",
        entries=tuple(
            LegendEntry(label=quality_question.plain_label_of(i), color=scale(i))
            for i in range(quality_question.size)
        ),
    )

    return ChartSpec(
        name=f"timeline:{question.id}",
        filename=timeline_filename(question),
        title=f"{question.plain_title} (week of {week_of(window.start_date)})",
        panels=(panel,),
        legends=(legend,),
        width=1200,
        height=350,
    )


# ---------------------------------------------------------------------------
# Productive time of day
# ---------------------------------------------------------------------------

def _productive_panel(
    rows: Sequence[SurveyRow],
    question: Question,
    window: WeekWindow,
    color: str,
    shape: str,
    title: str,
) -> Panel:
    points = productive_time_series(rows, question, window)
    widest = max((p.column_index for p in points), default=0)
    return Panel(
        title=title,
        x=Scale(kind="linear", domain=(0, max(widest, window.length_days - 1)), padding=0.6),
        y=Scale(kind="linear", domain=(0, question.max_index), padding=0.6),
        axes=(
            Axis(orient="bottom", ticks=()),
            Axis(
                orient="left",
                ticks=tuple((t.value, t.label) for t in option_ticks(question, plain=True)),
                grid=True,
            ),
        ),
        marks=(
            Mark(
                kind="symbol",
                data=tuple(
                    {"x": p.column_index, "y": p.option_index, "text": p.label[:3]}
                    for p in points
                ),
                style={"color": color, "size": 700, "shape": shape},
            ),
        ),
    )


def time_of_day_chart(
    rows: Sequence[SurveyRow],
    window: WeekWindow,
    catalog: QuestionCatalog = default_catalog,
) -> ChartSpec:
    most = catalog.resolve("most_productive")
    least = catalog.resolve("least_productive")
    return ChartSpec(
        name="time-of-day",
        filename=TIME_OF_DAY_FILENAME,
        title=(
            "Do you have a typical time of day that feels productive? "
            f"(week of {week_of(window.start_date)})"
        ),
        panels=(
            _productive_panel(rows, most, window, MOST_PRODUCTIVE_COLOR, "triangle", "Most productive"),
            _productive_panel(rows, least, window, LEAST_PRODUCTIVE_COLOR, "circle", "Least productive"),
        ),
        legends=(
            Legend(
                title="",
                entries=(
                    LegendEntry("Most Productive", MOST_PRODUCTIVE_COLOR, "triangle"),
                    LegendEntry("Least Productive", LEAST_PRODUCTIVE_COLOR, "circle"),
                ),
            ),
        ),
        width=1200,
        height=500,
    )


# ---------------------------------------------------------------------------
# Amount of day grid
# ---------------------------------------------------------------------------

def amount_of_day_chart(
    rows: Sequence[SurveyRow],
    window: WeekWindow,
    catalog: QuestionCatalog = default_catalog,
    question_ids: Sequence[str] = AMOUNT_OF_DAY_QUESTION_IDS,
) -> ChartSpec:
    questions = [catalog.resolve(qid) for qid in question_ids]
    cells = amount_of_day_grid(rows, questions, window)

    # Bands: one column per weekday, one row per question (first question on top).
    column_ticks = tuple((i, WEEKDAY_NAMES[d]) for i, d in enumerate(WORKWEEK))
    row_ticks = tuple((i, q.plain_title) for i, q in enumerate(questions))

    panel = Panel(
        x=Scale(kind="band", domain=(0, len(WORKWEEK) - 1), padding=0.5),
        y=Scale(kind="band", domain=(0, len(questions) - 1), padding=0.5),
        axes=(
            Axis(orient="bottom", ticks=column_ticks),
            Axis(orient="left", ticks=row_ticks),
        ),
        marks=(
            Mark(
                kind="cell",
                data=tuple(
                    {"x": c.column_band, "y": c.row_band, "color": c.color}
                    for c in cells
                ),
            ),
        ),
    )

    reference = questions[0]
    scale = amount_scale(reference)
    legend = Legend(
        title="How much of the day",
        entries=tuple(
            LegendEntry(label=reference.plain_label_of(i), color=scale(i))
            for i in range(reference.size)
        ),
    )

    return ChartSpec(
        name="amount-of-day",
        filename=AMOUNT_OF_DAY_FILENAME,
        title=f"How much of your day… (week of {week_of(window.start_date)})",
        panels=(panel,),
        legends=(legend,),
        width=1200,
        height=120 + 70 * len(questions),
    )


# ---------------------------------------------------------------------------
# All charts for a week
# ---------------------------------------------------------------------------

def build_chart_specs(
    rows: Sequence[SurveyRow],
    fields: Iterable[str],
    window: WeekWindow,
    catalog: QuestionCatalog = default_catalog,
) -> list[ChartSpec]:
    """
    Specs for every chart of the week, time-of-day first.

    A chart whose question is missing from the catalog is skipped and logged;
    the others are still built.
    """
    specs: list[ChartSpec] = []

    for build in (time_of_day_chart, amount_of_day_chart):
        try:
            specs.append(build(rows, window, catalog))
        except UnknownQuestionError as e:
            logger.warning("Skipping %s chart: %s", build.__name__, e.message)

    quality: Optional[Question] = catalog.get(QUALITY_QUESTION_ID)
    for field_name in fields:
        if field_name == DATE_FIELD:
            continue
        try:
            question = catalog.resolve(field_name)
            if quality is None:
                raise UnknownQuestionError(QUALITY_QUESTION_ID)
        except UnknownQuestionError as e:
            logger.warning("Skipping timeline for %r: %s", field_name, e.message)
            continue
        specs.append(timeline_chart(rows, question, window, quality))

    return specs
