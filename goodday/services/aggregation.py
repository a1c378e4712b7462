"""
Aggregation engine: a week of SurveyRows → chart-ready series.

Every chart shares one horizontal unit, the day offset from the window
start, computed by WeekWindow.day_offset so binning here never disagrees
with the windowing that selected the rows.

Option positions use the zero-based [0, N-1] convention on both sides:
option_index() places points and Question.label_of() labels the axis ticks.
An answer that does not resolve produces no point at all; it is never
coerced to index 0, which is a real answer.

Public API
----------
day_offset(row, window)                          -> int
resolve_option(row, question)                    -> int | None
timeline_series(rows, question, window)          -> list[ChartPoint]
line_segments(points)                            -> list[list[ChartPoint]]
quality_bands(rows, quality_question, window)    -> list[QualityBand]
place_in_columns(entries)                        -> tuple[ChartPoint, ...]
productive_time_series(rows, question, window)   -> tuple[ChartPoint, ...]
amount_of_day_grid(rows, questions, window)      -> list[HeatmapCell]
option_ticks(question) / weekday_ticks(window)   -> list[Tick]
week_stats(rows, quality_question)               -> WeekStats
"""
from __future__ import annotations

import bisect
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from functools import reduce
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from goodday.services.colors import LinearColorScale
from goodday.services.normalizer import SurveyRow
from goodday.services.questions import Question, option_index
from goodday.services.window import WeekWindow

# Background tint per quality answer: low → neutral → high.
QUALITY_COLORS = ("#f87171", "#e9e9e9", "#0cb981")
# Amount-of-day cells: none of the day → most or all of the day.
AMOUNT_COLORS = ("#eef2ff", "#4338ca")

# Calendar weekdays (Monday=0) shown as columns of the amount-of-day grid.
WORKWEEK = (0, 1, 2, 3, 4)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChartPoint:
    day_offset: int
    option_index: int
    column_index: Optional[int] = None
    label: str = ""


@dataclass(frozen=True)
class QualityBand:
    day_offset: int
    quality_index: int
    color: str

    @property
    def x_start(self) -> float:
        return self.day_offset - 0.5

    @property
    def x_end(self) -> float:
        return self.day_offset + 0.5


@dataclass(frozen=True)
class HeatmapCell:
    question_id: str
    row_band: int        # position of the question in the grid
    column_band: int     # position of the weekday in WORKWEEK
    day_offset: int
    option_index: int
    color: str


@dataclass(frozen=True)
class Tick:
    value: int
    label: str


@dataclass(frozen=True)
class WeekStats:
    total_days: int
    good_days: int
    not_so_good_days: int
    good_pct: str
    not_so_good_pct: str
    average_label: Optional[str]


# ---------------------------------------------------------------------------
# Binning and resolution
# ---------------------------------------------------------------------------

def day_offset(row: SurveyRow, window: WeekWindow) -> int:
    return window.day_offset(row.date)


def resolve_option(row: SurveyRow, question: Question) -> Optional[int]:
    """Ordinal position of the row's answer, or None when it is blank / unknown."""
    index = option_index(question, row.answer(question.id))
    return index if index >= 0 else None


# ---------------------------------------------------------------------------
# Timelines
# ---------------------------------------------------------------------------

def timeline_series(
    rows: Iterable[SurveyRow],
    question: Question,
    window: WeekWindow,
) -> list[ChartPoint]:
    points = []
    for row in rows:
        index = resolve_option(row, question)
        if index is None:
            continue
        points.append(ChartPoint(
            day_offset=day_offset(row, window),
            option_index=index,
            label=question.label_of(index),
        ))
    # sorted() is stable: same-day duplicates keep their input order
    return sorted(points, key=lambda p: p.day_offset)


def line_segments(points: Sequence[ChartPoint]) -> list[list[ChartPoint]]:
    """Split a day-ordered series wherever a day is missing."""
    segments: list[list[ChartPoint]] = []
    for point in points:
        if segments and point.day_offset - segments[-1][-1].day_offset <= 1:
            segments[-1].append(point)
        else:
            segments.append([point])
    return segments


def quality_scale(quality_question: Question) -> LinearColorScale:
    top = quality_question.max_index
    return LinearColorScale(domain=(0, top / 2, top), range=QUALITY_COLORS)


def quality_bands(
    rows: Iterable[SurveyRow],
    quality_question: Question,
    window: WeekWindow,
) -> list[QualityBand]:
    """One background band per day whose quality answer resolves."""
    scale = quality_scale(quality_question)
    bands = []
    for row in rows:
        index = resolve_option(row, quality_question)
        if index is None:
            continue
        bands.append(QualityBand(
            day_offset=day_offset(row, window),
            quality_index=index,
            color=scale(index),
        ))
    return sorted(bands, key=lambda b: b.day_offset)


# ---------------------------------------------------------------------------
# Productive time scatter
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Placement:
    counts: Mapping[int, int]
    points: tuple[ChartPoint, ...]


def _place(acc: _Placement, entry: tuple[int, int, str]) -> _Placement:
    offset, bucket, label = entry
    column = acc.counts.get(bucket, 0)
    counts = MappingProxyType({**acc.counts, bucket: column + 1})
    point = ChartPoint(day_offset=offset, option_index=bucket, column_index=column, label=label)
    return _Placement(counts=counts, points=acc.points + (point,))


def place_in_columns(entries: Iterable[tuple[int, int, str]]) -> tuple[ChartPoint, ...]:
    """
    Give each (day_offset, bucket, label) entry the next free column of its bucket.

    Entries are consumed in order, so the first one in a bucket gets column 0,
    the next column 1, and so on.
    """
    empty = _Placement(counts=MappingProxyType({}), points=())
    return reduce(_place, entries, empty).points


def productive_time_series(
    rows: Iterable[SurveyRow],
    question: Question,
    window: WeekWindow,
) -> tuple[ChartPoint, ...]:
    """Column-packed points for one time-of-day question, in row order."""
    entries = []
    for row in rows:
        index = resolve_option(row, question)
        if index is None:
            continue
        entries.append((day_offset(row, window), index, window.day_name(day_offset(row, window))))
    return place_in_columns(entries)


# ---------------------------------------------------------------------------
# Amount-of-day grid
# ---------------------------------------------------------------------------

def amount_scale(question: Question) -> LinearColorScale:
    return LinearColorScale(domain=(0, max(question.max_index, 1)), range=AMOUNT_COLORS)


def amount_of_day_grid(
    rows: Sequence[SurveyRow],
    questions: Sequence[Question],
    window: WeekWindow,
    weekdays: Sequence[int] = WORKWEEK,
) -> list[HeatmapCell]:
    """Cells for a question × weekday grid; rows on other weekdays are left out."""
    cells = []
    for band, question in enumerate(questions):
        scale = amount_scale(question)
        for row in rows:
            weekday = row.date.weekday()
            if weekday not in weekdays:
                continue
            index = resolve_option(row, question)
            if index is None:
                continue
            cells.append(HeatmapCell(
                question_id=question.id,
                row_band=band,
                column_band=weekdays.index(weekday),
                day_offset=day_offset(row, window),
                option_index=index,
                color=scale(index),
            ))
    return cells


# ---------------------------------------------------------------------------
# Axis labels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThresholdScale:
    """
    Step lookup: value v maps to range[i] where i = bisect_right(domain, v).

    With domain [1, 2, …, N-1] and N labels, every integer in [0, N-1] maps
    to the label at that same index.
    """
    domain: tuple[float, ...]
    range: tuple[str, ...]

    def __post_init__(self):
        if len(self.range) != len(self.domain) + 1:
            raise ValueError("threshold scale needs exactly one more label than thresholds")

    @classmethod
    def for_labels(cls, labels: Sequence[str]) -> "ThresholdScale":
        return cls(domain=tuple(range(1, len(labels))), range=tuple(labels))

    def __call__(self, value: float) -> str:
        return self.range[bisect.bisect_right(self.domain, value)]


def option_ticks(question: Question, plain: bool = False) -> list[Tick]:
    labels = [
        question.plain_label_of(i) if plain else question.label_of(i)
        for i in range(question.size)
    ]
    scale = ThresholdScale.for_labels(labels)
    return [Tick(value=i, label=scale(i)) for i in range(question.size)]


def weekday_ticks(window: WeekWindow, offsets: Optional[Iterable[int]] = None) -> list[Tick]:
    offsets = range(window.length_days) if offsets is None else offsets
    return [Tick(value=o, label=window.day_name(o)) for o in offsets]


def workweek_offsets(window: WeekWindow, weekdays: Sequence[int] = WORKWEEK) -> list[int]:
    """Day offsets inside the window that fall on the given weekdays, in order."""
    return [
        o for o in range(window.length_days)
        if window.date_at(o).weekday() in weekdays
    ]


# ---------------------------------------------------------------------------
# Summary statistics
# ---------------------------------------------------------------------------

def _pct(part: int, whole: int) -> str:
    return f"{(part / whole if whole else 0):.0%}"


def week_stats(rows: Sequence[SurveyRow], quality_question: Question) -> WeekStats:
    """
    Good days are those rated above the middle option. Every other row,
    unanswered ones included, counts as not-so-good.
    """
    midpoint = quality_question.max_index // 2
    indices = [resolve_option(row, quality_question) for row in rows]

    total = len(rows)
    good = sum(1 for i in indices if i is not None and i > midpoint)
    not_so_good = total - good

    resolved = [i for i in indices if i is not None]
    average_label = None
    if resolved:
        mean = Decimal(sum(resolved)) / Decimal(len(resolved))
        rounded = int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        average_label = quality_question.label_of(rounded)

    return WeekStats(
        total_days=total,
        good_days=good,
        not_so_good_days=not_so_good,
        good_pct=_pct(good, total),
        not_so_good_pct=_pct(not_so_good, total),
        average_label=average_label,
    )
