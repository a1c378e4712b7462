"""
Row normalizer: raw CSV rows → typed SurveyRow records.

The CSV has one row per day and one column per question id, plus a `date`
column. Dates are calendar dates in the user's zone: "2024-01-15" is a
Monday for every user, whatever their UTC offset. Answers are copied
verbatim; checking them against the catalog happens during aggregation.

Public API
----------
normalize(raw_row, time_zone)     -> SurveyRow   (raises RowFormatError)
load_rows(csv_text, time_zone)    -> CsvTable    (skips malformed rows)
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from goodday.core.errors import DataFileError, RowFormatError
from goodday.core.logging import get_logger

logger = get_logger(__name__)

DATE_FIELD = "date"


@dataclass(frozen=True)
class SurveyRow:
    """One calendar day's answers for one user."""
    date: date
    answers: Mapping[str, Optional[str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    def answer(self, question_id: str) -> Optional[str]:
        return self.answers.get(question_id)

    def local_midnight(self, time_zone: str) -> datetime:
        return datetime.combine(self.date, time(0), tzinfo=zone_for(time_zone))


@dataclass
class CsvTable:
    fields: list[str]
    rows: list[SurveyRow]
    skipped: list[str] = field(default_factory=list)


def zone_for(time_zone: str) -> ZoneInfo:
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RowFormatError(
            f"Invalid timezone '{time_zone}'. Use IANA timezone identifiers.",
            details={"timezone": time_zone},
        ) from e


def parse_local_date(value: str, time_zone: str) -> date:
    """
    Calendar date of `value` in `time_zone`.

    Plain dates are already local. Timestamps carrying an offset are moved
    into the zone before taking the date; naive timestamps are read as local.
    """
    text = (value or "").strip()
    if not text:
        raise RowFormatError("Row has no date.")
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise RowFormatError(f"Invalid date {text!r}: {e}", details={"date": text}) from e
    if parsed.tzinfo is None:
        return parsed.date()
    return parsed.astimezone(zone_for(time_zone)).date()


def normalize(raw_row: Mapping[str, Optional[str]], time_zone: str) -> SurveyRow:
    """Convert one CSV record into a SurveyRow anchored in `time_zone`."""
    if DATE_FIELD not in raw_row:
        raise RowFormatError(f"Row is missing the '{DATE_FIELD}' column.")
    value = raw_row[DATE_FIELD]
    day = parse_local_date(value if isinstance(value, str) else "", time_zone)

    answers: dict[str, Optional[str]] = {}
    for key, value in raw_row.items():
        if not key or key == DATE_FIELD:
            continue
        text = value.strip() if isinstance(value, str) else None
        answers[key] = text or None
    return SurveyRow(date=day, answers=answers)


def load_rows(csv_text: str, time_zone: str) -> CsvTable:
    """
    Parse a whole survey CSV.

    Columns are read as strings with no NA coercion, so an answer such as
    "None" survives intact. Invalid rows, including rows with more fields
    than the header, are skipped and reported.
    """
    if not csv_text.strip():
        return CsvTable(fields=[], rows=[])

    skipped: list[str] = []

    def _reject(bad_line: list[str]) -> None:
        skipped.append(
            f"Row starting {bad_line[0]!r} has {len(bad_line)} fields, more than the header"
        )

    try:
        frame = pd.read_csv(
            io.StringIO(csv_text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_reject,
        )
    except pd.errors.ParserError as e:
        raise DataFileError(f"Survey CSV could not be parsed: {e}") from e
    # Trailing commas in the header produce "Unnamed: N" columns.
    fields = [str(c) for c in frame.columns if not str(c).startswith("Unnamed:")]
    frame = frame[fields]

    rows: list[SurveyRow] = []
    for idx, record in enumerate(frame.to_dict("records")):
        try:
            rows.append(normalize(record, time_zone))
        except RowFormatError as e:
            skipped.append(f"Row {idx}: {e.message}")

    if skipped:
        logger.warning("Skipped %d invalid survey row(s)", len(skipped))
        for reason in skipped:
            logger.warning("  - %s", reason)

    return CsvTable(fields=fields, rows=rows, skipped=skipped)
