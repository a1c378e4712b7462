"""
Record Day router.

POST /record-day — append one survey submission to the user's CSV
"""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from goodday.core.dependencies import get_store
from goodday.schemas.common import ErrorResponse
from goodday.schemas.record_day import RecordDayRequest, RecordDayResponse
from goodday.services.normalizer import zone_for
from goodday.services.publisher import FileStore
from goodday.services.record_day import append_row, parse_submission

router = APIRouter(prefix="/record-day", tags=["record-day"])


@router.post(
    "",
    response_model=RecordDayResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a day's survey answers",
    responses={
        422: {"model": ErrorResponse, "description": "Validation error, not a submit action, or path is a directory."},
        500: {"model": ErrorResponse, "description": "GitHub credential not configured."},
        502: {"model": ErrorResponse, "description": "GitHub read/write failed."},
    },
)
def record_day(payload: RecordDayRequest, store: FileStore = Depends(get_store)):
    """
    Parse the Slack modal submission, map each selected option to its
    catalog label, and append a row to `owner/repo/path`.

    The file is created with a header row when it does not exist yet.
    """
    zone = zone_for(payload.timezone)
    day = payload.day or datetime.now(tz=timezone.utc).astimezone(zone).date()

    answers = parse_submission(payload.submission)
    result = append_row(
        store,
        owner=payload.owner,
        repo=payload.repo,
        path=payload.path,
        answers=answers,
        day=day,
    )
    return RecordDayResponse(
        path=result.path,
        sha=result.sha,
        created=result.created,
        header=result.header,
        row=result.row,
    )
