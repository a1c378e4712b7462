"""
Custom exception hierarchy for Good Day.

Rule: every error has a machine-readable `code` string so clients (and the
batch job result lists) can branch on it without parsing English messages.

Taxonomy
--------
configuration  MissingCredentialError            fatal at scheduler start
per-user fetch DataFileError, RowFormatError      user skipped, batch continues
per-chart      UnknownQuestionError, RenderError  chart omitted
publish        PublishError, PathIsDirectoryError user outcome marked failed
notify         NotificationError                  user outcome marked failed
webhook        PathIsDirectoryError, NotASubmissionError
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from goodday.schemas.common import ErrorDetail


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class GoodDayException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class MissingCredentialError(GoodDayException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "MISSING_CREDENTIAL"

    def __init__(self, name: str):
        super().__init__(
            message=f"Required credential {name} is not configured.",
            details={"name": name},
        )


class DataFileError(GoodDayException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "DATA_FILE_ERROR"

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message=message, details={"path": path} if path else {})


class RowFormatError(GoodDayException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "ROW_FORMAT_ERROR"


class UnknownQuestionError(GoodDayException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "UNKNOWN_QUESTION"

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(
            message=f"Question {question_id!r} is not in the catalog.",
            details={"question_id": question_id},
        )


class RenderError(GoodDayException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "RENDER_ERROR"

    def __init__(self, chart: str, reason: str):
        super().__init__(
            message=f"Chart {chart} could not be rendered: {reason}",
            details={"chart": chart},
        )


class PublishError(GoodDayException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "PUBLISH_ERROR"

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Writing {path} failed: {reason}",
            details={"path": path},
        )


class NotificationError(GoodDayException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "NOTIFICATION_ERROR"

    def __init__(self, slackid: str, reason: str):
        super().__init__(
            message=f"Notifying {slackid} failed: {reason}",
            details={"slackid": slackid},
        )


class PathIsDirectoryError(GoodDayException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "PATH_IS_DIRECTORY"

    def __init__(self, path: str):
        super().__init__(
            message=f'path "{path}" is a directory, not a CSV file.',
            details={"path": path},
        )


class NotASubmissionError(GoodDayException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "NOT_A_SUBMISSION"

    def __init__(self):
        super().__init__(
            message="Payload carries actions but none of them is the record_day submit button.",
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def goodday_exception_handler(request: Request, exc: GoodDayException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append(ErrorDetail(
            field=".".join(str(loc) for loc in error["loc"] if loc != "body"),
            message=error["msg"],
            type=error["type"],
        ).model_dump())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
