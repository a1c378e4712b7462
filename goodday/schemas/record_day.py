"""
Record Day request / response schemas.

POST /record-day → RecordDayRequest → RecordDayResponse
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, field_validator


class RecordDayRequest(BaseModel):
    """A Slack survey submission to append to the user's CSV."""

    owner: Annotated[str, Field(min_length=1, max_length=128, examples=["githubocto"])]
    repo: Annotated[str, Field(min_length=1, max_length=128, examples=["good-day-demo"])]
    path: Annotated[str, Field(
        min_length=1,
        max_length=512,
        description="Path of the CSV file inside the repository.",
        examples=["good-day.csv"],
    )]
    submission: dict[str, Any] = Field(
        description="Slack block-action payload carrying `view.state.values` and `view.blocks`.",
    )
    day: Optional[date] = Field(
        default=None,
        description="Date to record. Defaults to today in `timezone`.",
        examples=["2026-02-20"],
    )
    timezone: str = Field(
        default="UTC",
        description="IANA time zone used to resolve 'today'.",
        examples=["America/New_York"],
    )

    @field_validator("owner", "repo", "path", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("must not be empty after stripping whitespace")
        return stripped


class RecordDayResponse(BaseModel):
    path: str
    sha: str = Field(description="Blob sha of the file after the append.")
    created: bool = Field(description="True when the CSV did not exist before.")
    header: list[str]
    row: dict[str, str]
