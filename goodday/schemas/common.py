"""
Error envelope shared by the job and record-day endpoints.

Every failure body is {code, message, details}. `code` is the
GoodDayException code (DATA_FILE_ERROR, PATH_IS_DIRECTORY,
MISSING_CREDENTIAL, ...), VALIDATION_ERROR for rejected request bodies,
or INTERNAL_ERROR.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """One rejected request field, listed under details.errors of a VALIDATION_ERROR."""
    field: str = Field(..., description="Dotted path of the field, e.g. 'owner' or 'timezone'")
    message: str
    type: str = Field(..., description="pydantic error type")


class ErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str = Field(..., examples=["PATH_IS_DIRECTORY"])
    message: str
    details: Optional[dict[str, Any]] = Field(
        None, description="Context for the failure, such as the offending path or question id"
    )
