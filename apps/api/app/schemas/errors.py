from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorInfo(BaseModel):
    code: str = Field(
        ...,
        description="One of the ErrorCode values",
        json_schema_extra={"example": "BAD_REQUEST"},
    )
    message: str = Field(
        ...,
        description="Human-readable explanation; not meant for parsing",
        json_schema_extra={"example": "Missing required columns: ['userId']"},
    )
    request_id: Optional[str] = Field(
        None,
        description="Correlation id, also returned in the X-Request-ID header",
        json_schema_extra={"example": "c0ffee00c0ffee00c0ffee00c0ffee00"},
    )
    details: Optional[Any] = Field(
        None,
        description="Per-field validation errors for VALIDATION_ERROR; null otherwise",
    )


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: ErrorInfo
