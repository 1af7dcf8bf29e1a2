# apps/api/app/errors.py
from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from apps.api.app.error_codes import ErrorCode
from apps.api.app.schemas.errors import ErrorResponse


REQUEST_ID_HEADER = "X-Request-ID"

WARMING_UP_MESSAGE = "Service is warming up. Please retry shortly."


def get_request_id(request: Request) -> str:
    """
    Return the request correlation id.

    The request context middleware stores it on `request.state.request_id`;
    a client-supplied header is used next, and a fresh id is generated only
    when neither exists.
    """
    rid = getattr(request.state, "request_id", None)
    if isinstance(rid, str) and rid.strip():
        return rid
    return request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex


_STATUS_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    404: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


def error_code_for_status(status_code: int) -> ErrorCode:
    return _STATUS_CODES.get(status_code, ErrorCode.HTTP_ERROR)


def error_response(
    *,
    status_code: int,
    code: ErrorCode,
    message: str,
    request_id: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """
    Build the canonical error envelope used by every route:
    {"error": {"code": "...", "message": "...", "request_id": "...", "details": ...}}

    The same id is echoed in the `X-Request-ID` response header.
    """
    payload = ErrorResponse(
        error={
            "code": code.value,
            "message": message,
            "request_id": request_id,
            "details": details,
        }
    ).model_dump()

    return JSONResponse(
        status_code=status_code,
        content=payload,
        headers={REQUEST_ID_HEADER: request_id},
    )


def service_unavailable(request: Request) -> JSONResponse:
    return error_response(
        status_code=503,
        code=ErrorCode.SERVICE_UNAVAILABLE,
        message=WARMING_UP_MESSAGE,
        request_id=get_request_id(request),
    )
