from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from .error_codes import ErrorCode
from .errors import WARMING_UP_MESSAGE
from .schemas.errors import ErrorResponse


_EXAMPLES: Dict[int, tuple] = {
    400: ("Bad request", ErrorCode.BAD_REQUEST, "Column 'rating' must contain finite values.", None),
    404: ("Not found", ErrorCode.NOT_FOUND, "Catalog item 404 not found", None),
    422: (
        "Validation error",
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        {
            "errors": [
                {
                    "loc": ["path", "user_id"],
                    "msg": "Input should be a valid integer, unable to parse string as an integer",
                    "type": "int_parsing",
                }
            ]
        },
    ),
    500: ("Internal server error", ErrorCode.INTERNAL_ERROR, "Internal Server Error", None),
    503: ("Service not ready", ErrorCode.SERVICE_UNAVAILABLE, WARMING_UP_MESSAGE, None),
}


def _error_example(
    *,
    code: ErrorCode,
    message: str,
    request_id: str = "7b2b5a2c4f3a4e1fb7f4f44c9c1c2c9a",
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a canonical error example matching the runtime error envelope.
    """
    return {
        "error": {
            "code": code.value,
            "message": message,
            "request_id": request_id,
            "details": details,
        }
    }


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    OpenAPI `responses=` entries for the given status codes.

    Central source of truth for error documentation; 422, 500 and 503 are
    always included because every route can produce them.
    """
    codes: Iterable[int] = sorted({*status_codes, 422, 500, 503})
    responses: Dict[int, Dict[str, Any]] = {}
    for status_code in codes:
        description, code, message, details = _EXAMPLES[status_code]
        responses[status_code] = {
            "model": ErrorResponse,
            "description": description,
            "content": {
                "application/json": {
                    "example": _error_example(code=code, message=message, details=details)
                }
            },
        }
    return responses
