# apps/api/app/error_codes.py
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Machine-readable `error.code` values of the error envelope.

    Clients branch on these, never on `error.message`.
    """

    # Domain rejection of a bulk-load payload (store left unchanged)
    BAD_REQUEST = "BAD_REQUEST"
    # Unknown catalog item
    NOT_FOUND = "NOT_FOUND"
    # Request did not match the route's schema (path, query or body)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    # Bootstrap has not finished, or failed
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    # Any other HTTP status raised by the framework (405, ...)
    HTTP_ERROR = "HTTP_ERROR"
