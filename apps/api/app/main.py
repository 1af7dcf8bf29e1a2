from __future__ import annotations

import asyncio
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError

from course_recommender.bootstrap import bootstrap_service
from course_recommender.logging_utils import configure_logger
from course_recommender.validators import ValidationError

from .error_codes import ErrorCode
from .errors import (
    REQUEST_ID_HEADER,
    error_code_for_status,
    error_response,
    get_request_id,
    service_unavailable,
)
from .routes.catalog import router as catalog_router
from .routes.health import router as health_router
from .routes.legacy import router as legacy_router
from .routes.ratings import router as ratings_router
from .routes.recommendations import router as recommendations_router


logger = configure_logger(__name__)

# Do not gate or emit request completion logs for health endpoints
HEALTHCHECK_PATHS = {"/v1/health", "/v1/ready"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the recommender service before accepting traffic.

    A failed bootstrap (bad configuration, unreachable MongoDB) leaves the
    application running but not ready: every non-health route answers 503.
    """
    app.state.is_ready = False
    app.state.recommender_service = None

    try:
        service = await asyncio.to_thread(bootstrap_service)
    except Exception:
        logger.exception(
            "Bootstrap failed; application will remain not ready",
            extra={"event": "bootstrap.failed"},
        )
    else:
        app.state.recommender_service = service
        app.state.is_ready = True
        logger.info(
            "Bootstrap finished; application marked as ready",
            extra={"event": "bootstrap.ready"},
        )

    yield

    app.state.is_ready = False


app = FastAPI(
    title="Course Recommender API",
    version="0.1.0",
    description="User-based collaborative filtering recommendations for courses",
    lifespan=lifespan,
)

# Ensure readiness flag always exists
if not hasattr(app.state, "is_ready"):
    app.state.is_ready = False


@app.middleware("http")
async def readiness_gate_middleware(request: Request, call_next):
    """
    Global readiness gate:
    - Before app is ready, allow ONLY /v1/health and /v1/ready.
    - All other routes return 503 with the standard error envelope.
    """
    if request.url.path in HEALTHCHECK_PATHS:
        return await call_next(request)

    if not bool(getattr(request.app.state, "is_ready", False)):
        return service_unavailable(request)

    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Attach a request id and emit structured lifecycle logs.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id

    start = time.perf_counter()
    response = None

    try:
        response = await call_next(request)
        return response

    finally:
        duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
        path = request.url.path

        if path not in HEALTHCHECK_PATHS:
            logger.info(
                "Request completed",
                extra={
                    "event": "request.completed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                },
            )

        if response is not None:
            response.headers[REQUEST_ID_HEADER] = request_id


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = get_request_id(request)

    logger.warning(
        "Request validation failed",
        extra={
            "event": "request.validation_error",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "code": ErrorCode.VALIDATION_ERROR.value,
        },
    )

    # Offending inputs are left out: they may not be JSON-serialisable (NaN).
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]

    return error_response(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        request_id=request_id,
        details={"errors": errors},
    )


@app.exception_handler(ValidationError)
async def domain_validation_exception_handler(request: Request, exc: ValidationError):
    request_id = get_request_id(request)

    logger.warning(
        "Payload rejected",
        extra={
            "event": "request.payload_rejected",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "code": ErrorCode.BAD_REQUEST.value,
        },
    )

    return error_response(
        status_code=400,
        code=ErrorCode.BAD_REQUEST,
        message=str(exc),
        request_id=request_id,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    request_id = get_request_id(request)
    code = error_code_for_status(exc.status_code)

    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = exc.detail if isinstance(exc.detail, dict) else None

    logger.info(
        "HTTP exception raised",
        extra={
            "event": "request.http_exception",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": exc.status_code,
            "code": code.value,
        },
    )

    return error_response(
        status_code=exc.status_code,
        code=code,
        message=message,
        request_id=request_id,
        details=details,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = get_request_id(request)

    logger.exception(
        "Unhandled exception",
        extra={
            "event": "error.unhandled_exception",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "code": ErrorCode.INTERNAL_ERROR.value,
        },
    )

    return error_response(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        message="Internal Server Error",
        request_id=request_id,
    )


app.include_router(health_router, prefix="/v1")
app.include_router(ratings_router, prefix="/v1")
app.include_router(catalog_router, prefix="/v1")
app.include_router(recommendations_router, prefix="/v1")
app.include_router(legacy_router)
