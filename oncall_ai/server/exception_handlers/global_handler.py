"""
Global Exception Handlers for FastAPI Application.

Domain errors from the agent service are mapped to client errors. Anything
else is logged with an error ID, request context and full traceback.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from oncall_ai.agent_core.errors import (
    ApprovalExpiredError,
    OncallAIError,
    RunNotFoundError,
    RunNotPausedError,
)
from oncall_ai.core.logging_config import get_logger

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: OncallAIError) -> JSONResponse:
    """
    Map agent service errors to HTTP status codes.

    - ``RunNotFoundError`` -> 404
    - ``RunNotPausedError`` and ``ApprovalExpiredError`` -> 400
    """
    status_code = 404 if isinstance(exc, RunNotFoundError) else 400
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    content = {"detail": str(exc), "error_type": type(exc).__name__}
    if isinstance(exc, (RunNotFoundError, RunNotPausedError, ApprovalExpiredError)):
        content["run_id"] = exc.run_id
    return JSONResponse(status_code=status_code, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(OncallAIError, domain_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
