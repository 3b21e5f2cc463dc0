"""
AI Value Case Calculation Engine - FastAPI Application

Main entry point for the calculation API.

- Stateless computation endpoints, no persistence
- Rate limiting (can be disabled in test mode)
- Custom exception handling so request values are never echoed back
"""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from valuecase.app.routes import calculate, health


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize rate limiter with test mode bypass
def get_limiter():
    """
    Create rate limiter that can be disabled in test mode.

    Set ENV=TEST or DISABLE_RATE_LIMITS=1 to disable rate limiting.
    """
    disable_limits = (
        os.environ.get("ENV") == "TEST" or
        os.environ.get("DISABLE_RATE_LIMITS") == "1"
    )

    if disable_limits:
        return Limiter(key_func=get_remote_address, enabled=False)
    else:
        return Limiter(key_func=get_remote_address)

limiter = get_limiter()


def sanitize_error_detail(detail) -> dict:
    """
    Return error details safe for the client.

    Dict details are built by our own route handlers and pass through;
    anything else is replaced with a generic message.
    """
    if isinstance(detail, dict):
        return detail

    return {
        "error": "internal_error",
        "message": "An error occurred processing your request"
    }


app = FastAPI(
    title="AI Value Case Calculation Engine",
    description="Deterministic benefit, readiness, priority and projection calculations for AI value cases",
    version=health.ENGINE_VERSION,
    debug=False
)

# Register rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=sanitize_error_detail(exc.detail)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors without echoing the request body.

    Only field paths, error types and messages are returned.
    """
    errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "type": error["type"],
            "message": error["msg"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": errors
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all handler; logs the exception type only."""
    logger.error("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred"
        }
    )


# Register routers
app.include_router(health.router)
app.include_router(calculate.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "AI Value Case Calculation Engine",
        "version": health.ENGINE_VERSION,
        "status": "operational"
    }
