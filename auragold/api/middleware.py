"""
API middleware for AuraGold Clinic.

Provides:
- Rate limiting
- Request logging tagged with request id and staff session phase
- Global error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response, HTTPException
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from auragold.models.schemas import ErrorResponse
from auragold.services.session_guard import session_guard
from auragold.utils.logger import get_logger

logger = get_logger("middleware")


# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)


def error_response(status_code: int, error: str, message: str, error_code: str) -> JSONResponse:
    """JSON body shaped like ErrorResponse."""
    body = ErrorResponse(error=error, message=message, error_code=error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging.

    Each request gets an id bound into the structlog context, so service
    log lines emitted while handling it carry the same id. The staff
    session phase is read once before and once after the handler; a
    change between the two (login, logout, expiry) shows up in the
    completion event. Request bodies are never logged since they may
    carry passcodes or patient conditions.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        phase_before = session_guard.phase.value

        logger.info(
            "Request received",
            method=request.method,
            path=request.url.path,
            client_ip=get_remote_address(request),
            session_phase=phase_before
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                process_time_ms=self._elapsed_ms(start_time)
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        phase_after = session_guard.phase.value
        logger.info(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            session_phase=phase_after,
            session_changed=phase_after != phase_before,
            process_time_ms=self._elapsed_ms(start_time)
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Session-Phase"] = phase_after
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts unhandled exceptions into ErrorResponse bodies. Stack traces
    go to the log only.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)

        except HTTPException:
            raise

        except ValueError as e:
            logger.warning("Validation error", path=request.url.path, error=str(e))
            return error_response(400, "Validation Error", str(e), "VALIDATION_ERROR")

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                error=str(e),
                exc_info=True
            )
            return error_response(
                500,
                "Internal Server Error",
                "An unexpected error occurred. Please try again.",
                "INTERNAL_ERROR"
            )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client_ip=get_remote_address(request),
        limit=str(exc.detail)
    )
    return error_response(
        429,
        "Rate Limit Exceeded",
        "Too many requests. Please wait before trying again.",
        "RATE_LIMIT_EXCEEDED"
    )


def setup_rate_limiting(app) -> None:
    """Setup rate limiting on the application."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
