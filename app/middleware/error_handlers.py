"""
Exception handling and request logging middleware for the Scholarship Matcher API
"""
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.exceptions import ScholarshipMatcherError, map_to_http_exception
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


def build_error_response(
    request_id: str,
    status_code: int,
    detail: Any,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """Create the standard error envelope"""

    if isinstance(detail, str):
        detail = {"error": detail, "message": detail}
    elif not isinstance(detail, dict):
        detail = {"error": str(detail), "message": str(detail)}

    error_response = {
        "success": False,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "status_code": status_code,
        **detail
    }

    return JSONResponse(
        status_code=status_code,
        content=error_response,
        headers={**(headers or {}), "X-Request-ID": request_id}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404, 405) rendered in the standard envelope"""
    request_id = getattr(request.state, 'request_id', str(uuid.uuid4()))
    detail = exc.detail
    if isinstance(detail, str):
        detail = detail.capitalize()

    logger.warning(
        f"HTTP exception in {request.method} {request.url.path}: {exc.detail}",
        extra={"request_id": request_id, "status_code": exc.status_code}
    )
    return build_error_response(request_id, exc.status_code, detail, headers=getattr(exc, "headers", None))


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and turns exceptions into error envelopes"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else "unknown"
            }
        )

        try:
            response = await call_next(request)

            logger.info(
                f"Request completed: {request.method} {request.url.path} - {response.status_code}",
                extra={
                    "request_id": request_id,
                    "status_code": response.status_code
                }
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except ScholarshipMatcherError as exc:
            http_exc = map_to_http_exception(exc)
            log = logger.warning if http_exc.status_code < 500 else logger.error
            log(
                f"{exc.__class__.__name__} in {request.method} {request.url.path}: {exc.message}",
                extra={
                    "request_id": request_id,
                    "status_code": http_exc.status_code,
                    "error": exc.to_dict()
                },
                exc_info=exc.cause if http_exc.status_code >= 500 and exc.cause else None
            )
            return build_error_response(request_id, http_exc.status_code, http_exc.detail)

        except Exception as exc:
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
                extra={
                    "request_id": request_id,
                    "exception_type": exc.__class__.__name__,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            # Never expose internal errors to the client
            error_detail = {
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later."
            }
            return build_error_response(request_id, 500, error_detail)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.debug(
            f"Request details: {request.method} {request.url}",
            extra={
                "request_id": request_id,
                "content_length": request.headers.get("content-length"),
                "forwarded_for": request.headers.get("x-forwarded-for"),
                "user_agent": request.headers.get("user-agent")
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.time() - start_time
            logger.debug(
                f"Request failed: {request.method} {request.url.path} after {processing_time:.3f}s",
                extra={"request_id": request_id, "exception": str(exc)}
            )
            raise

        processing_time = time.time() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} - {response.status_code} in {processing_time:.3f}s",
            extra={"request_id": request_id, "status_code": response.status_code}
        )
        return response


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Flags slow requests and reports processing time in a header"""

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = getattr(request.state, 'request_id', 'unknown')

        response = await call_next(request)

        processing_time = time.time() - start_time
        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} took {processing_time:.3f}s",
                extra={
                    "request_id": request_id,
                    "threshold": self.slow_request_threshold
                }
            )

        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response
