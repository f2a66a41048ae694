"""
HTTP middleware: per-request logging and rate limiting.
"""
import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from wms.core.config import settings
from wms.logging_config import get_logger

logger = get_logger("middleware")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled,
)

# Requests under these prefixes are only logged at DEBUG
QUIET_PATHS = ("/health", settings.storage_public_url)


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and duration of every request.

    Adds ``X-Request-ID`` (echoed if the caller sent one) and
    ``X-Process-Time`` to the response.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        log = logger.debug if request.url.path.startswith(QUIET_PATHS) else logger.info

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.exception(
                f"[{request_id}] {request.method} {request.url.path} from {_client(request)} "
                f"failed after {elapsed:.2f}ms"
            )
            raise

        elapsed = (time.perf_counter() - started) * 1000
        log(
            f"[{request_id}] {request.method} {request.url.path} from {_client(request)} "
            f"-> {response.status_code} in {elapsed:.2f}ms"
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.2f}ms"
        return response


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Render slowapi's limit breach in the service's error format."""
    logger.warning(f"Rate limit hit by {_client(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests, please try again later",
            "details": {"limit": str(exc.detail)},
            "path": request.url.path,
        },
        headers={"Retry-After": "60"},
    )
