"""Request context middleware and bearer-token authentication.

RequestContextMiddleware:
- assigns a request id (X-Request-ID header or a fresh uuid4) and stores it
  in a ContextVar so any downstream code can call get_request_id()
- binds request_id/method/path into structlog's contextvars
- wraps the request in a span
- turns any exception that escaped the app into a logged 500 response

require_user_id is a FastAPI dependency for protected routes; it verifies
the Authorization header and yields the authenticated user id.
"""

import time
import uuid
from contextvars import ContextVar

import structlog
from fastapi import Header, HTTPException, Request, status
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from core.security import InvalidTokenError, decode_token

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

# ---------------------------------------------------------------------------
# Context variable holding the request id (task-local)
# ---------------------------------------------------------------------------

_request_id: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Return the id of the request being handled ("" outside a request)."""
    return _request_id.get()


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id, structured log context, tracing span and failure recovery."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        token = _request_id.set(request_id)
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start = time.perf_counter()
        try:
            with tracer.start_as_current_span(f"HTTP {request.method} {request.url.path}") as span:
                try:
                    response = await call_next(request)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, "Unhandled exception"))
                    logger.exception("request.unhandled_exception")
                    response = JSONResponse(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"error": "Internal Server Error"},
                    )
                span.set_attribute("http.status_code", response.status_code)

            response.headers["X-Request-ID"] = request_id
            logger.info(
                "request.completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")
            _request_id.reset(token)


# ---------------------------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------------------------

async def require_user_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> int:
    """Resolve the user id from ``Authorization: Bearer <token>``."""
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format",
        )

    secret = request.app.state.config.auth.secret
    try:
        claims = decode_token(token.strip(), secret)
    except InvalidTokenError as exc:
        logger.info("auth.rejected", reason=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc

    structlog.contextvars.bind_contextvars(user_id=claims.user_id)
    return claims.user_id
