"""
Request context middleware.

WHAT: Assigns every request an ID, captures who sent it, and logs how it
ended.

WHY: One line per request with method, path, status, duration and request
ID is the minimum needed to trace a support complaint back to the server
log. The same request ID is echoed to the client in X-Request-ID.

HOW: A ContextVar holds the RequestContext for the current task, so the
log filter below can stamp request_id on records emitted by services and
DAOs that never see the Request object.
"""

import logging
import re
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Inbound IDs are echoed into headers and logs, so keep them short and plain
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


@dataclass(frozen=True)
class RequestContext:
    """
    Request-scoped context data.

    Fields:
    - request_id: Inbound X-Request-ID if well formed, else a new UUID4
    - ip_address: Client's real IP (considering proxies)
    - user_agent: Client's browser/application identifier
    - path: Request path
    - method: HTTP method
    """

    request_id: str
    ip_address: str
    user_agent: Optional[str]
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the current request context.

    Returns:
        RequestContext if within a request, None otherwise
    """
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Extract the real client IP address from a request.

    HOW: Checks headers in order of trust:
    1. X-Real-IP (set by nginx)
    2. X-Forwarded-For (first entry is the original client)
    3. request.client.host (direct connection IP)

    Security Note:
        These headers can be spoofed by clients if not behind a trusted proxy.
    """
    x_real_ip = request.headers.get("X-Real-IP")
    if x_real_ip:
        return x_real_ip.strip()

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_user_agent(request: Request) -> Optional[str]:
    """Return the User-Agent header, if any."""
    return request.headers.get("User-Agent")


def resolve_request_id(request: Request) -> str:
    """
    Reuse the caller's request ID when it is safe to echo, else mint one.

    WHY: A reverse proxy that already tagged the request keeps one ID
    across both logs.
    """
    inbound = request.headers.get(REQUEST_ID_HEADER)
    if inbound and _VALID_REQUEST_ID.match(inbound):
        return inbound
    return str(uuid.uuid4())


class RequestIdLogFilter(logging.Filter):
    """Stamp request_id on every log record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _request_context.get()
        record.request_id = context.request_id if context else "-"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures request context and logs the outcome.

    HOW: Stores context in both:
    - request.state.context (for handlers)
    - a ContextVar (for services, DAOs and the log filter)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add context.

        Returns:
            Response with X-Request-ID header added
        """
        context = RequestContext(
            request_id=resolve_request_id(request),
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = context.request_id
            logger.info(
                "%s %s -> %s (%.1f ms) from %s",
                context.method,
                context.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
                context.ip_address,
            )
            return response
        finally:
            _request_context.reset(token)
