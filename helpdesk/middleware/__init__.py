"""
Middleware package.

WHY: Middleware provides cross-cutting concerns like request correlation
and request logging that apply to all requests.
"""

from helpdesk.middleware.request_context import (
    RequestContextMiddleware,
    RequestIdLogFilter,
    get_request_context,
    get_client_ip,
    get_user_agent,
    RequestContext,
)

__all__ = [
    "RequestContextMiddleware",
    "RequestIdLogFilter",
    "get_request_context",
    "get_client_ip",
    "get_user_agent",
    "RequestContext",
]
