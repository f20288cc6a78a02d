"""
FastAPI dependencies for authentication and authorization.

WHY: Dependencies provide reusable authentication and authorization logic
that can be injected into route handlers, ensuring every ticket route
resolves the caller and its access policy the same way.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from helpdesk.core.auth import verify_token
from helpdesk.core.exceptions import AuthenticationError
from helpdesk.core.identity import CallerContext


# HTTP Bearer token security scheme
# WHY: auto_error=False lets us answer a missing header with our own 401
# body instead of FastAPI's default 403.
security = HTTPBearer(auto_error=False)


async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CallerContext:
    """
    Resolve the authenticated caller from the bearer token.

    WHY: This dependency:
    1. Extracts token from Authorization header
    2. Verifies token signature and expiration
    3. Builds the caller context from the verified claims

    Usage:
        @router.get("/tickets")
        async def list_tickets(caller: CallerContext = Depends(get_current_caller)):
            ...

    Returns:
        CallerContext for the request

    Raises:
        AuthenticationError (401): If no bearer token was sent
        TokenInvalidError (403): If the token is malformed or its claims are unusable
        TokenExpiredError (403): If the token has expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Access denied")

    payload = verify_token(credentials.credentials)
    return CallerContext.from_claims(payload)
