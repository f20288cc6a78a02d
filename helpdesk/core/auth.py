"""
Credential primitives: bcrypt password hashes and signed bearer tokens.

WHY: Registration stores only a hash, login compares against it, and every
other endpoint trusts nothing but the claims of a token we signed. Both
concerns live here so the API layer never touches passlib or jose directly.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from jose import jwt, JWTError
from passlib.context import CryptContext

from helpdesk.core.config import settings
from helpdesk.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)


# bcrypt at passlib's default cost; "deprecated" lets old hashes verify
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str) -> str:
    """Return the salted bcrypt hash stored in users.hashed_password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login attempt against the stored hash.

    passlib compares in constant time, so response timing does not reveal
    how much of the password matched.
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# Bearer Tokens
# ============================================================================


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a bearer token for the given claims.

    WHAT: The caller's claims (user_id, email, role) plus exp, iat and nbf.
    Lifetime is JWT_EXPIRATION_MINUTES unless expires_delta is given; tests
    pass a negative delta to mint an already expired token.

    Args:
        data: Caller claims, usually CallerContext.to_claims()
        expires_delta: Lifetime override

    Returns:
        Compact JWS string
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    claims = dict(data)
    claims["iat"] = issued_at
    claims["nbf"] = issued_at
    claims["exp"] = issued_at + lifetime

    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Check signature and time claims, and return the decoded claims.

    Raises:
        TokenExpiredError: exp is in the past
        TokenInvalidError: Anything else jose rejects (garbage, wrong key,
            wrong algorithm, nbf in the future)
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        # jose's reason text stays out of the response
        raise TokenInvalidError()
