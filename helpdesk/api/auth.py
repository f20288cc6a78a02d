"""
Authentication API endpoints.

WHY: These endpoints provide the authentication flow:
1. Register - Create a user with a bcrypt password hash
2. Login - Authenticate user and return JWT token
3. Me - Echo the identity carried by the presented token

Security:
- Passwords are compared using constant-time comparison (bcrypt)
- Generic error messages prevent user enumeration attacks
- Failed logins are logged at WARNING
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.auth import verify_password, create_access_token, hash_password
from helpdesk.core.deps import get_current_caller
from helpdesk.core.exceptions import AuthenticationError
from helpdesk.core.identity import CallerContext
from helpdesk.db.session import get_db
from helpdesk.dao.user import UserDAO
from helpdesk.schemas.auth import (
    LoginRequest,
    TokenResponse,
    UserResponse,
    RegisterRequest,
    CallerResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create a user account. Role defaults to client.",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Register a new user.

    Raises:
        ResourceAlreadyExistsError (409): If the email is already registered
    """
    user_dao = UserDAO(db)
    user = await user_dao.create_user(
        email=data.email,
        hashed_password=hash_password(data.password),
        full_name=data.full_name,
        role=data.role,
    )
    logger.info("User %s registered with role %s", user.id, user.role.value)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Login user",
    description="Authenticate user with email and password, returns JWT token",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Authenticate user and return JWT access token.

    WHY: This endpoint:
    1. Validates user credentials (email + password)
    2. Generates JWT token carrying user_id, email and role
    3. Returns token and user for the frontend session

    Raises:
        AuthenticationError (401): If credentials are invalid
    """
    user_dao = UserDAO(db)
    user = await user_dao.get_by_email(credentials.email)

    # WHY: Same message for unknown email and wrong password
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login for %s", credentials.email)
        raise AuthenticationError(message="Invalid email or password")

    # Identity is rebuilt from these claims on every request, no DB read
    caller = CallerContext(user_id=user.id, email=user.email, role=user.role)
    access_token = create_access_token(caller.to_claims())

    logger.info("User %s logged in", user.id)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/me",
    response_model=CallerResponse,
    summary="Current caller",
    description="Return the identity carried by the bearer token",
)
async def get_current_caller_info(
    caller: CallerContext = Depends(get_current_caller),
) -> CallerResponse:
    """Return user_id, email and role from the verified token."""
    return CallerResponse(user_id=caller.user_id, email=caller.email, role=caller.role)
