"""
Pydantic schemas for authentication endpoints.

WHY: Schemas define request/response contracts, providing:
1. Automatic validation of request data
2. API documentation (OpenAPI/Swagger)
3. Type safety
4. Clear separation between API and database models
"""

from pydantic import BaseModel, EmailStr, Field

from helpdesk.models.user import UserRole


class LoginRequest(BaseModel):
    """
    Login request schema.

    WHY: Only presence is checked here; a short or wrong password gets the
    same 401 as an unknown email, so login does not leak which part failed.
    """

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User's password",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "email": "client@example.com",
                "password": "SecurePassword123!",
            }
        }


class UserResponse(BaseModel):
    """
    User response schema.

    WHY: Returns user data without sensitive information (no password hash).
    """

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    full_name: str = Field(..., description="User's full name")
    role: UserRole = Field(..., description="client, consultant or admin")

    class Config:
        from_attributes = True  # Enable ORM mode for SQLAlchemy models
        json_schema_extra = {
            "example": {
                "id": 1,
                "email": "client@example.com",
                "full_name": "Jane Client",
                "role": "client",
            }
        }


class TokenResponse(BaseModel):
    """
    Login response schema.

    WHY: Returns the access token together with the user it was issued to,
    so the frontend can render the session without a second request.
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(
        default="bearer",
        description="Token type (always 'bearer' for JWT)",
    )
    user: UserResponse = Field(..., description="Authenticated user")


class RegisterRequest(BaseModel):
    """
    User registration request schema.

    WHY: Validates registration data:
    1. Email format validation
    2. Password length (min 8 chars)
    3. Role limited to the known set (defaults to client)
    """

    email: EmailStr = Field(
        ...,
        description="User's email address (must be unique)",
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=100,
        description="Password (min 8 characters)",
    )
    full_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's full name",
    )
    role: UserRole = Field(
        default=UserRole.CLIENT,
        description="Account role",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "email": "client@example.com",
                "password": "SecurePassword123!",
                "full_name": "Jane Client",
            }
        }


class CallerResponse(BaseModel):
    """Identity carried by the presented token."""

    user_id: int = Field(..., description="User ID")
    email: str = Field(..., description="Email at token issue time")
    role: UserRole = Field(..., description="Role at token issue time")
