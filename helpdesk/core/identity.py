"""
Caller identity resolved from a verified bearer token.

WHAT: The (user_id, email, role) triple every ticket operation is
evaluated against.

WHY: Building the context purely from verified claims keeps identity
resolution side-effect free: no database read happens before the access
policy is consulted.
"""

from dataclasses import dataclass
from typing import Any, Dict

from helpdesk.core.exceptions import TokenInvalidError
from helpdesk.models.user import UserRole


@dataclass(frozen=True)
class CallerContext:
    """
    Authenticated caller.

    Fields:
    - user_id: Primary key of the user the token was issued to
    - email: Email at the time the token was issued
    - role: Role at the time the token was issued
    """

    user_id: int
    email: str
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    def to_claims(self) -> Dict[str, Any]:
        """Claims to embed in an access token for this caller."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "role": self.role.value,
        }

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "CallerContext":
        """
        Build a context from decoded token claims.

        Raises:
            TokenInvalidError: If a claim is missing or the role is unknown
        """
        user_id = claims.get("user_id")
        email = claims.get("email")
        role = claims.get("role")

        if not isinstance(user_id, int) or not email or not role:
            raise TokenInvalidError(message="Invalid token: missing claims")

        try:
            parsed_role = UserRole(role)
        except ValueError:
            raise TokenInvalidError(message="Invalid token: unknown role")

        return cls(user_id=user_id, email=email, role=parsed_role)
