"""
User Data Access Object.

WHY: UserDAO provides database operations for the User model: lookups for
login, registration with duplicate detection, and the staff directory used
when assigning tickets.
"""

from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.dao.base import BaseDAO
from helpdesk.models.user import User, UserRole, STAFF_ROLES
from helpdesk.core.exceptions import ResourceAlreadyExistsError


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Case-insensitive comparison prevents duplicate accounts with
        different casing (user@example.com vs USER@EXAMPLE.COM).

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if email already exists in database."""
        result = await self.session.execute(
            select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        full_name: str,
        role: UserRole = UserRole.CLIENT,
    ) -> User:
        """
        Create a new user.

        Args:
            email: User's email address
            hashed_password: Already hashed password (use hash_password())
            full_name: User's display name
            role: User role

        Returns:
            Created User instance

        Raises:
            ResourceAlreadyExistsError: If email already exists

        Example:
            >>> from helpdesk.core.auth import hash_password
            >>> user = await user_dao.create_user(
            ...     email="user@example.com",
            ...     hashed_password=hash_password("SecurePassword123!"),
            ...     full_name="John Doe",
            ... )
        """
        if await self.email_exists(email):
            raise ResourceAlreadyExistsError(
                message="Email already exists",
                resource_type="User",
            )

        return await self.create(
            email=email,
            hashed_password=hashed_password,
            full_name=full_name,
            role=role,
        )

    async def list_staff(self) -> List[User]:
        """
        List consultants and admins, the users tickets can be assigned to.

        Returns:
            Users ordered by full name
        """
        result = await self.session.execute(
            select(User)
            .where(User.role.in_(STAFF_ROLES))
            .order_by(User.full_name.asc(), User.id.asc())
        )
        return list(result.scalars().all())

    async def get_staff_member(self, user_id: int) -> Optional[User]:
        """Return the user if they exist and hold a staff role."""
        result = await self.session.execute(
            select(User).where(User.id == user_id, User.role.in_(STAFF_ROLES))
        )
        return result.scalar_one_or_none()
