"""
Unit tests for User DAO.

WHY: Login relies on case-insensitive email lookup, registration on
duplicate detection, and assignment on the staff directory.
"""

import pytest

from helpdesk.core.auth import hash_password
from helpdesk.core.exceptions import ResourceAlreadyExistsError
from helpdesk.dao.user import UserDAO
from helpdesk.models.user import UserRole
from tests.factories import UserFactory


class TestUserDAO:

    @pytest.mark.asyncio
    async def test_create_user(self, db_session):
        user = await UserDAO(db_session).create_user(
            email="new@example.com",
            hashed_password=hash_password("SecurePassword123!"),
            full_name="New User",
        )

        assert user.id is not None
        assert user.role == UserRole.CLIENT
        assert user.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, db_session, client_user):
        with pytest.raises(ResourceAlreadyExistsError):
            await UserDAO(db_session).create_user(
                email=client_user.email.upper(),
                hashed_password="x",
                full_name="Dup",
            )

    @pytest.mark.asyncio
    async def test_get_by_email_ignores_case(self, db_session, client_user):
        found = await UserDAO(db_session).get_by_email("CLIENT@Example.com")

        assert found.id == client_user.id

    @pytest.mark.asyncio
    async def test_get_by_email_missing(self, db_session):
        assert await UserDAO(db_session).get_by_email("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_list_staff(self, db_session, client_user):
        zed = await UserFactory.create_consultant(db_session, full_name="Zed Consultant")
        amy = await UserFactory.create_admin(db_session, full_name="Amy Admin")

        staff = await UserDAO(db_session).list_staff()

        assert [u.id for u in staff] == [amy.id, zed.id]

    @pytest.mark.asyncio
    async def test_get_staff_member(self, db_session, client_user, consultant):
        dao = UserDAO(db_session)

        assert (await dao.get_staff_member(consultant.id)).id == consultant.id
        assert await dao.get_staff_member(client_user.id) is None
        assert await dao.get_staff_member(999) is None

    @pytest.mark.asyncio
    async def test_exists(self, db_session, client_user):
        dao = UserDAO(db_session)

        assert await dao.exists(client_user.id) is True
        assert await dao.exists(999) is False
