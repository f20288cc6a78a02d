"""
Integration tests for ticket management API.

WHAT: Tests for ticket operations via HTTP API.

WHY: Tickets are the core of the helpdesk. These tests ensure:
1. Clients can submit tickets and only ever see their own
2. Consultants and admins can triage with partial updates
3. Invalid input gets 400 with a stable error kind
4. Missing or malformed credentials are rejected before anything else

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from datetime import datetime
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import TicketFactory
from helpdesk.models.ticket import TicketStatus, TicketPriority


class TestTicketCreate:
    """Integration tests for ticket creation endpoint."""

    @pytest.mark.asyncio
    async def test_create_ticket_as_client(
        self, client: AsyncClient, client_user, client_headers
    ):
        """
        Test creating a ticket as a client.

        WHY: The owner is always the caller and defaults are applied.
        """
        response = await client.post(
            "/api/tickets",
            headers=client_headers,
            json={
                "title": "Login not working",
                "description": "I cannot log in to the portal.",
                "priority": "high",
                "category": "bug",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Login not working"
        assert data["status"] == "open"
        assert data["priority"] == "high"
        assert data["category"] == "bug"
        assert data["client_id"] == client_user.id
        assert data["client_name"] == client_user.full_name
        assert data["assigned_to"] is None
        assert data["closed_at"] is None

    @pytest.mark.asyncio
    async def test_create_ticket_defaults(self, client: AsyncClient, client_headers):
        response = await client.post(
            "/api/tickets",
            headers=client_headers,
            json={"title": "Question", "description": "How do I reset my password?"},
        )

        assert response.status_code == 201
        assert response.json()["priority"] == "medium"
        assert response.json()["category"] == "general"

    @pytest.mark.asyncio
    async def test_create_ticket_without_auth(self, client: AsyncClient):
        """
        Test creating a ticket without a token.

        WHY: No credential is 401, distinct from a bad credential.
        """
        response = await client.post(
            "/api/tickets",
            json={"title": "x", "description": "y"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_create_ticket_with_bad_token(self, client: AsyncClient):
        response = await client.post(
            "/api/tickets",
            headers={"Authorization": "Bearer not-a-token"},
            json={"title": "x", "description": "y"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "TokenInvalidError"

    @pytest.mark.asyncio
    async def test_create_ticket_invalid_priority(self, client: AsyncClient, client_headers):
        response = await client.post(
            "/api/tickets",
            headers=client_headers,
            json={"title": "x", "description": "y", "priority": "urgent"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidEnumValueError"

    @pytest.mark.asyncio
    async def test_create_ticket_missing_title(self, client: AsyncClient, client_headers):
        response = await client.post(
            "/api/tickets",
            headers=client_headers,
            json={"description": "y"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_create_ticket_blank_title(self, client: AsyncClient, client_headers):
        response = await client.post(
            "/api/tickets",
            headers=client_headers,
            json={"title": "   ", "description": "y"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestTicketList:
    """Integration tests for ticket listing endpoint."""

    @pytest.mark.asyncio
    async def test_client_sees_only_own_tickets(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        other_client,
        client_headers,
    ):
        """
        Test role scoping of the list.

        WHY: A client must never enumerate another client's tickets.
        """
        mine = await TicketFactory.create(db_session, client=client_user)
        await TicketFactory.create(db_session, client=other_client)

        response = await client.get("/api/tickets", headers=client_headers)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [mine.id]

    @pytest.mark.asyncio
    async def test_consultant_sees_all_newest_first(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        other_client,
        consultant_headers,
    ):
        first = await TicketFactory.create(db_session, client=client_user)
        second = await TicketFactory.create(db_session, client=other_client)

        response = await client.get("/api/tickets", headers=consultant_headers)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_includes_names(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        consultant,
        admin_headers,
    ):
        await TicketFactory.create(db_session, client=client_user, assignee=consultant)

        [ticket] = (await client.get("/api/tickets", headers=admin_headers)).json()

        assert ticket["client_name"] == client_user.full_name
        assert ticket["assigned_to_name"] == consultant.full_name


class TestTicketGet:
    """Integration tests for single-ticket reads."""

    @pytest.mark.asyncio
    async def test_owner_can_read(
        self, client: AsyncClient, db_session: AsyncSession, client_user, client_headers
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.get(f"/api/tickets/{ticket.id}", headers=client_headers)

        assert response.status_code == 200
        assert response.json()["id"] == ticket.id

    @pytest.mark.asyncio
    async def test_other_client_gets_not_found(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        other_client_headers,
    ):
        """
        Test reading another client's ticket.

        WHY: 404 rather than 403, so ticket ids cannot be probed.
        """
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.get(f"/api/tickets/{ticket.id}", headers=other_client_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "TicketNotFoundError"

    @pytest.mark.asyncio
    async def test_missing_ticket(self, client: AsyncClient, consultant_headers):
        response = await client.get("/api/tickets/99999", headers=consultant_headers)

        assert response.status_code == 404


class TestTicketUpdate:
    """Integration tests for partial updates."""

    @pytest.mark.asyncio
    async def test_consultant_closes_ticket(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        consultant,
        consultant_headers,
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"status": "closed", "resolution_notes": "Reset the account"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "closed"
        assert data["resolution_notes"] == "Reset the account"
        assert data["closed_at"] is not None
        assert datetime.fromisoformat(data["closed_at"]) >= datetime.fromisoformat(data["created_at"])

    @pytest.mark.asyncio
    async def test_priority_only_leaves_other_fields(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        consultant,
        admin_headers,
    ):
        ticket = await TicketFactory.create(
            db_session,
            client=client_user,
            status=TicketStatus.IN_PROGRESS,
            assignee=consultant,
            resolution_notes="Investigating",
        )

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=admin_headers,
            json={"priority": "high"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["priority"] == TicketPriority.HIGH.value
        assert data["status"] == "in_progress"
        assert data["assigned_to"] == consultant.id
        assert data["resolution_notes"] == "Investigating"

    @pytest.mark.asyncio
    async def test_empty_body_is_accepted(
        self, client: AsyncClient, db_session: AsyncSession, client_user, consultant_headers
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}", headers=consultant_headers, json={}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "open"

    @pytest.mark.asyncio
    async def test_null_assigned_to_unassigns(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        consultant,
        consultant_headers,
    ):
        ticket = await TicketFactory.create(db_session, client=client_user, assignee=consultant)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"assigned_to": None},
        )

        assert response.status_code == 200
        assert response.json()["assigned_to"] is None
        assert response.json()["assigned_to_name"] is None

    @pytest.mark.asyncio
    async def test_client_cannot_update(
        self, client: AsyncClient, db_session: AsyncSession, client_user, client_headers
    ):
        """
        Test a client updating their own ticket.

        WHY: Triage fields are staff-only, even for the owner.
        """
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=client_headers,
            json={"status": "closed"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "AuthorizationError"

    @pytest.mark.asyncio
    async def test_update_missing_ticket(self, client: AsyncClient, consultant_headers):
        response = await client.put(
            "/api/tickets/99999", headers=consultant_headers, json={"priority": "low"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "TicketNotFoundError"

    @pytest.mark.asyncio
    async def test_invalid_status(
        self, client: AsyncClient, db_session: AsyncSession, client_user, consultant_headers
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"status": "archived"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidEnumValueError"

    @pytest.mark.asyncio
    async def test_null_status_rejected(
        self, client: AsyncClient, db_session: AsyncSession, client_user, consultant_headers
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"status": None},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_assign_to_client_rejected(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        client_user,
        consultant_headers,
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"assigned_to": client_user.id},
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "assigned_to"

    @pytest.mark.asyncio
    async def test_missing_ticket_wins_over_bad_assignee(
        self, client: AsyncClient, client_user, consultant_headers
    ):
        response = await client.put(
            "/api/tickets/99999",
            headers=consultant_headers,
            json={"assigned_to": client_user.id},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "TicketNotFoundError"

    @pytest.mark.asyncio
    async def test_assignee_id_beyond_column_range(
        self, client: AsyncClient, db_session: AsyncSession, client_user, consultant_headers
    ):
        ticket = await TicketFactory.create(db_session, client=client_user)

        response = await client.put(
            f"/api/tickets/{ticket.id}",
            headers=consultant_headers,
            json={"assigned_to": 2**31},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestTicketIdRange:
    """Ids no row can hold are plain not-found, never a driver error."""

    HUGE_ID = "99999999999999999999999"

    @pytest.mark.asyncio
    async def test_get(self, client: AsyncClient, consultant_headers):
        response = await client.get(f"/api/tickets/{self.HUGE_ID}", headers=consultant_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "TicketNotFoundError"

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, consultant_headers):
        response = await client.put(
            f"/api/tickets/{self.HUGE_ID}", headers=consultant_headers, json={}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ticket_id", ["0", "-3", str(2**31)])
    async def test_comments(self, client: AsyncClient, client_headers, ticket_id):
        listed = await client.get(f"/api/tickets/{ticket_id}/comments", headers=client_headers)
        posted = await client.post(
            f"/api/tickets/{ticket_id}/comments",
            headers=client_headers,
            json={"comment_text": "hello"},
        )

        assert listed.status_code == 404
        assert posted.status_code == 404

    @pytest.mark.asyncio
    async def test_auth_checked_first(self, client: AsyncClient):
        response = await client.get(f"/api/tickets/{self.HUGE_ID}")

        assert response.status_code == 401
