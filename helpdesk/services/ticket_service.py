"""
Ticket Service.

WHAT: Business logic for the ticket lifecycle.

WHY: The service layer:
1. Resolves the caller's access policy once per operation
2. Coordinates TicketDAO, TicketCommentDAO and UserDAO
3. Enforces business rules (staff-only triage, assignee must be staff)
4. Feeds the dashboard from the same scope used for listing

HOW: Routes pass the CallerContext and parsed schemas; the service returns
ORM instances with the relationships the response schemas need.
"""

import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.exceptions import (
    TicketNotFoundError,
    ValidationError,
)
from helpdesk.core.identity import CallerContext
from helpdesk.core.policy import policy_for, scope_for
from helpdesk.dao.ticket import TicketDAO, TicketCommentDAO
from helpdesk.dao.user import UserDAO
from helpdesk.models.ticket import Ticket, TicketComment
from helpdesk.schemas.ticket import TicketCreate, TicketUpdate
from helpdesk.services.ticket_update import build_ticket_mutation

logger = logging.getLogger(__name__)


class TicketService:
    """
    Service for ticket operations.

    WHAT: Create, read, triage and discuss tickets, and count them.

    HOW: Every public method takes the caller first and consults
    its scope or policy before touching the store.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize TicketService.

        Args:
            session: Async database session
        """
        self.session = session
        self.ticket_dao = TicketDAO(session)
        self.comment_dao = TicketCommentDAO(session)
        self.user_dao = UserDAO(session)

    async def create_ticket(self, caller: CallerContext, data: TicketCreate) -> Ticket:
        """
        Submit a ticket owned by the caller.

        Raises:
            ValidationError: If title or description is blank
        """
        ticket = await self.ticket_dao.create(
            client_id=caller.user_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            category=data.category,
        )
        logger.info(
            "Ticket %s created by user %s (priority=%s)",
            ticket.id,
            caller.user_id,
            ticket.priority.value,
        )
        return ticket

    async def list_tickets(self, caller: CallerContext) -> List[Ticket]:
        """List every ticket the caller may see, newest first."""
        scope = scope_for(caller)
        return await self.ticket_dao.list(scope)

    async def get_ticket(self, caller: CallerContext, ticket_id: int) -> Ticket:
        """
        Get one ticket within the caller's scope.

        Raises:
            TicketNotFoundError: If the ticket does not exist or is outside
                the caller's scope
        """
        scope = scope_for(caller)
        ticket = await self.ticket_dao.get_by_id(ticket_id, scope=scope)
        if ticket is None:
            raise TicketNotFoundError(ticket_id=ticket_id)
        return ticket

    async def update_ticket(
        self,
        caller: CallerContext,
        ticket_id: int,
        patch: TicketUpdate,
    ) -> Ticket:
        """
        Apply a partial update.

        WHAT: Staff-only change of status, priority, assignee and
        resolution notes.

        Args:
            caller: Authenticated caller
            ticket_id: Ticket to update
            patch: Sparse update; absent fields stay unchanged

        Returns:
            Updated ticket

        Raises:
            AuthorizationError: If the caller is a client
            ValidationError: If assigned_to is not a consultant or admin
            TicketNotFoundError: If the ticket does not exist
        """
        policy_for(caller.role).ensure_can_manage(caller)

        # Missing ticket wins over a bad assignee
        if not await self.ticket_dao.exists(ticket_id):
            raise TicketNotFoundError(ticket_id=ticket_id)

        if "assigned_to" in patch.model_fields_set and patch.assigned_to is not None:
            assignee = await self.user_dao.get_staff_member(patch.assigned_to)
            if assignee is None:
                raise ValidationError(
                    message="assigned_to must reference a consultant or admin",
                    field="assigned_to",
                    value=patch.assigned_to,
                )

        values = build_ticket_mutation(patch)
        ticket = await self.ticket_dao.apply_update(ticket_id, values)

        changed = sorted(k for k in values if k not in ("updated_at", "closed_at"))
        logger.info(
            "Ticket %s updated by user %s (fields=%s)",
            ticket_id,
            caller.user_id,
            ",".join(changed) or "-",
        )
        if "status" in values and ticket.is_closed:
            logger.info("Ticket %s closed at %s", ticket_id, ticket.closed_at)
        return ticket

    async def list_comments(self, caller: CallerContext, ticket_id: int) -> List[TicketComment]:
        """
        List a visible ticket's comments, oldest first.

        Raises:
            TicketNotFoundError: If the ticket is missing or not visible
        """
        await self._ensure_visible(caller, ticket_id)
        return await self.comment_dao.list_for_ticket(ticket_id)

    async def add_comment(
        self,
        caller: CallerContext,
        ticket_id: int,
        comment_text: str,
    ) -> TicketComment:
        """
        Append a comment to a visible ticket.

        Raises:
            TicketNotFoundError: If the ticket is missing or not visible
            ValidationError: If the text is blank
        """
        await self._ensure_visible(caller, ticket_id)
        comment = await self.comment_dao.create(
            ticket_id=ticket_id,
            author_id=caller.user_id,
            comment_text=comment_text,
        )
        logger.info("Comment %s added to ticket %s by user %s", comment.id, ticket_id, caller.user_id)
        return comment

    async def get_dashboard_stats(self, caller: CallerContext) -> Dict[str, int]:
        """
        Count the caller's visible tickets by status.

        WHY: Uses the same scope as list_tickets(), so the counters always
        add up to what the caller can enumerate.
        """
        scope = scope_for(caller)
        return await self.ticket_dao.get_status_summary(scope)

    async def _ensure_visible(self, caller: CallerContext, ticket_id: int) -> None:
        scope = scope_for(caller)
        if not await self.ticket_dao.exists(ticket_id, scope=scope):
            raise TicketNotFoundError(ticket_id=ticket_id)
