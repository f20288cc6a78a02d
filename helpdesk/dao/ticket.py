"""
Ticket Data Access Object.

WHAT: DAO for tickets and their comment threads.

WHY: Encapsulates all ticket database operations with:
1. Role scoping applied through a single TicketScope
2. Atomic single-statement partial updates
3. Status counters computed in one consistent read
4. Comment threads that refuse to list for missing tickets

HOW: Uses SQLAlchemy 2.0 async with proper session management.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from helpdesk.core.exceptions import TicketNotFoundError, ValidationError
from helpdesk.core.policy import TicketScope
from helpdesk.models.base import coerce_enum, utcnow
from helpdesk.models.ticket import (
    Ticket,
    TicketStatus,
    TicketPriority,
    TicketCategory,
    TicketComment,
)


def _require_text(value: Optional[str], field: str) -> str:
    """
    Reject missing, empty and whitespace-only text.

    Raises:
        ValidationError: If the value has no visible characters
    """
    if value is None or not value.strip():
        raise ValidationError(message=f"{field} is required", field=field)
    return value


class TicketDAO:
    """
    Data Access Object for Ticket operations.

    WHAT: Manages ticket creation, scoped reads, partial updates and the
    status summary.

    WHY: Centralizes database operations for:
    - Consistent role scoping between listing and aggregation
    - Atomic updates (one UPDATE statement per patch)

    HOW: All methods are async and use session for transactions.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize TicketDAO with database session.

        Args:
            session: AsyncSession for database operations
        """
        self.session = session

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    async def create(
        self,
        client_id: int,
        title: str,
        description: str,
        priority: Any = TicketPriority.MEDIUM,
        category: Any = TicketCategory.GENERAL,
    ) -> Ticket:
        """
        Create a new ticket for a client.

        WHAT: Inserts an open ticket owned by client_id.

        Args:
            client_id: Submitting user
            title: Short summary (non-empty)
            description: Problem statement (non-empty)
            priority: TicketPriority or its value
            category: TicketCategory or its value

        Returns:
            Created ticket with client and assignee loaded

        Raises:
            ValidationError: If title or description is empty
            InvalidEnumValueError: If priority or category is unknown
        """
        now = utcnow()
        ticket = Ticket(
            client_id=client_id,
            title=_require_text(title, "title"),
            description=_require_text(description, "description"),
            priority=coerce_enum(TicketPriority, priority, "priority"),
            category=coerce_enum(TicketCategory, category, "category"),
            status=TicketStatus.OPEN,
            created_at=now,
            updated_at=now,
            closed_at=None,
        )
        self.session.add(ticket)
        await self.session.flush()

        return await self._get_loaded(ticket.id)

    async def get_by_id(
        self,
        ticket_id: int,
        scope: Optional[TicketScope] = None,
    ) -> Optional[Ticket]:
        """
        Get a ticket by ID.

        WHY: A restricted scope turns another owner's ticket into "not
        found", so clients cannot probe which ticket ids exist.

        Args:
            ticket_id: Ticket ID
            scope: Visibility scope (None means unrestricted)

        Returns:
            Ticket with client and assignee loaded, or None
        """
        query = (
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .options(selectinload(Ticket.client), selectinload(Ticket.assignee))
        )
        if scope is not None:
            query = scope.apply(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, ticket_id: int, scope: Optional[TicketScope] = None) -> bool:
        """Check whether a ticket exists (within scope, if given)."""
        query = select(Ticket.id).where(Ticket.id == ticket_id)
        if scope is not None:
            query = scope.apply(query)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list(self, scope: TicketScope) -> List[Ticket]:
        """
        List the tickets visible in a scope.

        WHAT: Newest first, with client and assignee names resolved.

        Args:
            scope: Visibility scope from the caller's access policy

        Returns:
            Snapshot list of tickets
        """
        query = (
            select(Ticket)
            .options(selectinload(Ticket.client), selectinload(Ticket.assignee))
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
        )
        query = scope.apply(query)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def apply_update(self, ticket_id: int, values: Dict[str, Any]) -> Ticket:
        """
        Apply a prepared mutation to one ticket.

        WHAT: Writes every column in values with a single UPDATE.

        WHY: One statement keyed on the primary key is atomic in the
        database, so readers never see status=closed without closed_at or a
        mix of old and new fields.

        Args:
            ticket_id: Ticket to update
            values: Column -> value mapping from build_ticket_mutation()

        Returns:
            Updated ticket, reloaded with relationships

        Raises:
            TicketNotFoundError: If no ticket has this id
        """
        result = await self.session.execute(
            update(Ticket)
            .where(Ticket.id == ticket_id)
            .values(**values)
            .returning(Ticket.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            raise TicketNotFoundError(ticket_id=ticket_id)

        return await self._get_loaded(ticket_id)

    # =========================================================================
    # Aggregation
    # =========================================================================

    async def get_status_summary(self, scope: TicketScope) -> Dict[str, int]:
        """
        Count tickets by status within a scope.

        WHY: All four counters come from one SELECT, so they are consistent
        with each other and with list(scope) at the moment of the read.

        Args:
            scope: Same scope used for list()

        Returns:
            Dict with open_tickets, in_progress_tickets, closed_tickets and
            total_tickets
        """
        query = select(
            func.count(case((Ticket.status == TicketStatus.OPEN, 1))).label("open_tickets"),
            func.count(case((Ticket.status == TicketStatus.IN_PROGRESS, 1))).label(
                "in_progress_tickets"
            ),
            func.count(case((Ticket.status == TicketStatus.CLOSED, 1))).label("closed_tickets"),
            func.count(Ticket.id).label("total_tickets"),
        ).select_from(Ticket)
        query = scope.apply(query)

        row = (await self.session.execute(query)).one()
        return {
            "open_tickets": row.open_tickets or 0,
            "in_progress_tickets": row.in_progress_tickets or 0,
            "closed_tickets": row.closed_tickets or 0,
            "total_tickets": row.total_tickets or 0,
        }

    async def _get_loaded(self, ticket_id: int) -> Ticket:
        # populate_existing refreshes an instance already in the identity map
        result = await self.session.execute(
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .options(selectinload(Ticket.client), selectinload(Ticket.assignee))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()


class TicketCommentDAO:
    """
    Data Access Object for ticket comments.

    WHAT: Append-only comment threads.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_ticket(self, ticket_id: int) -> None:
        result = await self.session.execute(
            select(Ticket.id).where(Ticket.id == ticket_id).limit(1)
        )
        if result.scalar_one_or_none() is None:
            raise TicketNotFoundError(ticket_id=ticket_id)

    async def create(
        self,
        ticket_id: int,
        author_id: int,
        comment_text: str,
    ) -> TicketComment:
        """
        Add a comment to a ticket.

        Args:
            ticket_id: Parent ticket
            author_id: Commenting user
            comment_text: Comment body (non-empty)

        Returns:
            Created comment with author loaded

        Raises:
            ValidationError: If comment_text is empty
            TicketNotFoundError: If the ticket does not exist
        """
        _require_text(comment_text, "comment_text")
        await self._ensure_ticket(ticket_id)

        comment = TicketComment(
            ticket_id=ticket_id,
            author_id=author_id,
            comment_text=comment_text,
            created_at=utcnow(),
        )
        self.session.add(comment)
        await self.session.flush()

        result = await self.session.execute(
            select(TicketComment)
            .where(TicketComment.id == comment.id)
            .options(selectinload(TicketComment.author))
        )
        return result.scalar_one()

    async def list_for_ticket(self, ticket_id: int) -> List[TicketComment]:
        """
        List a ticket's comments in chronological order.

        Raises:
            TicketNotFoundError: If the ticket does not exist
        """
        await self._ensure_ticket(ticket_id)

        result = await self.session.execute(
            select(TicketComment)
            .where(TicketComment.ticket_id == ticket_id)
            .options(selectinload(TicketComment.author))
            .order_by(TicketComment.created_at.asc(), TicketComment.id.asc())
        )
        return list(result.scalars().all())
