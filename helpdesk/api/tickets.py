"""
Ticket management API endpoints.

WHAT: RESTful API for support ticket operations.

WHY: Tickets enable structured support workflow with:
1. Client submission
2. Staff triage (status, priority, assignment, resolution notes)
3. Comment threads visible to the ticket owner and staff

HOW: FastAPI router with:
- Role-scoped queries (clients see their own tickets only)
- Partial updates that only touch fields present in the body
- Business logic delegated to TicketService
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.exceptions import TicketNotFoundError
from helpdesk.core.deps import get_current_caller
from helpdesk.core.identity import CallerContext
from helpdesk.db.session import get_db
from helpdesk.models.base import MAX_ID
from helpdesk.models.ticket import Ticket, TicketComment
from helpdesk.schemas.ticket import (
    TicketCreate,
    TicketUpdate,
    TicketResponse,
    CommentCreate,
    CommentResponse,
)
from helpdesk.services.ticket_service import TicketService


router = APIRouter(prefix="/tickets", tags=["tickets"])


def ticket_path_id(ticket_id: int = Path(..., description="Ticket ID")) -> int:
    """
    Resolve the {ticket_id} path segment.

    Ids no row can have are reported as not found before they reach the
    database driver, which would reject them outright.
    """
    if not 1 <= ticket_id <= MAX_ID:
        raise TicketNotFoundError(ticket_id=ticket_id)
    return ticket_id


def _ticket_to_response(ticket: Ticket) -> TicketResponse:
    """
    Convert Ticket model to TicketResponse schema.

    WHY: Centralized conversion resolves client and assignee display names
    the same way for every endpoint. The DAO always eager-loads both.
    """
    return TicketResponse(
        id=ticket.id,
        client_id=ticket.client_id,
        client_name=ticket.client.full_name if ticket.client else None,
        title=ticket.title,
        description=ticket.description,
        priority=ticket.priority,
        category=ticket.category,
        status=ticket.status,
        assigned_to=ticket.assigned_to,
        assigned_to_name=ticket.assignee.full_name if ticket.assignee else None,
        resolution_notes=ticket.resolution_notes,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
        closed_at=ticket.closed_at,
    )


def _comment_to_response(comment: TicketComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        ticket_id=comment.ticket_id,
        author_id=comment.author_id,
        author_name=comment.author.full_name if comment.author else None,
        comment_text=comment.comment_text,
        created_at=comment.created_at,
    )


# ============================================================================
# Ticket CRUD
# ============================================================================


@router.get(
    "",
    response_model=List[TicketResponse],
    summary="List tickets",
    description="Clients get their own tickets; consultants and admins get all. Newest first.",
)
async def list_tickets(
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> List[TicketResponse]:
    """List tickets visible to the caller."""
    service = TicketService(db)
    tickets = await service.list_tickets(caller)
    return [_ticket_to_response(t) for t in tickets]


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create ticket",
    description="Submit a new ticket owned by the caller.",
)
async def create_ticket(
    data: TicketCreate,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Create a ticket.

    WHY: client_id is always the caller; it cannot be chosen in the body.
    """
    service = TicketService(db)
    ticket = await service.create_ticket(caller, data)
    return _ticket_to_response(ticket)


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Get ticket",
    description="Get one ticket. Tickets outside the caller's scope are reported as not found.",
)
async def get_ticket(
    caller: CallerContext = Depends(get_current_caller),
    ticket_id: int = Depends(ticket_path_id),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """Get a single ticket."""
    service = TicketService(db)
    ticket = await service.get_ticket(caller, ticket_id)
    return _ticket_to_response(ticket)


@router.put(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Update ticket",
    description=(
        "Partially update status, priority, assigned_to and resolution_notes. "
        "Omitted fields are left unchanged. Consultants and admins only."
    ),
)
async def update_ticket(
    patch: TicketUpdate,
    caller: CallerContext = Depends(get_current_caller),
    ticket_id: int = Depends(ticket_path_id),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Apply a partial update.

    Raises:
        AuthorizationError (403): If the caller is a client
        TicketNotFoundError (404): If the ticket does not exist
        ValidationError (400): If a value is invalid
    """
    service = TicketService(db)
    ticket = await service.update_ticket(caller, ticket_id, patch)
    return _ticket_to_response(ticket)


# ============================================================================
# Comments
# ============================================================================


@router.get(
    "/{ticket_id}/comments",
    response_model=List[CommentResponse],
    summary="List comments",
    description="Comments on a ticket, oldest first.",
)
async def list_comments(
    caller: CallerContext = Depends(get_current_caller),
    ticket_id: int = Depends(ticket_path_id),
    db: AsyncSession = Depends(get_db),
) -> List[CommentResponse]:
    """List comments for a visible ticket."""
    service = TicketService(db)
    comments = await service.list_comments(caller, ticket_id)
    return [_comment_to_response(c) for c in comments]


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add comment",
    description="Append a comment to a visible ticket.",
)
async def add_comment(
    data: CommentCreate,
    caller: CallerContext = Depends(get_current_caller),
    ticket_id: int = Depends(ticket_path_id),
    db: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """Add a comment."""
    service = TicketService(db)
    comment = await service.add_comment(caller, ticket_id, data.comment_text)
    return _comment_to_response(comment)
