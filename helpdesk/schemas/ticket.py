"""
Pydantic schemas for ticket endpoints.

WHAT: Request/response schemas for tickets, comments, the dashboard and
the consultant directory.

WHY: Schemas define API contracts for ticket operations:
1. Validate incoming request data (closed enum sets, non-empty text)
2. Document API for OpenAPI/Swagger
3. Distinguish "field absent" from "field set to null" in partial updates
4. Control which fields are exposed (no password hashes)

HOW: Uses Pydantic v2 with Field validators and ORM mode for SQLAlchemy
integration. The enums are the model enums, so API and database share one
closed set per field.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from helpdesk.models.base import MAX_ID
from helpdesk.models.ticket import TicketStatus, TicketPriority, TicketCategory


# ============================================================================
# Comment Schemas
# ============================================================================


class CommentCreate(BaseModel):
    """
    Comment creation request.

    WHAT: Data for adding a comment to a ticket.
    """

    comment_text: str = Field(
        ...,
        min_length=1,
        max_length=50000,
        description="Comment body",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "comment_text": "I've reset the VPN profile, please try again.",
            }
        }


class CommentResponse(BaseModel):
    """
    Comment response schema.

    WHAT: Comment data with the author's display name resolved.
    """

    id: int = Field(..., description="Comment ID")
    ticket_id: int = Field(..., description="Parent ticket ID")
    author_id: int = Field(..., description="Comment author ID")
    author_name: str | None = Field(None, description="Comment author name")
    comment_text: str = Field(..., description="Comment body")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True


# ============================================================================
# Ticket Schemas
# ============================================================================


class TicketCreate(BaseModel):
    """
    Ticket creation request.

    WHAT: Data for submitting a new support ticket.

    WHY: Validates required fields and sets defaults. The owner is always
    the caller, so there is no client_id field.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Short summary of the issue",
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=50000,
        description="Detailed description of the issue",
    )
    priority: TicketPriority = Field(
        default=TicketPriority.MEDIUM,
        description="Ticket priority",
    )
    category: TicketCategory = Field(
        default=TicketCategory.GENERAL,
        description="Ticket category",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "title": "VPN drops every few minutes",
                "description": "Since this morning the VPN disconnects roughly every five minutes.",
                "priority": "high",
                "category": "support",
            }
        }


class TicketUpdate(BaseModel):
    """
    Ticket partial update request.

    WHAT: Sparse patch over the four staff-managed fields.

    WHY: Absent fields are left unchanged; presence is read from
    model_fields_set, never from the value. Null is meaningful only for
    assigned_to (unassign) and resolution_notes (clear).
    """

    status: TicketStatus | None = Field(
        default=None,
        description="New status",
    )
    priority: TicketPriority | None = Field(
        default=None,
        description="New priority",
    )
    assigned_to: int | None = Field(
        default=None,
        gt=0,
        le=MAX_ID,
        description="Consultant/admin user ID (null to unassign)",
    )
    resolution_notes: str | None = Field(
        default=None,
        max_length=50000,
        description="Resolution notes (null to clear)",
    )

    @field_validator("status", "priority")
    @classmethod
    def reject_null(cls, v):
        """
        Reject explicit null for required columns.

        WHY: Validators only run for supplied values, so this fires on
        {"status": null} but not when status is omitted.
        """
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "status": "closed",
                "resolution_notes": "Replaced the router firmware.",
            }
        }


class TicketResponse(BaseModel):
    """
    Ticket response schema.

    WHAT: Full ticket data with client and assignee names resolved.
    """

    id: int = Field(..., description="Ticket ID")
    client_id: int = Field(..., description="Submitting client ID")
    client_name: str | None = Field(None, description="Submitting client name")
    title: str = Field(..., description="Ticket title")
    description: str = Field(..., description="Ticket description")
    priority: TicketPriority = Field(..., description="Priority level")
    category: TicketCategory = Field(..., description="Ticket category")
    status: TicketStatus = Field(..., description="Current status")
    assigned_to: int | None = Field(None, description="Assignee user ID")
    assigned_to_name: str | None = Field(None, description="Assignee name")
    resolution_notes: str | None = Field(None, description="Resolution notes")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    closed_at: datetime | None = Field(None, description="When last closed")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "client_id": 2,
                "client_name": "Jane Client",
                "title": "VPN drops every few minutes",
                "description": "Since this morning...",
                "priority": "high",
                "category": "support",
                "status": "closed",
                "assigned_to": 3,
                "assigned_to_name": "Carl Consultant",
                "resolution_notes": "Replaced the router firmware.",
                "created_at": "2025-12-11T10:00:00",
                "updated_at": "2025-12-11T12:30:00",
                "closed_at": "2025-12-11T12:30:00",
            }
        }


# ============================================================================
# Dashboard / Directory Schemas
# ============================================================================


class DashboardStats(BaseModel):
    """
    Ticket counters for the dashboard.

    WHAT: Counts by status over the caller's visible tickets.
    """

    open_tickets: int = Field(..., ge=0, description="Tickets with status open")
    in_progress_tickets: int = Field(..., ge=0, description="Tickets with status in_progress")
    closed_tickets: int = Field(..., ge=0, description="Tickets with status closed")
    total_tickets: int = Field(..., ge=0, description="All visible tickets")

    class Config:
        json_schema_extra = {
            "example": {
                "open_tickets": 4,
                "in_progress_tickets": 2,
                "closed_tickets": 9,
                "total_tickets": 15,
            }
        }


class ConsultantResponse(BaseModel):
    """Assignable staff member."""

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    full_name: str = Field(..., description="Display name")
    role: str = Field(..., description="consultant or admin")

    class Config:
        from_attributes = True
