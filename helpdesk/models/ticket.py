"""
Ticket models for the support ticketing system.

WHAT: SQLAlchemy models for tickets and their comments.

WHY: Provides structured support request management with:
1. A closed status lifecycle (open -> in_progress -> closed)
2. Priority and category as closed sets
3. Assignment to a consultant or admin
4. An append-only comment thread per ticket

HOW: Uses SQLAlchemy 2.0 with:
- Enums stored by value for status, priority and category
- Foreign keys to users (client, assignee, comment author)
- Indexes for the scoped listing and comment queries
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import (
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from helpdesk.models.base import Base, enum_column, utcnow

if TYPE_CHECKING:
    from helpdesk.models.user import User


# ============================================================================
# Enums
# ============================================================================


class TicketStatus(str, Enum):
    """
    Ticket status values.

    WHAT: Tracks the lifecycle of a support ticket.

    WHY: Status drives the dashboard counters and close timestamping:
    - OPEN: New ticket, not yet picked up
    - IN_PROGRESS: A consultant is working on it
    - CLOSED: Resolved; closed_at is stamped
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TicketCategory(str, Enum):
    """
    Ticket category for classification.

    WHY: Helps with routing and reporting.
    """

    GENERAL = "general"
    BUG = "bug"
    FEATURE = "feature"
    QUESTION = "question"
    SUPPORT = "support"


# ============================================================================
# Ticket Model
# ============================================================================


class Ticket(Base):
    """
    Support ticket submitted by a client.

    WHAT: Represents a support request or issue.

    Security: Clients only see tickets where client_id is their own id.
    Tickets are never physically deleted.
    """

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Ticket details
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Classification
    status: Mapped[TicketStatus] = mapped_column(
        enum_column(TicketStatus, "ticketstatus"),
        default=TicketStatus.OPEN,
        nullable=False,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        enum_column(TicketPriority, "ticketpriority"),
        default=TicketPriority.MEDIUM,
        nullable=False,
    )
    category: Mapped[TicketCategory] = mapped_column(
        enum_column(TicketCategory, "ticketcategory"),
        default=TicketCategory.GENERAL,
        nullable=False,
    )

    # Timestamps
    # WHY: closed_at is stamped whenever a patch sets status to closed and
    # is left in place if the ticket is later reopened.
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    client: Mapped["User"] = relationship(
        "User", foreign_keys=[client_id], back_populates="submitted_tickets"
    )
    assignee: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assigned_to], back_populates="assigned_tickets"
    )
    comments: Mapped[List["TicketComment"]] = relationship(
        "TicketComment",
        back_populates="ticket",
        order_by="TicketComment.created_at",
    )

    # Indexes for common queries
    __table_args__ = (
        Index("ix_tickets_client_id", "client_id"),
        Index("ix_tickets_status", "status"),
        Index("ix_tickets_assigned_to", "assigned_to"),
        Index("ix_tickets_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, title='{self.title[:30]}', status={self.status.value})>"

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED


# ============================================================================
# TicketComment Model
# ============================================================================


class TicketComment(Base):
    """
    Comment on a ticket.

    WHAT: A reply or note on a ticket, visible to everyone who can read
    the ticket.

    WHY: Append-only. Comments are never edited or deleted, so the thread
    is a faithful history of the conversation.
    """

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    comment_text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # Relationships
    ticket: Mapped["Ticket"] = relationship("Ticket", back_populates="comments")
    author: Mapped["User"] = relationship("User", back_populates="comments")

    __table_args__ = (
        Index("ix_comments_ticket_id", "ticket_id"),
        Index("ix_comments_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TicketComment(id={self.id}, ticket_id={self.ticket_id})>"
