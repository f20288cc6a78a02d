"""
User model.

WHY: Users represent the people who interact with the helpdesk. The role
decides what they can see and change: clients submit tickets, consultants
and admins triage and resolve them.
"""

import enum
from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import Base, enum_column, utcnow

if TYPE_CHECKING:
    from helpdesk.models.ticket import Ticket, TicketComment


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    WHY: Enum ensures only valid roles can be assigned and keeps role-based
    access decisions keyed on a closed set.
    """

    CLIENT = "client"  # Submits tickets, sees only their own
    CONSULTANT = "consultant"  # Works tickets across all clients
    ADMIN = "admin"  # Same ticket powers as consultant

    @property
    def is_staff(self) -> bool:
        """Consultants and admins can be assigned tickets."""
        return self in STAFF_ROLES


STAFF_ROLES = frozenset({UserRole.CONSULTANT, UserRole.ADMIN})


class User(Base):
    """
    User model representing individuals who use the helpdesk.

    Security: hashed_password is never serialized into API responses.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # WHY: Default CLIENT role ensures least-privilege access
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "userrole"),
        default=UserRole.CLIENT,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # Ticket relationships
    submitted_tickets: Mapped[List["Ticket"]] = relationship(
        "Ticket",
        back_populates="client",
        foreign_keys="Ticket.client_id",
    )
    assigned_tickets: Mapped[List["Ticket"]] = relationship(
        "Ticket",
        back_populates="assignee",
        foreign_keys="Ticket.assigned_to",
    )
    comments: Mapped[List["TicketComment"]] = relationship(
        "TicketComment", back_populates="author"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
