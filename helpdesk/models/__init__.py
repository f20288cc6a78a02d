"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from helpdesk.models.base import Base, utcnow, coerce_enum
from helpdesk.models.user import User, UserRole, STAFF_ROLES
from helpdesk.models.ticket import (
    Ticket,
    TicketStatus,
    TicketPriority,
    TicketCategory,
    TicketComment,
)

__all__ = [
    "Base",
    "utcnow",
    "coerce_enum",
    "User",
    "UserRole",
    "STAFF_ROLES",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
    "TicketComment",
]
