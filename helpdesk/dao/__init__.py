"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from helpdesk.dao.base import BaseDAO
from helpdesk.dao.user import UserDAO
from helpdesk.dao.ticket import TicketDAO, TicketCommentDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "TicketDAO",
    "TicketCommentDAO",
]
