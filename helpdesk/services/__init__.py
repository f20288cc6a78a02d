"""
Business logic services package.

WHY: Services contain business logic separated from API routes and data access,
following the three-layer architecture (API → Service → DAO).
"""

from helpdesk.services.ticket_service import TicketService
from helpdesk.services.ticket_update import build_ticket_mutation, UPDATABLE_FIELDS

__all__ = [
    "TicketService",
    "build_ticket_mutation",
    "UPDATABLE_FIELDS",
]
