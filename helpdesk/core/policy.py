"""
Role-based access policy for tickets.

WHAT: One policy object per role deciding which tickets a caller can see
and which ticket fields they can change.

WHY: Listing, single-ticket reads, comment access and dashboard counts
all ask the same policy for the same TicketScope, so a caller's summary
counts always match the tickets they could enumerate.

HOW: policy_for(role) returns a shared, stateless policy instance.
TicketScope.apply() adds the owner filter to any SELECT over tickets.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy import Select

from helpdesk.core.exceptions import AuthorizationError
from helpdesk.core.identity import CallerContext
from helpdesk.models.ticket import Ticket
from helpdesk.models.user import UserRole


@dataclass(frozen=True)
class TicketScope:
    """
    Subset of tickets visible to a caller.

    owner_id is None for unrestricted scopes; otherwise only tickets whose
    client_id equals owner_id are visible.
    """

    owner_id: Optional[int] = None

    @classmethod
    def unrestricted(cls) -> "TicketScope":
        return cls(owner_id=None)

    @classmethod
    def restricted_to(cls, owner_id: int) -> "TicketScope":
        return cls(owner_id=owner_id)

    def apply(self, query: Select) -> Select:
        """Filter a ticket query down to this scope."""
        if self.owner_id is None:
            return query
        return query.where(Ticket.client_id == self.owner_id)


class AccessPolicy:
    """
    Base policy. Subclasses describe one role.

    Attributes:
        can_manage_tickets: May change status, priority, assignee and
            resolution notes of tickets in scope
    """

    role: UserRole
    can_manage_tickets: bool = False

    def scope(self, caller: CallerContext) -> TicketScope:
        raise NotImplementedError

    def ensure_can_manage(self, caller: CallerContext) -> None:
        """
        Raises:
            AuthorizationError: If the role may not update tickets
        """
        if not self.can_manage_tickets:
            raise AuthorizationError(
                message="Only consultants and admins can update tickets",
                user_id=caller.user_id,
                user_role=caller.role.value,
            )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(role={self.role.value})>"


class ClientPolicy(AccessPolicy):
    """Clients see and comment on their own tickets only."""

    role = UserRole.CLIENT

    def scope(self, caller: CallerContext) -> TicketScope:
        return TicketScope.restricted_to(caller.user_id)


class StaffPolicy(AccessPolicy):
    """
    Consultants and admins see every ticket and may triage any of them.

    Note: the two staff roles are deliberately not distinguished for
    ticket mutation.
    """

    can_manage_tickets = True

    def __init__(self, role: UserRole):
        self.role = role

    def scope(self, caller: CallerContext) -> TicketScope:
        return TicketScope.unrestricted()


POLICIES: Dict[UserRole, AccessPolicy] = {
    UserRole.CLIENT: ClientPolicy(),
    UserRole.CONSULTANT: StaffPolicy(UserRole.CONSULTANT),
    UserRole.ADMIN: StaffPolicy(UserRole.ADMIN),
}


def policy_for(role: UserRole) -> AccessPolicy:
    """Return the policy for a role."""
    return POLICIES[role]


def scope_for(caller: CallerContext) -> TicketScope:
    """Shortcut for policy_for(caller.role).scope(caller)."""
    return policy_for(caller.role).scope(caller)
