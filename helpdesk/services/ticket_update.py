"""
Partial update builder for tickets.

WHAT: Turns a sparse TicketUpdate into the column -> value mapping handed
to TicketDAO.apply_update().

WHY: "Absent" and "null" mean different things in a patch. Reading
presence from model_fields_set keeps the two apart: an absent field is
never written, a present null is written as NULL.

HOW: Pure function, no I/O. The clock is injectable for tests.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from helpdesk.models.base import coerce_enum, utcnow
from helpdesk.models.ticket import TicketStatus, TicketPriority
from helpdesk.schemas.ticket import TicketUpdate


# Fields a patch may carry; everything else on a ticket is immutable here
UPDATABLE_FIELDS = ("status", "priority", "assigned_to", "resolution_notes")

_ENUM_FIELDS = {
    "status": TicketStatus,
    "priority": TicketPriority,
}


def build_ticket_mutation(
    patch: TicketUpdate,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the mutation set for one ticket update.

    Rules:
    1. Every present field is copied (enum fields coerced)
    2. An empty patch is valid
    3. updated_at is always set
    4. closed_at is set whenever the incoming status is closed, even if the
       ticket is already closed (the close time is re-stamped)

    Args:
        patch: Parsed update request
        now: Timestamp to use (defaults to current UTC)

    Returns:
        Column -> value mapping

    Raises:
        InvalidEnumValueError: If status or priority is outside its set
    """
    now = now or utcnow()
    values: Dict[str, Any] = {}

    for field in UPDATABLE_FIELDS:
        if field not in patch.model_fields_set:
            continue
        value = getattr(patch, field)
        if field in _ENUM_FIELDS:
            value = coerce_enum(_ENUM_FIELDS[field], value, field)
        values[field] = value

    values["updated_at"] = now
    if values.get("status") == TicketStatus.CLOSED:
        values["closed_at"] = now

    return values
