"""
Dashboard API endpoints.

WHAT: Ticket counters for the caller's dashboard.

WHY: The counters are computed over the same scope as GET /tickets, so a
client's dashboard only counts that client's tickets.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.deps import get_current_caller
from helpdesk.core.identity import CallerContext
from helpdesk.db.session import get_db
from helpdesk.schemas.ticket import DashboardStats
from helpdesk.services.ticket_service import TicketService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Dashboard statistics",
    description="Open, in-progress, closed and total ticket counts visible to the caller.",
)
async def get_dashboard_stats(
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> DashboardStats:
    """Return ticket counts by status."""
    service = TicketService(db)
    stats = await service.get_dashboard_stats(caller)
    return DashboardStats(**stats)
