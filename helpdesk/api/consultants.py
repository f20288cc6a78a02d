"""
Consultant directory API endpoint.

WHAT: Lists users tickets can be assigned to (consultants and admins).
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.deps import get_current_caller
from helpdesk.core.identity import CallerContext
from helpdesk.db.session import get_db
from helpdesk.dao.user import UserDAO
from helpdesk.schemas.ticket import ConsultantResponse


router = APIRouter(prefix="/consultants", tags=["consultants"])


@router.get(
    "",
    response_model=List[ConsultantResponse],
    summary="List consultants",
    description="Users with role consultant or admin, ordered by name.",
)
async def list_consultants(
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> List[ConsultantResponse]:
    """Any authenticated caller may read the directory."""
    user_dao = UserDAO(db)
    staff = await user_dao.list_staff()
    return [
        ConsultantResponse(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role.value,
        )
        for user in staff
    ]
