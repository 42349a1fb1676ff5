from fastapi import APIRouter, Depends, Query

from fleet_portal.models.user import User
from fleet_portal.routers.auth import get_current_user
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.utils.navigation import is_active, items_for_role

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("")
async def get_navigation(
    location: str = Query("/dashboard"),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[dict]]:
    """Sidebar entries visible to the current user's role."""
    items = items_for_role(user.role)
    return ApiResponse.ok([
        {**item.to_dict(), "active": is_active(item, location)}
        for item in items
    ])
