from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.database import get_db
from fleet_portal.models.quick_link import QuickLink
from fleet_portal.models.user import User, UserRole
from fleet_portal.routers.auth import get_current_user, require_admin
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.schemas.quick_link import QuickLinkCreate, QuickLinkResponse, QuickLinkUpdate

router = APIRouter(prefix="/quick-links", tags=["quick-links"])

_VISIBILITY_COLUMN = {
    UserRole.ADMIN: QuickLink.visible_to_admins,
    UserRole.CLIENT: QuickLink.visible_to_clients,
    UserRole.EMPLOYEE: QuickLink.visible_to_employees,
}


@router.get("")
async def list_quick_links(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApiResponse[dict[str, list[QuickLinkResponse]]]:
    """Links visible to the caller's role, grouped by category."""
    result = await db.execute(
        select(QuickLink)
        .where(_VISIBILITY_COLUMN[user.role].is_(True))
        .order_by(QuickLink.category, QuickLink.title)
    )
    grouped: dict[str, list[QuickLinkResponse]] = {}
    for link in result.scalars().all():
        grouped.setdefault(link.category, []).append(QuickLinkResponse.model_validate(link))
    return ApiResponse.ok(grouped)


@router.post("", dependencies=[Depends(require_admin)])
async def create_quick_link(
    body: QuickLinkCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[QuickLinkResponse]:
    link = QuickLink(**body.model_dump())
    db.add(link)
    await db.flush()
    return ApiResponse.ok(QuickLinkResponse.model_validate(link))


@router.put("/{link_id}", dependencies=[Depends(require_admin)])
async def update_quick_link(
    link_id: int,
    body: QuickLinkUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[QuickLinkResponse]:
    result = await db.execute(select(QuickLink).where(QuickLink.id == link_id))
    link = result.scalar_one_or_none()
    if link is None:
        return ApiResponse.fail(f"Quick link with id {link_id} not found")
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(link, key, value)
    await db.flush()
    return ApiResponse.ok(QuickLinkResponse.model_validate(link))


@router.delete("/{link_id}", dependencies=[Depends(require_admin)])
async def delete_quick_link(
    link_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    result = await db.execute(select(QuickLink).where(QuickLink.id == link_id))
    link = result.scalar_one_or_none()
    if link is None:
        return ApiResponse.fail(f"Quick link with id {link_id} not found")
    await db.delete(link)
    await db.flush()
    return ApiResponse.ok(None)
