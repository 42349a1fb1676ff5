from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.database import get_db
from fleet_portal.models.notification import Notification
from fleet_portal.models.user import User
from fleet_portal.routers.auth import get_current_user
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.schemas.notification import NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


async def _unread_count(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
    )
    return result.scalar() or 0


@router.get("")
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[NotificationResponse]]:
    query = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(
        query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    )
    items = [NotificationResponse.model_validate(n) for n in result.scalars().all()]
    return ApiResponse.ok(items, meta={"unread_count": await _unread_count(db, user.id)})


@router.post("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApiResponse[dict]:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return ApiResponse.ok({"updated": result.rowcount})


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApiResponse[NotificationResponse]:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id, Notification.user_id == user.id
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        return ApiResponse.fail(f"Notification with id {notification_id} not found")
    notification.is_read = True
    await db.flush()
    return ApiResponse.ok(NotificationResponse.model_validate(notification))
