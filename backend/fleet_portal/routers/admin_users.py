import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.database import get_db
from fleet_portal.models.user import User, UserRole
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.schemas.user import UserCreate, UserResponse, UserUpdate
from fleet_portal.utils.auth import destroy_user_sessions, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.get("")
async def list_users(
    role: UserRole | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[list[UserResponse]]:
    query = select(User)
    if role is not None:
        query = query.where(User.role == role)
    result = await db.execute(query.order_by(User.last_name, User.first_name, User.id))
    return ApiResponse.ok([UserResponse.model_validate(u) for u in result.scalars().all()])


@router.post("")
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ApiResponse[UserResponse]:
    email = body.email.strip().lower()
    dup = await db.execute(select(User.id).where(func.lower(User.email) == email))
    if dup.scalar_one_or_none() is not None:
        return ApiResponse.fail(f"A user with email {email} already exists")

    user = User(
        email=email,
        first_name=body.first_name,
        last_name=body.last_name,
        password_hash=hash_password(body.password),
        role=body.role,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    logger.info("User %s (%s) created by %s", email, body.role.value, admin.email)
    return ApiResponse.ok(UserResponse.model_validate(user))


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ApiResponse[UserResponse]:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return ApiResponse.fail(f"User with id {user_id} not found")

    if user.id == admin.id and (
        (body.role is not None and body.role != UserRole.ADMIN) or body.is_active is False
    ):
        return ApiResponse.fail("You cannot demote or deactivate your own account")

    changes = body.model_dump(exclude_unset=True, exclude={"password"})
    for key, value in changes.items():
        if value is not None:
            setattr(user, key, value)
    if body.password:
        user.password_hash = hash_password(body.password)

    if body.is_active is False or body.password:
        destroy_user_sessions(user.id)
    await db.flush()
    return ApiResponse.ok(UserResponse.model_validate(user))
