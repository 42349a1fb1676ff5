import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.models.user import User
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.schemas.user import LoginRequest, UserResponse
from fleet_portal.utils.auth import (
    create_session,
    destroy_session,
    validate_session,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    fleet_session: str | None = Cookie(None),
) -> User:
    """Dependency that returns the current authenticated user."""
    if fleet_session is None:
        raise _unauthorized()

    session_data = validate_session(fleet_session)
    if session_data is None:
        raise _unauthorized()

    result = await db.execute(
        select(User).where(User.id == session_data.user_id, User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized()
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency that only lets admins through."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=401, detail="Not authenticated")


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    result = await db.execute(
        select(User).where(User.email == body.email.strip().lower())
    )
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.password_hash):
        logger.warning("Failed login for %s", body.email)
        return ApiResponse.fail("Invalid email or password")

    if not user.is_active:
        return ApiResponse.fail("Account is disabled")

    token = create_session(user)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
    )

    return ApiResponse.ok(UserResponse.model_validate(user))


@router.post("/logout")
async def logout(
    response: Response,
    fleet_session: str | None = Cookie(None),
) -> ApiResponse[None]:
    if fleet_session:
        destroy_session(fleet_session)
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)
    return ApiResponse.ok(None)


@router.get("/me")
async def get_me(
    user: User = Depends(get_current_user),
) -> ApiResponse[UserResponse]:
    return ApiResponse.ok(UserResponse.model_validate(user))
