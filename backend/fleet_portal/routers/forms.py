from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.models.inspection_form import FormStatus
from fleet_portal.models.user import User
from fleet_portal.routers.auth import get_current_user, require_admin
from fleet_portal.schemas.common import ApiResponse, PageResponse
from fleet_portal.schemas.form import DeclineRequest, InspectionFormCreate, InspectionFormResponse
from fleet_portal.services import form_service

router = APIRouter(prefix="/forms", tags=["forms"])


@router.post("")
async def submit_form(
    body: InspectionFormCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApiResponse[InspectionFormResponse]:
    try:
        form = await form_service.submit_form(db, body, user)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(InspectionFormResponse.model_validate(form))


@router.get("/mine")
async def list_my_forms(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PageResponse[InspectionFormResponse]:
    forms, total = await form_service.list_forms(
        db, submitted_by=user.id, page=page, limit=limit
    )
    return PageResponse.ok(
        [InspectionFormResponse.model_validate(f) for f in forms],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("", dependencies=[Depends(require_admin)])
async def list_forms(
    status: FormStatus | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[InspectionFormResponse]:
    forms, total = await form_service.list_forms(db, status=status, page=page, limit=limit)
    return PageResponse.ok(
        [InspectionFormResponse.model_validate(f) for f in forms],
        total=total,
        page=page,
        limit=limit,
    )


async def _review(
    db: AsyncSession, form_id: int, reviewer: User, approve: bool, reason: str | None = None
) -> ApiResponse[InspectionFormResponse]:
    try:
        form = await form_service.review_form(db, form_id, reviewer, approve, reason)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    if form is None:
        return ApiResponse.fail(f"Form with id {form_id} not found")
    return ApiResponse.ok(InspectionFormResponse.model_validate(form))


@router.post("/{form_id}/approve")
async def approve_form(
    form_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[InspectionFormResponse]:
    return await _review(db, form_id, user, approve=True)


@router.post("/{form_id}/decline")
async def decline_form(
    form_id: int,
    body: DeclineRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[InspectionFormResponse]:
    return await _review(db, form_id, user, approve=False, reason=body.reason)
