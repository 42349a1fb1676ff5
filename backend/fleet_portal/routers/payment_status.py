from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.database import get_db
from fleet_portal.models.payment import PaymentStatus
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.common import ApiResponse
from fleet_portal.schemas.payment import PaymentStatusCreate, PaymentStatusResponse
from fleet_portal.services import payment_service

router = APIRouter(prefix="/payment-status", tags=["payments"])


@router.get("")
async def list_statuses(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[PaymentStatusResponse]]:
    statuses = await payment_service.list_statuses(db)
    return ApiResponse.ok([PaymentStatusResponse.model_validate(s) for s in statuses])


@router.post("", dependencies=[Depends(require_admin)])
async def create_status(
    body: PaymentStatusCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PaymentStatusResponse]:
    name = body.name.strip()
    result = await db.execute(
        select(PaymentStatus.id).where(func.lower(PaymentStatus.name) == name.lower())
    )
    if result.scalar_one_or_none() is not None:
        return ApiResponse.fail(f'Payment status "{name}" already exists')

    status = PaymentStatus(name=name, color=body.color)
    db.add(status)
    await db.flush()
    return ApiResponse.ok(PaymentStatusResponse.model_validate(status))
