from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.database import get_db
from fleet_portal.models.car import Car
from fleet_portal.models.client import Client
from fleet_portal.models.payment import Payment, PaymentStatus
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.common import ApiResponse, PageResponse
from fleet_portal.schemas.payment import (
    PaymentCreate,
    PaymentResponse,
    PaymentSearch,
    PaymentUpdate,
    YearMonthRequest,
)
from fleet_portal.services import payment_service

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    dependencies=[Depends(require_admin)],
)


def _row_to_response(
    payment: Payment, client: Client, car: Car | None, status: PaymentStatus
) -> PaymentResponse:
    resp = PaymentResponse.model_validate(payment)
    resp.client_name = f"{client.first_name} {client.last_name}"
    resp.car_name = car.make_model if car is not None else None
    resp.status_name = status.name
    resp.status_color = status.color
    resp.balance = round(payment.amount_payable - payment.amount_paid, 2)
    return resp


@router.post("/search")
async def search_payments(
    body: PaymentSearch,
    db: AsyncSession = Depends(get_db),
) -> PageResponse[PaymentResponse]:
    rows, total = await payment_service.search_payments(db, body)
    return PageResponse.ok(
        [_row_to_response(*row) for row in rows],
        total=total,
        page=body.page,
        limit=body.limit,
    )


@router.post("")
async def create_payment(
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PaymentResponse]:
    try:
        payment = await payment_service.create_payment(db, body)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    row = await payment_service.get_payment_row(db, payment.id)
    return ApiResponse.ok(_row_to_response(*row))


@router.post("/create-by-month")
async def create_payments_by_month(
    body: YearMonthRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[dict]:
    """Create a 'To Pay' payment for every active client car in the month."""
    try:
        return ApiResponse.ok(await payment_service.create_payments_for_month(db, body.year_month))
    except ValueError as e:
        return ApiResponse.fail(str(e))


@router.post("/delete-by-year-month")
async def delete_payments_by_month(
    body: YearMonthRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[dict]:
    deleted = await payment_service.delete_payments_for_month(db, body.year_month)
    return ApiResponse.ok({"year_month": body.year_month, "deleted": deleted})


@router.put("/{payment_id}")
async def update_payment(
    payment_id: int,
    body: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PaymentResponse]:
    try:
        payment = await payment_service.update_payment(db, payment_id, body)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    if payment is None:
        return ApiResponse.fail(f"Payment with id {payment_id} not found")
    row = await payment_service.get_payment_row(db, payment.id)
    return ApiResponse.ok(_row_to_response(*row))


@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    deleted = await payment_service.delete_payment(db, payment_id)
    if not deleted:
        return ApiResponse.fail(f"Payment with id {payment_id} not found")
    return ApiResponse.ok(None)
