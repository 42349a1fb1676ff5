import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.models.car import Car, CarStatus
from fleet_portal.models.client import Client
from fleet_portal.models.payment import Payment, PaymentStatus
from fleet_portal.schemas.payment import PaymentCreate, PaymentSearch, PaymentUpdate
from fleet_portal.utils.date_helpers import parse_year_month

logger = logging.getLogger(__name__)

PaymentRow = tuple[Payment, Client, Car | None, PaymentStatus]

# Columns an update may not clear; an explicit null leaves them unchanged.
REQUIRED_UPDATE_FIELDS = {"status_id", "amount_payable", "amount_paid"}


def _joined_query():
    return (
        select(Payment, Client, Car, PaymentStatus)
        .join(Client, Payment.client_id == Client.id)
        .outerjoin(Car, Payment.car_id == Car.id)
        .join(PaymentStatus, Payment.status_id == PaymentStatus.id)
    )


async def search_payments(
    db: AsyncSession, filters: PaymentSearch
) -> tuple[list[PaymentRow], int]:
    """Filter payments by client/car text, status name and year-month."""
    conditions = []
    if filters.search_value and filters.search_value.strip():
        pattern = f"%{filters.search_value.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(Client.first_name + " " + Client.last_name).like(pattern),
                func.lower(Car.make + " " + Car.model).like(pattern),
                func.lower(Car.license_plate).like(pattern),
            )
        )
    if filters.status:
        conditions.append(func.lower(PaymentStatus.name) == filters.status.strip().lower())
    if filters.month_year:
        conditions.append(Payment.year_month == filters.month_year)

    count_query = (
        select(func.count(Payment.id))
        .join(Client, Payment.client_id == Client.id)
        .outerjoin(Car, Payment.car_id == Car.id)
        .join(PaymentStatus, Payment.status_id == PaymentStatus.id)
        .where(*conditions)
    )
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(
        _joined_query()
        .where(*conditions)
        .order_by(Payment.year_month.desc(), Client.last_name, Payment.id)
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return [tuple(row) for row in result.all()], total


async def get_payment_row(db: AsyncSession, payment_id: int) -> PaymentRow | None:
    result = await db.execute(_joined_query().where(Payment.id == payment_id))
    row = result.one_or_none()
    return tuple(row) if row is not None else None


async def _require(db: AsyncSession, model, obj_id: int, label: str):
    result = await db.execute(select(model).where(model.id == obj_id))
    obj = result.scalar_one_or_none()
    if obj is None:
        raise ValueError(f"{label} with id {obj_id} not found")
    return obj


async def create_payment(db: AsyncSession, data: PaymentCreate) -> Payment:
    await _require(db, Client, data.client_id, "Client")
    await _require(db, PaymentStatus, data.status_id, "Payment status")
    if data.car_id is not None:
        await _require(db, Car, data.car_id, "Car")
    payment = Payment(**data.model_dump())
    db.add(payment)
    await db.flush()
    return payment


async def update_payment(
    db: AsyncSession, payment_id: int, data: PaymentUpdate
) -> Payment | None:
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        return None
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_UPDATE_FIELDS
    }
    if changes.get("status_id") is not None:
        await _require(db, PaymentStatus, changes["status_id"], "Payment status")
    for key, value in changes.items():
        setattr(payment, key, value)
    await db.flush()
    return payment


async def delete_payment(db: AsyncSession, payment_id: int) -> bool:
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        return False
    await db.delete(payment)
    await db.flush()
    return True


async def create_payments_for_month(db: AsyncSession, year_month: str) -> dict:
    """Create a 'To Pay' payment for every active client-car pair.

    Pairs that already have a payment for the month are skipped.
    """
    parse_year_month(year_month)
    result = await db.execute(
        select(PaymentStatus).where(PaymentStatus.name == settings.TO_PAY_STATUS)
    )
    to_pay = result.scalar_one_or_none()
    if to_pay is None:
        raise ValueError(f'Payment status "{settings.TO_PAY_STATUS}" is required')

    pairs_result = await db.execute(
        select(Car.id, Car.client_id)
        .join(Client, Car.client_id == Client.id)
        .where(Client.is_active.is_(True), Car.status != CarStatus.OFFBOARDED)
        .order_by(Car.id)
    )
    pairs = pairs_result.all()

    existing_result = await db.execute(
        select(Payment.client_id, Payment.car_id).where(Payment.year_month == year_month)
    )
    existing = {(row.client_id, row.car_id) for row in existing_result.all()}

    created = 0
    for car_id, client_id in pairs:
        if (client_id, car_id) in existing:
            continue
        db.add(
            Payment(
                client_id=client_id,
                car_id=car_id,
                status_id=to_pay.id,
                year_month=year_month,
            )
        )
        created += 1
    await db.flush()
    logger.info("Created %d payment(s) for %s", created, year_month)
    return {"year_month": year_month, "created": created, "skipped": len(pairs) - created}


async def delete_payments_for_month(db: AsyncSession, year_month: str) -> int:
    parse_year_month(year_month)
    result = await db.execute(delete(Payment).where(Payment.year_month == year_month))
    logger.info("Deleted %d payment(s) for %s", result.rowcount, year_month)
    return result.rowcount


async def list_statuses(db: AsyncSession) -> list[PaymentStatus]:
    result = await db.execute(select(PaymentStatus).order_by(PaymentStatus.id))
    return list(result.scalars().all())


async def seed_statuses(db: AsyncSession) -> int:
    """Create the default payment statuses that are missing."""
    existing = {s.name for s in await list_statuses(db)}
    added = 0
    for name, color in settings.DEFAULT_PAYMENT_STATUSES:
        if name not in existing:
            db.add(PaymentStatus(name=name, color=color))
            added += 1
    await db.flush()
    return added
