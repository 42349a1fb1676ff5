import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.models.car import Car, CarStatus
from fleet_portal.models.inspection_form import FormStatus, FormType, InspectionForm
from fleet_portal.models.notification import Notification
from fleet_portal.models.user import User
from fleet_portal.schemas.form import InspectionFormCreate

logger = logging.getLogger(__name__)


async def submit_form(
    db: AsyncSession, data: InspectionFormCreate, submitter: User
) -> InspectionForm:
    result = await db.execute(select(Car).where(Car.id == data.car_id))
    car = result.scalar_one_or_none()
    if car is None:
        raise ValueError(f"Car with id {data.car_id} not found")
    if car.status == CarStatus.OFFBOARDED:
        raise ValueError("Cannot submit a form for an offboarded car")

    form = InspectionForm(
        car_id=data.car_id,
        submitted_by=submitter.id,
        form_type=data.form_type,
        mileage=data.mileage,
        fuel_level=data.fuel_level,
        notes=data.notes,
    )
    db.add(form)
    await db.flush()
    logger.info("Inspection form %d (%s) submitted for car %d", form.id, form.form_type.value, car.id)
    return form


async def list_forms(
    db: AsyncSession,
    status: FormStatus | None = None,
    submitted_by: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[InspectionForm], int]:
    conditions = []
    if status is not None:
        conditions.append(InspectionForm.status == status)
    if submitted_by is not None:
        conditions.append(InspectionForm.submitted_by == submitted_by)

    total = (
        await db.execute(select(func.count(InspectionForm.id)).where(*conditions))
    ).scalar() or 0
    result = await db.execute(
        select(InspectionForm)
        .where(*conditions)
        .order_by(InspectionForm.submitted_at.desc(), InspectionForm.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def review_form(
    db: AsyncSession,
    form_id: int,
    reviewer: User,
    approve: bool,
    reason: str | None = None,
) -> InspectionForm | None:
    """Approve or decline a pending form and notify the submitter.

    Approving a going-out form marks the car rented; approving a coming-back
    form marks it available again.
    """
    result = await db.execute(select(InspectionForm).where(InspectionForm.id == form_id))
    form = result.scalar_one_or_none()
    if form is None:
        return None
    if form.status != FormStatus.PENDING:
        raise ValueError(f"Form {form_id} has already been {form.status.value}")

    form.status = FormStatus.APPROVED if approve else FormStatus.DECLINED
    form.decline_reason = None if approve else reason
    form.reviewed_by = reviewer.id
    form.reviewed_at = datetime.now(timezone.utc)

    if approve:
        car_result = await db.execute(select(Car).where(Car.id == form.car_id))
        car = car_result.scalar_one_or_none()
        if car is not None:
            car.status = (
                CarStatus.RENTED if form.form_type == FormType.GOING_OUT else CarStatus.AVAILABLE
            )

    if form.submitted_by is not None:
        verdict = "approved" if approve else "declined"
        db.add(
            Notification(
                user_id=form.submitted_by,
                title=f"Inspection form {verdict}",
                message=reason if not approve else None,
                link=f"/staff/forms/{form.id}",
            )
        )
    await db.flush()
    logger.info("Inspection form %d %s by user %d", form.id, form.status.value, reviewer.id)
    return form
