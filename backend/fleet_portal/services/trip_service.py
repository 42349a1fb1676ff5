import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.models.car import Car
from fleet_portal.models.turo_trip import TripStatus, TuroTrip
from fleet_portal.schemas.trip import TripImport

logger = logging.getLogger(__name__)


async def list_trips(
    db: AsyncSession,
    status: TripStatus | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[tuple[TuroTrip, Car | None]], int]:
    conditions = []
    if status is not None:
        conditions.append(TuroTrip.status == status)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(TuroTrip.guest_name).like(pattern),
                func.lower(TuroTrip.reservation_id).like(pattern),
                func.lower(Car.make + " " + Car.model).like(pattern),
            )
        )

    total_result = await db.execute(
        select(func.count(TuroTrip.id))
        .outerjoin(Car, TuroTrip.car_id == Car.id)
        .where(*conditions)
    )
    total = total_result.scalar() or 0

    result = await db.execute(
        select(TuroTrip, Car)
        .outerjoin(Car, TuroTrip.car_id == Car.id)
        .where(*conditions)
        .order_by(TuroTrip.trip_start.desc(), TuroTrip.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return [tuple(row) for row in result.all()], total


async def get_summary(db: AsyncSession) -> dict:
    """Trip counts by status; earnings exclude cancelled trips."""
    result = await db.execute(
        select(
            TuroTrip.status,
            func.count(TuroTrip.id).label("trips"),
            func.coalesce(func.sum(TuroTrip.earnings), 0).label("earnings"),
        ).group_by(TuroTrip.status)
    )
    by_status = {status.value: 0 for status in TripStatus}
    total_trips = 0
    total_earnings = 0.0
    for row in result.all():
        by_status[row.status.value] = int(row.trips)
        total_trips += int(row.trips)
        if row.status != TripStatus.CANCELLED:
            total_earnings += float(row.earnings)
    return {
        "total_trips": total_trips,
        "total_earnings": round(total_earnings, 2),
        "by_status": by_status,
    }


async def import_trips(db: AsyncSession, trips: list[TripImport]) -> dict:
    """Insert new trips and update existing ones by reservation id."""
    ids = [t.reservation_id for t in trips]
    result = await db.execute(select(TuroTrip).where(TuroTrip.reservation_id.in_(ids)))
    existing = {trip.reservation_id: trip for trip in result.scalars().all()}

    car_ids = {t.car_id for t in trips if t.car_id is not None}
    known_cars: set[int] = set()
    if car_ids:
        car_result = await db.execute(select(Car.id).where(Car.id.in_(car_ids)))
        known_cars = set(car_result.scalars().all())

    created = updated = 0
    errors: list[str] = []
    for data in trips:
        if data.car_id is not None and data.car_id not in known_cars:
            errors.append(f"{data.reservation_id}: car {data.car_id} not found")
            continue
        trip = existing.get(data.reservation_id)
        if trip is None:
            trip = TuroTrip(**data.model_dump())
            db.add(trip)
            existing[data.reservation_id] = trip
            created += 1
        else:
            for key, value in data.model_dump().items():
                setattr(trip, key, value)
            updated += 1
    await db.flush()
    logger.info("Trip import: %d created, %d updated, %d rejected", created, updated, len(errors))
    return {"created": created, "updated": updated, "errors": errors}
