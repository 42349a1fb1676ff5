from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.models.turo_trip import TripStatus
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.common import ApiResponse, PageResponse
from fleet_portal.schemas.trip import TripImportRequest, TripResponse, TripSummary
from fleet_portal.services import trip_service

router = APIRouter(
    prefix="/turo-trips",
    tags=["turo-trips"],
    dependencies=[Depends(require_admin)],
)


@router.get("")
async def list_trips(
    status: TripStatus | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[TripResponse]:
    rows, total = await trip_service.list_trips(
        db, status=status, search=search, page=page, limit=limit
    )
    trips = []
    for trip, car in rows:
        resp = TripResponse.model_validate(trip)
        resp.car_name = car.make_model if car is not None else None
        trips.append(resp)
    return PageResponse.ok(trips, total=total, page=page, limit=limit)


@router.get("/summary")
async def get_summary(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TripSummary]:
    return ApiResponse.ok(TripSummary(**await trip_service.get_summary(db)))


@router.post("/import")
async def import_trips(
    body: TripImportRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[dict]:
    """Upsert trips by reservation id."""
    return ApiResponse.ok(await trip_service.import_trips(db, body.trips))
