from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.models.car import Car, CarStatus
from fleet_portal.models.client import Client
from fleet_portal.models.ledger_value import LedgerValue
from fleet_portal.models.payment import Payment
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.car import CarCreate, CarResponse, CarUpdate
from fleet_portal.schemas.common import ApiResponse, PageResponse

router = APIRouter(prefix="/cars", tags=["cars"])

# An explicit null on these leaves the stored value as it is.
REQUIRED_UPDATE_FIELDS = {"make", "model", "status"}


def _car_to_response(car: Car, owner: Client | None) -> CarResponse:
    resp = CarResponse.model_validate(car)
    if owner is not None:
        resp.owner_name = f"{owner.first_name} {owner.last_name}"
    return resp


async def _client_exists(db: AsyncSession, client_id: int) -> bool:
    result = await db.execute(select(Client.id).where(Client.id == client_id))
    return result.scalar_one_or_none() is not None


async def _vin_taken(db: AsyncSession, vin: str, exclude_id: int | None = None) -> bool:
    query = select(Car.id).where(Car.vin == vin)
    if exclude_id is not None:
        query = query.where(Car.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


@router.get("")
async def list_cars(
    search: str | None = Query(default=None),
    status: CarStatus | None = Query(default=None),
    client_id: int | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[CarResponse]:
    conditions = []
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(Car.make + " " + Car.model).like(pattern),
                func.lower(Car.vin).like(pattern),
                func.lower(Car.license_plate).like(pattern),
            )
        )
    if status is not None:
        conditions.append(Car.status == status)
    if client_id is not None:
        conditions.append(Car.client_id == client_id)

    total = (await db.execute(select(func.count(Car.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Car, Client)
        .outerjoin(Client, Car.client_id == Client.id)
        .where(*conditions)
        .order_by(Car.make, Car.model, Car.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    cars = [_car_to_response(car, owner) for car, owner in result.all()]
    return PageResponse.ok(cars, total=total, page=page, limit=limit)


@router.get("/{car_id}")
async def get_car(
    car_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[CarResponse]:
    result = await db.execute(
        select(Car, Client)
        .outerjoin(Client, Car.client_id == Client.id)
        .where(Car.id == car_id)
    )
    row = result.one_or_none()
    if row is None:
        return ApiResponse.fail(f"Car with id {car_id} not found")
    return ApiResponse.ok(_car_to_response(*row))


@router.post("", dependencies=[Depends(require_admin)])
async def create_car(
    body: CarCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[CarResponse]:
    if body.client_id is not None and not await _client_exists(db, body.client_id):
        return ApiResponse.fail(f"Client with id {body.client_id} not found")
    if body.vin and await _vin_taken(db, body.vin):
        return ApiResponse.fail(f"A car with VIN {body.vin} already exists")
    car = Car(**body.model_dump())
    db.add(car)
    await db.flush()
    return ApiResponse.ok(CarResponse.model_validate(car))


@router.put("/{car_id}", dependencies=[Depends(require_admin)])
async def update_car(
    car_id: int,
    body: CarUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[CarResponse]:
    result = await db.execute(select(Car).where(Car.id == car_id))
    car = result.scalar_one_or_none()
    if car is None:
        return ApiResponse.fail(f"Car with id {car_id} not found")

    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_UPDATE_FIELDS
    }
    if changes.get("client_id") is not None and not await _client_exists(db, changes["client_id"]):
        return ApiResponse.fail(f"Client with id {changes['client_id']} not found")
    if changes.get("vin") and await _vin_taken(db, changes["vin"], exclude_id=car_id):
        return ApiResponse.fail(f"A car with VIN {changes['vin']} already exists")
    for key, value in changes.items():
        setattr(car, key, value)
    await db.flush()
    return ApiResponse.ok(CarResponse.model_validate(car))


@router.delete("/{car_id}", dependencies=[Depends(require_admin)])
async def delete_car(
    car_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    result = await db.execute(select(Car).where(Car.id == car_id))
    car = result.scalar_one_or_none()
    if car is None:
        return ApiResponse.fail(f"Car with id {car_id} not found")

    ledger = await db.execute(select(LedgerValue.id).where(LedgerValue.car_id == car_id).limit(1))
    payments = await db.execute(select(Payment.id).where(Payment.car_id == car_id).limit(1))
    if ledger.first() is not None or payments.first() is not None:
        return ApiResponse.fail(
            "Cannot delete a car with ledger entries or payments; offboard it instead"
        )
    await db.delete(car)
    return ApiResponse.ok(None)
