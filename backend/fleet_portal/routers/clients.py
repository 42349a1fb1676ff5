from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.models.car import Car
from fleet_portal.models.client import Client
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from fleet_portal.schemas.common import ApiResponse, PageResponse

router = APIRouter(
    prefix="/clients",
    tags=["clients"],
    dependencies=[Depends(require_admin)],
)

# An explicit null on these leaves the stored name as it is.
REQUIRED_UPDATE_FIELDS = {"first_name", "last_name"}


def _client_to_response(client: Client, car_count: int) -> ClientResponse:
    resp = ClientResponse.model_validate(client)
    resp.car_count = car_count
    return resp


async def _email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    query = select(Client.id).where(func.lower(Client.email) == email.lower())
    if exclude_id is not None:
        query = query.where(Client.id != exclude_id)
    return (await db.execute(query)).scalar_one_or_none() is not None


@router.get("")
async def list_clients(
    search: str | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[ClientResponse]:
    conditions = []
    if not include_inactive:
        conditions.append(Client.is_active.is_(True))
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(Client.first_name + " " + Client.last_name).like(pattern),
                func.lower(Client.email).like(pattern),
                Client.phone.like(pattern),
            )
        )

    total = (await db.execute(select(func.count(Client.id)).where(*conditions))).scalar() or 0
    car_count = (
        select(Car.client_id, func.count(Car.id).label("car_count"))
        .group_by(Car.client_id)
        .subquery()
    )
    result = await db.execute(
        select(Client, func.coalesce(car_count.c.car_count, 0))
        .outerjoin(car_count, car_count.c.client_id == Client.id)
        .where(*conditions)
        .order_by(Client.last_name, Client.first_name, Client.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    clients = [_client_to_response(client, int(count)) for client, count in result.all()]
    return PageResponse.ok(clients, total=total, page=page, limit=limit)


@router.get("/{client_id}")
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClientResponse]:
    result = await db.execute(select(Client).where(Client.id == client_id))
    client = result.scalar_one_or_none()
    if client is None:
        return ApiResponse.fail(f"Client with id {client_id} not found")
    count = await db.execute(select(func.count(Car.id)).where(Car.client_id == client_id))
    return ApiResponse.ok(_client_to_response(client, count.scalar() or 0))


@router.post("")
async def create_client(
    body: ClientCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClientResponse]:
    if body.email and await _email_taken(db, body.email):
        return ApiResponse.fail(f"A client with email {body.email} already exists")
    client = Client(**body.model_dump())
    db.add(client)
    await db.flush()
    return ApiResponse.ok(_client_to_response(client, 0))


@router.put("/{client_id}")
async def update_client(
    client_id: int,
    body: ClientUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClientResponse]:
    result = await db.execute(select(Client).where(Client.id == client_id))
    client = result.scalar_one_or_none()
    if client is None:
        return ApiResponse.fail(f"Client with id {client_id} not found")
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_UPDATE_FIELDS
    }
    if changes.get("email") and await _email_taken(db, changes["email"], client_id):
        return ApiResponse.fail(f"A client with email {changes['email']} already exists")
    for key, value in changes.items():
        setattr(client, key, value)
    await db.flush()
    count = await db.execute(select(func.count(Car.id)).where(Car.client_id == client_id))
    return ApiResponse.ok(_client_to_response(client, count.scalar() or 0))


@router.post("/{client_id}/deactivate")
async def deactivate_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ClientResponse]:
    result = await db.execute(select(Client).where(Client.id == client_id))
    client = result.scalar_one_or_none()
    if client is None:
        return ApiResponse.fail(f"Client with id {client_id} not found")
    client.is_active = False
    await db.flush()
    count = await db.execute(select(func.count(Car.id)).where(Car.client_id == client_id))
    return ApiResponse.ok(_client_to_response(client, count.scalar() or 0))
