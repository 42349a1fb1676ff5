import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from fleet_portal.config import settings
from fleet_portal.database import async_session_factory, init_db
from fleet_portal.models.user import User, UserRole
from fleet_portal.routers import (
    admin_users,
    auth,
    cars,
    clients,
    forms,
    income_expense,
    navigation,
    notifications,
    payment_status,
    payments,
    quick_links,
    turo_trips,
)
from fleet_portal.routers.auth import get_current_user
from fleet_portal.services.payment_service import seed_statuses
from fleet_portal.utils.auth import hash_password
from fleet_portal.utils.log_setup import configure_logging

logger = logging.getLogger(__name__)


async def _seed_admin() -> None:
    """Create default admin user if no users exist."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).limit(1))
        if result.scalar_one_or_none() is not None:
            return

        admin = User(
            email=settings.DEFAULT_ADMIN_EMAIL,
            first_name="Portal",
            last_name="Admin",
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            is_active=True,
        )
        session.add(admin)
        await session.commit()
        logger.info("Seeded default admin %s", settings.DEFAULT_ADMIN_EMAIL)


async def _seed_payment_statuses() -> None:
    async with async_session_factory() as session:
        added = await seed_statuses(session)
        await session.commit()
        if added:
            logger.info("Seeded %d payment status(es)", added)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.LOG_LEVEL)
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    settings.RECEIPTS_DIR.mkdir(parents=True, exist_ok=True)
    await init_db()
    await _seed_admin()
    await _seed_payment_statuses()
    yield
    # Shutdown (nothing to clean up)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers under /api; everything but auth needs a session
API_PREFIX = "/api"
_signed_in = [Depends(get_current_user)]
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(navigation.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(cars.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(clients.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(admin_users.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(income_expense.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(payments.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(payment_status.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(turo_trips.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(notifications.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(quick_links.router, prefix=API_PREFIX, dependencies=_signed_in)
app.include_router(forms.router, prefix=API_PREFIX, dependencies=_signed_in)


@app.get("/health")
async def health_check() -> dict:
    return {"status": "ok", "version": settings.APP_VERSION}
