from fleet_portal.schemas.common import ApiResponse, PageResponse
from fleet_portal.schemas.user import LoginRequest, UserCreate, UserResponse, UserUpdate
from fleet_portal.schemas.car import CarCreate, CarResponse, CarUpdate
from fleet_portal.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from fleet_portal.schemas.ledger import (
    FormulaUpdate,
    LedgerLogResponse,
    LedgerResponse,
    LedgerUpdate,
)
from fleet_portal.schemas.payment import (
    PaymentCreate,
    PaymentResponse,
    PaymentSearch,
    PaymentUpdate,
)

__all__ = [
    "ApiResponse",
    "PageResponse",
    "LoginRequest",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "CarCreate",
    "CarResponse",
    "CarUpdate",
    "ClientCreate",
    "ClientResponse",
    "ClientUpdate",
    "FormulaUpdate",
    "LedgerLogResponse",
    "LedgerResponse",
    "LedgerUpdate",
    "PaymentCreate",
    "PaymentResponse",
    "PaymentSearch",
    "PaymentUpdate",
]
