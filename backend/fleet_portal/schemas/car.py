from datetime import datetime

from pydantic import BaseModel, Field

from fleet_portal.models.car import CarStatus


class CarCreate(BaseModel):
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int | None = Field(None, ge=1950, le=2100)
    vin: str | None = Field(None, max_length=50)
    license_plate: str | None = Field(None, max_length=20)
    status: CarStatus = CarStatus.AVAILABLE
    client_id: int | None = None
    turo_link: str | None = Field(None, max_length=500)
    admin_turo_link: str | None = Field(None, max_length=500)
    fuel_gas: str | None = Field(None, max_length=50)
    tire_size: str | None = Field(None, max_length=50)
    oil_type: str | None = Field(None, max_length=50)


class CarUpdate(BaseModel):
    make: str | None = Field(None, min_length=1, max_length=100)
    model: str | None = Field(None, min_length=1, max_length=100)
    year: int | None = Field(None, ge=1950, le=2100)
    vin: str | None = Field(None, max_length=50)
    license_plate: str | None = Field(None, max_length=20)
    status: CarStatus | None = None
    client_id: int | None = None
    turo_link: str | None = Field(None, max_length=500)
    admin_turo_link: str | None = Field(None, max_length=500)
    fuel_gas: str | None = Field(None, max_length=50)
    tire_size: str | None = Field(None, max_length=50)
    oil_type: str | None = Field(None, max_length=50)


class CarResponse(BaseModel):
    id: int
    make: str
    model: str
    make_model: str
    year: int | None
    vin: str | None
    license_plate: str | None
    status: CarStatus
    client_id: int | None
    turo_link: str | None
    admin_turo_link: str | None
    fuel_gas: str | None
    tire_size: str | None
    oil_type: str | None
    created_at: datetime

    # Joined fields
    owner_name: str | None = None

    model_config = {"from_attributes": True}
