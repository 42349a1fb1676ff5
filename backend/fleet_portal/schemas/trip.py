from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from fleet_portal.models.turo_trip import TripStatus


class TripImport(BaseModel):
    reservation_id: str = Field(..., min_length=1, max_length=50)
    car_id: int | None = None
    guest_name: str = Field(..., min_length=1, max_length=200)
    status: TripStatus = TripStatus.BOOKED
    trip_start: datetime
    trip_end: datetime
    earnings: float = Field(0.0, ge=0)
    total_distance: str | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "TripImport":
        if self.trip_end < self.trip_start:
            raise ValueError("trip_end must not be before trip_start")
        return self


class TripImportRequest(BaseModel):
    trips: list[TripImport] = Field(..., min_length=1)


class TripResponse(BaseModel):
    id: int
    reservation_id: str
    car_id: int | None
    guest_name: str
    status: TripStatus
    trip_start: datetime
    trip_end: datetime
    earnings: float
    total_distance: str | None

    # Joined fields
    car_name: str | None = None

    model_config = {"from_attributes": True}


class TripSummary(BaseModel):
    total_trips: int
    total_earnings: float
    by_status: dict[str, int]
