from datetime import datetime

from pydantic import BaseModel, Field

from fleet_portal.models.inspection_form import FormStatus, FormType


class InspectionFormCreate(BaseModel):
    car_id: int
    form_type: FormType
    mileage: int = Field(..., ge=0)
    fuel_level: str = Field(..., pattern=r"^(empty|1/4|1/2|3/4|full)$")
    notes: str | None = Field(None, max_length=5000)


class DeclineRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class InspectionFormResponse(BaseModel):
    id: int
    car_id: int
    submitted_by: int | None
    form_type: FormType
    mileage: int
    fuel_level: str
    notes: str | None
    status: FormStatus
    decline_reason: str | None
    reviewed_by: int | None
    submitted_at: datetime
    reviewed_at: datetime | None

    model_config = {"from_attributes": True}
