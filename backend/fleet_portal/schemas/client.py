from datetime import datetime

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)


class ClientUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)


class ClientResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    is_active: bool
    created_at: datetime

    # Joined fields
    car_count: int = 0

    model_config = {"from_attributes": True}
