from datetime import datetime

from pydantic import BaseModel, Field

from fleet_portal.models.user import UserRole


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=200, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    password: str = Field(..., min_length=4, max_length=100)
    role: UserRole = UserRole.EMPLOYEE


class UserUpdate(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    role: UserRole | None = None
    is_active: bool | None = None
    password: str | None = Field(None, min_length=4, max_length=100)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}
