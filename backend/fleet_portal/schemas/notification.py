from datetime import datetime

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1, max_length=200)
    message: str | None = None
    link: str | None = Field(None, max_length=500)


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    title: str
    message: str | None
    link: str | None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
