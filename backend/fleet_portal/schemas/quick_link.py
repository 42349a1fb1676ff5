from datetime import datetime

from pydantic import BaseModel, Field

URL_PATTERN = r"^https?://\S+$"


class QuickLinkCreate(BaseModel):
    category: str = Field("General", min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., max_length=1000, pattern=URL_PATTERN)
    visible_to_admins: bool = True
    visible_to_clients: bool = False
    visible_to_employees: bool = False


class QuickLinkUpdate(BaseModel):
    category: str | None = Field(None, min_length=1, max_length=100)
    title: str | None = Field(None, min_length=1, max_length=200)
    url: str | None = Field(None, max_length=1000, pattern=URL_PATTERN)
    visible_to_admins: bool | None = None
    visible_to_clients: bool | None = None
    visible_to_employees: bool | None = None


class QuickLinkResponse(BaseModel):
    id: int
    category: str
    title: str
    url: str
    visible_to_admins: bool
    visible_to_clients: bool
    visible_to_employees: bool
    created_at: datetime

    model_config = {"from_attributes": True}
