from datetime import date, datetime

from pydantic import BaseModel, Field

YEAR_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class PaymentStatusCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field("#6b7280", pattern=r"^#[0-9a-fA-F]{6}$")


class PaymentStatusResponse(BaseModel):
    id: int
    name: str
    color: str

    model_config = {"from_attributes": True}


class PaymentCreate(BaseModel):
    client_id: int
    car_id: int | None = None
    status_id: int
    year_month: str = Field(..., pattern=YEAR_MONTH_PATTERN)
    amount_payable: float = Field(0.0, ge=0)
    amount_paid: float = Field(0.0, ge=0)
    payment_date: date | None = None
    reference: str | None = Field(None, max_length=200)
    remarks: str | None = None


class PaymentUpdate(BaseModel):
    status_id: int | None = None
    amount_payable: float | None = Field(None, ge=0)
    amount_paid: float | None = Field(None, ge=0)
    payment_date: date | None = None
    reference: str | None = Field(None, max_length=200)
    remarks: str | None = None


class PaymentSearch(BaseModel):
    search_value: str | None = None
    status: str | None = None
    month_year: str | None = Field(None, pattern=YEAR_MONTH_PATTERN)
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=200)


class YearMonthRequest(BaseModel):
    year_month: str = Field(..., pattern=YEAR_MONTH_PATTERN)


class PaymentResponse(BaseModel):
    id: int
    client_id: int
    car_id: int | None
    status_id: int
    year_month: str
    amount_payable: float
    amount_paid: float
    payment_date: date | None
    reference: str | None
    remarks: str | None
    created_at: datetime

    # Joined fields
    client_name: str | None = None
    car_name: str | None = None
    status_name: str | None = None
    status_color: str | None = None
    balance: float = 0.0

    model_config = {"from_attributes": True}
