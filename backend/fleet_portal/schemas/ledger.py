from datetime import datetime

from pydantic import BaseModel, Field


class LedgerUpdate(BaseModel):
    """Point update of one month of one category."""

    car_id: int
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    values: dict[str, float] = Field(..., min_length=1)
    remarks: str | None = Field(None, max_length=2000)


class FormulaUpdate(BaseModel):
    car_id: int
    year: int = Field(..., ge=2000, le=2100)
    month_modes: dict[int, int]


class FormulaSettingResponse(BaseModel):
    car_id: int
    year: int
    month_modes: dict[int, int]


class DynamicValue(BaseModel):
    month: int
    value: float

    model_config = {"from_attributes": True}


class DynamicSubcategoryCreate(BaseModel):
    car_id: int
    year: int = Field(..., ge=2000, le=2100)
    category_type: str
    name: str = Field(..., min_length=1, max_length=200)


class DynamicSubcategoryRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class DynamicValueSet(BaseModel):
    month: int = Field(..., ge=1, le=12)
    value: float = Field(..., ge=0, allow_inf_nan=False)


class DynamicSubcategoryResponse(BaseModel):
    id: int
    car_id: int
    year: int
    category_type: str
    name: str
    display_order: int
    values: list[DynamicValue] = []

    model_config = {"from_attributes": True}


class LedgerResponse(BaseModel):
    car_id: int
    year: int
    formula_setting: FormulaSettingResponse
    # category -> twelve month rows of {"month": n, field: value, ...}
    categories: dict[str, list[dict[str, int | float]]]
    remarks: dict[str, str] = {}
    dynamic_subcategories: dict[str, list[DynamicSubcategoryResponse]]


class LedgerLogResponse(BaseModel):
    id: int
    car_id: int
    year: int
    month: int
    category: str
    field: str
    field_label: str
    old_value: float
    new_value: float
    remarks: str | None
    changed_by: int | None
    changed_by_name: str | None
    ip_address: str | None
    changed_at: datetime

    model_config = {"from_attributes": True}


class LedgerReceiptResponse(BaseModel):
    id: int
    car_id: int
    year: int
    month: int
    category: str
    field: str
    filename: str
    uploaded_by: int | None
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class ImportResult(BaseModel):
    cells_changed: int
    skipped: int
    errors: list[str]
