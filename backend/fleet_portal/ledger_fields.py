"""Ledger category and field registry.

Every editable ledger cell belongs to one of the categories below. A field is
either a currency amount (non-negative unless ``signed``) or an integer count
(``integer``). Split percentages are bounded to 0..100.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

MONTHS = range(1, 13)

# Month mode -> (management %, owner %)
MODE_SPLITS: dict[int, tuple[float, float]] = {
    50: (50.0, 50.0),
    70: (70.0, 30.0),
}
DEFAULT_MODE = 50


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    signed: bool = False
    integer: bool = False
    percent: bool = False


@dataclass(frozen=True)
class CategorySpec:
    key: str
    label: str
    fields: tuple[FieldSpec, ...]
    # Whether admins may add dynamic subcategories to this category
    dynamic: bool = False
    # Whether the category's fields count toward its monthly total
    summed: bool = True

    def field(self, key: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    @property
    def field_keys(self) -> list[str]:
        return [f.key for f in self.fields]


def _amounts(*pairs: tuple[str, str]) -> tuple[FieldSpec, ...]:
    return tuple(FieldSpec(key, label) for key, label in pairs)


INCOME_FIELDS: tuple[str, ...] = (
    "rental_income",
    "delivery_income",
    "electric_prepaid_income",
    "smoking_fines",
    "gas_prepaid_income",
    "ski_racks_income",
    "miles_income",
    "child_seat_income",
    "coolers_income",
    "insurance_wreck_income",
    "other_income",
)

INCOME = CategorySpec(
    key="income",
    label="Income & Expenses",
    summed=False,
    fields=_amounts(
        ("rental_income", "Rental Income"),
        ("delivery_income", "Delivery Income"),
        ("electric_prepaid_income", "Electric Prepaid Income"),
        ("smoking_fines", "Smoking Fines"),
        ("gas_prepaid_income", "Gas Prepaid Income"),
        ("ski_racks_income", "Ski Racks Income"),
        ("miles_income", "Miles Income"),
        ("child_seat_income", "Child Seat Income"),
        ("coolers_income", "Coolers Income"),
        ("insurance_wreck_income", "Insurance Wreck Income"),
        ("other_income", "Other Income"),
    )
    + (
        FieldSpec("negative_balance_carry_over", "Negative Balance Carry Over", signed=True),
        FieldSpec("car_payment", "Car Payment"),
        FieldSpec("car_management_split", "Car Management Split", percent=True),
        FieldSpec("car_owner_split", "Car Owner Split", percent=True),
        FieldSpec("car_management_total_expenses", "Car Management Total Expenses"),
        FieldSpec("car_owner_total_expenses", "Car Owner Total Expenses"),
    ),
)

DIRECT_DELIVERY = CategorySpec(
    key="direct_delivery",
    label="Direct Delivery",
    dynamic=True,
    fields=_amounts(
        ("labor_car_cleaning", "Labor - Car Cleaning"),
        ("labor_delivery", "Labor - Delivery"),
        ("parking_airport", "Parking - Airport"),
        ("parking_lot", "Parking - Lot"),
        ("uber_lyft_lime", "Uber/Lyft/Lime"),
    ),
)

COGS = CategorySpec(
    key="cogs",
    label="COGS",
    dynamic=True,
    fields=_amounts(
        ("auto_body_shop_wreck", "Auto Body Shop / Wreck"),
        ("alignment", "Alignment"),
        ("battery", "Battery"),
        ("brakes", "Brakes"),
        ("car_payment", "Car Payment"),
        ("car_insurance", "Car Insurance"),
        ("car_seats", "Car Seats"),
        ("cleaning_supplies_tools", "Cleaning Supplies / Tools"),
        ("emissions", "Emissions"),
        ("gps_system", "GPS System"),
        ("key_fob", "Key & Fob"),
        ("labor_cleaning", "Labor - Cleaning"),
        ("license_registration", "License & Registration"),
        ("mechanic", "Mechanic"),
        ("oil_lube", "Oil/Lube"),
        ("parts", "Parts"),
        ("ski_racks", "Ski Racks"),
        ("tickets", "Tickets & Tolls"),
        ("tired_air_station", "Tire Air Station"),
        ("tires", "Tires"),
        ("towing_impound_fees", "Towing / Impound Fees"),
        ("uber_lyft_lime", "Uber/Lyft/Lime"),
        ("windshield", "Windshield"),
        ("wipers", "Wipers"),
    ),
)

PARKING_FEE_LABOR = CategorySpec(
    key="parking_fee_labor",
    label="Parking Fee & Labor",
    dynamic=True,
    fields=_amounts(
        ("gla_parking_fee", "GLA Parking Fee"),
        ("labor_cleaning", "Labor - Cleaning"),
    ),
)

REIMBURSED_BILLS = CategorySpec(
    key="reimbursed_bills",
    label="Reimbursed Bills",
    dynamic=True,
    fields=_amounts(
        ("electric_reimbursed", "Electric - Reimbursed"),
        ("electric_not_reimbursed", "Electric - Not Reimbursed"),
        ("gas_reimbursed", "Gas - Reimbursed"),
        ("gas_not_reimbursed", "Gas - Not Reimbursed"),
        ("gas_service_run", "Gas - Service Run"),
        ("parking_airport", "Parking Airport"),
        ("uber_lyft_lime_not_reimbursed", "Uber/Lyft/Lime - Not Reimbursed"),
        ("uber_lyft_lime_reimbursed", "Uber/Lyft/Lime - Reimbursed"),
    ),
)

OFFICE_SUPPORT = CategorySpec(
    key="office_support",
    label="Office Support",
    fields=_amounts(
        ("accounting_professional_fees", "Accounting & Professional Fees"),
        ("advertizing", "Advertizing"),
        ("bank_charges", "Bank Charges"),
        ("detail_mobile", "Detail Mobile"),
        ("charitable_contributions", "Charitable Contributions"),
        ("computer_internet", "Computer & Internet"),
        ("delivery_postage_freight", "Delivery, Postage & Freight"),
        ("detail_shop_equipment", "Detail Shop Equipment"),
        ("dues_subscription", "Dues & Subscription"),
        ("general_administrative", "General and Administrative (G&A)"),
        ("health_wellness", "Health & Wellness"),
        ("labor_sales", "Labor - Sales"),
        ("labor_software", "Labor Software"),
        ("legal_professional", "Legal & Professional"),
        ("marketing", "Marketing"),
        ("meals_entertainment", "Meals & Entertainment"),
        ("office_expense", "Office Expense"),
        ("office_rent", "Office Rent"),
        ("outside_staff_contractors", "Outside & Staff Contractors"),
        ("park_n_jet_booth", "Park n Jet Booth"),
        ("printing", "Printing"),
        ("referral", "Referral"),
        ("repairs_maintenance", "Repairs & Maintenance"),
        ("sales_tax", "Sales Tax"),
        ("security_cameras", "Security Cameras"),
        ("shipping_freight_delivery", "Shipping, Freight & Delivery"),
        ("supplies_materials", "Supplies & Materials"),
        ("taxes_license", "Taxes & License"),
        ("telephone", "Telephone"),
        ("travel", "Travel"),
        ("depreciation_expense", "Depreciation Expense"),
        ("vehicle_depreciation_expense", "Vehicle Depreciation Expense"),
        ("vehicle_loan_interest_expense", "Vehicle Loan Interest Expense"),
    ),
)

HISTORY = CategorySpec(
    key="history",
    label="History",
    summed=False,
    fields=(
        FieldSpec("days_rented", "Days Rented", integer=True),
        FieldSpec("cars_available_for_rent", "Cars Available For Rent", integer=True),
        FieldSpec("trips_taken", "Trips Taken", integer=True),
    ),
)

PARKING_AIRPORT_QB = CategorySpec(
    key="parking_airport_qb",
    label="Parking Airport QB",
    fields=_amounts(("total_parking_airport", "Total Parking Airport")),
)

CATEGORIES: dict[str, CategorySpec] = {
    spec.key: spec
    for spec in (
        INCOME,
        DIRECT_DELIVERY,
        COGS,
        PARKING_FEE_LABOR,
        REIMBURSED_BILLS,
        OFFICE_SUPPORT,
        HISTORY,
        PARKING_AIRPORT_QB,
    )
}

DYNAMIC_CATEGORIES: tuple[str, ...] = tuple(
    key for key, spec in CATEGORIES.items() if spec.dynamic
)


def get_category(key: str) -> CategorySpec:
    """Return the category spec for ``key`` or raise ``ValueError``."""
    spec = CATEGORIES.get(key)
    if spec is None:
        raise ValueError(f"Unknown ledger category: {key}")
    return spec


def validate_value(category: CategorySpec, field: str, value: float) -> float:
    """Check ``value`` against the field's semantics and return it rounded."""
    spec = category.field(field)
    if spec is None:
        raise ValueError(f"Unknown field '{field}' in category '{category.key}'")
    if not math.isfinite(value):
        raise ValueError(f"{spec.label} must be a finite number")
    if spec.integer:
        if value != int(value):
            raise ValueError(f"{spec.label} must be a whole number")
        if value < 0:
            raise ValueError(f"{spec.label} cannot be negative")
        return float(int(value))
    if spec.percent and not 0 <= value <= 100:
        raise ValueError(f"{spec.label} must be between 0 and 100")
    if not spec.signed and value < 0:
        raise ValueError(f"{spec.label} cannot be negative")
    return round(value, 2)


def split_for_mode(mode: int) -> tuple[float, float]:
    """Return (management %, owner %) for a month mode."""
    if mode not in MODE_SPLITS:
        raise ValueError(f"Invalid month mode: {mode}. Expected 50 or 70")
    return MODE_SPLITS[mode]


def cell_value(category: CategorySpec, field: str, value: float) -> int | float:
    """Render a stored value with the field's type (counts as ints)."""
    spec = category.field(field)
    if spec is not None and spec.integer:
        return int(value)
    return value


def empty_ledger() -> dict[str, list[dict]]:
    """Twelve zero-filled month rows for every category."""
    return {
        key: [
            {"month": month, **{f.key: cell_value(spec, f.key, 0.0) for f in spec.fields}}
            for month in MONTHS
        ]
        for key, spec in CATEGORIES.items()
    }
