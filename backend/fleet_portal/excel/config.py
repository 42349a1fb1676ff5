"""Layout of the income and expense workbook.

One sheet per ledger category, named after the category label. Row 1 holds
the car and year, row 2 the headers. Data rows start at row 3 with the field
label in column A, the field key in column B and January..December in
columns C..N.
"""

from typing import Final

from fleet_portal.ledger_fields import CATEGORIES

TITLE_ROW: Final[int] = 1
HEADER_ROW: Final[int] = 2
DATA_START_ROW: Final[int] = 3

LABEL_COL: Final[int] = 1  # A
KEY_COL: Final[int] = 2  # B
FIRST_MONTH_COL: Final[int] = 3  # C = January
LAST_MONTH_COL: Final[int] = FIRST_MONTH_COL + 11  # N = December

TOTALS_SHEET: Final[str] = "Totals"

# Key prefix for rows that belong to dynamic subcategories. Those rows are
# exported for reference but not imported.
DYNAMIC_KEY_PREFIX: Final[str] = "dynamic:"

# Sheet titles are capped at 31 characters by Excel
SHEET_TITLES: Final[dict[str, str]] = {
    key: spec.label[:31] for key, spec in CATEGORIES.items()
}
CATEGORY_BY_TITLE: Final[dict[str, str]] = {
    title: key for key, title in SHEET_TITLES.items()
}


def month_to_col(month: int) -> int:
    """Convert a month number (1-12) to its column index."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    return FIRST_MONTH_COL + month - 1
