"""Read ledger cells back out of an exported workbook.

Never modifies the workbook. Only sheets whose title matches a ledger
category are read; the totals sheet and dynamic subcategory rows are
ignored.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import openpyxl

from fleet_portal.excel.config import (
    CATEGORY_BY_TITLE,
    DATA_START_ROW,
    DYNAMIC_KEY_PREFIX,
    KEY_COL,
    month_to_col,
)
from fleet_portal.ledger_fields import CATEGORIES, MONTHS


def _to_str(value: Any) -> str | None:
    """Convert cell value to string or None."""
    if value is None:
        return None
    return str(value).strip() or None


def _to_number(value: Any) -> float | None:
    """Convert a cell value to float. Blank cells give None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"not a number: {value!r}") from None


def read_ledger_workbook(file_path: str | Path) -> dict:
    """Parse a ledger workbook.

    Returns a dict with:
      cells: {(category, month): {field: value}}
      skipped: number of rows ignored (dynamic subcategories)
      errors: human readable problems with individual cells or rows
    """
    wb = openpyxl.load_workbook(str(file_path), data_only=True, read_only=True)
    try:
        cells: dict[tuple[str, int], dict[str, float]] = {}
        skipped = 0
        errors: list[str] = []

        sheets = [name for name in wb.sheetnames if name in CATEGORY_BY_TITLE]
        if not sheets:
            raise ValueError(
                f"No ledger sheets found. Available: {wb.sheetnames}"
            )

        for sheet_name in sheets:
            category = CATEGORY_BY_TITLE[sheet_name]
            spec = CATEGORIES[category]
            ws = wb[sheet_name]

            for row in ws.iter_rows(min_row=DATA_START_ROW, values_only=True):
                key = _to_str(row[KEY_COL - 1]) if len(row) >= KEY_COL else None
                if key is None:
                    continue
                if key.startswith(DYNAMIC_KEY_PREFIX):
                    skipped += 1
                    continue
                if spec.field(key) is None:
                    errors.append(f"{sheet_name}: unknown field '{key}'")
                    continue

                for month in MONTHS:
                    col = month_to_col(month)
                    raw = row[col - 1] if len(row) >= col else None
                    try:
                        value = _to_number(raw)
                    except ValueError as e:
                        errors.append(f"{sheet_name} {key} month {month}: {e}")
                        continue
                    if value is None:
                        continue
                    cells.setdefault((category, month), {})[key] = value

        return {"cells": cells, "skipped": skipped, "errors": errors}
    finally:
        wb.close()
