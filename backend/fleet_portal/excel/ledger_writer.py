"""Export a car's yearly ledger to an .xlsx workbook."""

from __future__ import annotations

import io

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from fleet_portal.excel.config import (
    DATA_START_ROW,
    DYNAMIC_KEY_PREFIX,
    HEADER_ROW,
    KEY_COL,
    LABEL_COL,
    LAST_MONTH_COL,
    SHEET_TITLES,
    TITLE_ROW,
    TOTALS_SHEET,
    month_to_col,
)
from fleet_portal.ledger_fields import CATEGORIES, MONTHS
from fleet_portal.models.car import Car
from fleet_portal.utils.date_helpers import get_month_name

_BOLD = Font(bold=True)

_TOTAL_ROWS: tuple[tuple[str, str], ...] = (
    ("total_income", "Total Income"),
    ("direct_delivery", "Direct Delivery"),
    ("cogs", "COGS"),
    ("parking_fee_labor", "Parking Fee & Labor"),
    ("reimbursed_bills", "Reimbursed Bills"),
    ("office_support", "Office Support"),
    ("parking_airport_qb", "Parking Airport QB"),
    ("car_management_total_expenses", "Car Management Total Expenses"),
    ("car_owner_total_expenses", "Car Owner Total Expenses"),
    ("total_expenses", "Total Expenses"),
    ("net_income", "Net Income"),
    ("car_management_split_amount", "Car Management Split"),
    ("car_owner_split_amount", "Car Owner Split"),
)


def _write_header(ws, title: str, first_header: str) -> None:
    ws.cell(TITLE_ROW, LABEL_COL, title).font = _BOLD
    ws.cell(HEADER_ROW, LABEL_COL, first_header).font = _BOLD
    ws.cell(HEADER_ROW, KEY_COL, "Key").font = _BOLD
    for month in MONTHS:
        ws.cell(HEADER_ROW, month_to_col(month), get_month_name(month)).font = _BOLD
    ws.column_dimensions["A"].width = 36
    ws.column_dimensions["B"].width = 28
    for col in range(month_to_col(1), LAST_MONTH_COL + 1):
        ws.column_dimensions[get_column_letter(col)].width = 12
    ws.freeze_panes = ws.cell(DATA_START_ROW, month_to_col(1))


def write_ledger_workbook(car: Car, ledger: dict, totals: dict) -> bytes:
    """Build the workbook for ``ledger`` and return its bytes.

    ``ledger`` and ``totals`` are the dicts returned by
    ``ledger_service.get_ledger`` and ``ledger_service.get_totals``.
    """
    title = f"{car.make_model} ({car.license_plate or car.vin}) - {ledger['year']}"
    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for key, spec in CATEGORIES.items():
        ws = wb.create_sheet(SHEET_TITLES[key])
        _write_header(ws, title, spec.label)
        rows = ledger["categories"][key]

        row_num = DATA_START_ROW
        for field in spec.fields:
            ws.cell(row_num, LABEL_COL, field.label)
            ws.cell(row_num, KEY_COL, field.key)
            for month in MONTHS:
                ws.cell(row_num, month_to_col(month), rows[month - 1][field.key])
            row_num += 1

        for sub in ledger["dynamic_subcategories"].get(key, []):
            by_month = {v.month: v.value for v in sub.values}
            ws.cell(row_num, LABEL_COL, sub.name)
            ws.cell(row_num, KEY_COL, f"{DYNAMIC_KEY_PREFIX}{sub.id}")
            for month in MONTHS:
                ws.cell(row_num, month_to_col(month), by_month.get(month, 0.0))
            row_num += 1

    ws = wb.create_sheet(TOTALS_SHEET)
    _write_header(ws, title, "Total")
    for offset, (key, label) in enumerate(_TOTAL_ROWS):
        row_num = DATA_START_ROW + offset
        ws.cell(row_num, LABEL_COL, label)
        ws.cell(row_num, KEY_COL, key)
        for entry in totals["months"]:
            ws.cell(row_num, month_to_col(entry["month"]), entry[key])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
