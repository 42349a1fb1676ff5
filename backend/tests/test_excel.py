from __future__ import annotations

import io

import openpyxl

from fleet_portal.excel.config import DATA_START_ROW, KEY_COL, SHEET_TITLES, TOTALS_SHEET, month_to_col
from fleet_portal.excel.ledger_reader import read_ledger_workbook


def _set(admin, car_id, category, month, values, year=2025):
    body = admin.post(
        f"/api/income-expense/{category}",
        json={"car_id": car_id, "year": year, "month": month, "values": values},
    ).json()
    assert body["success"] is True, body


def _export(admin, car_id, year=2025) -> bytes:
    resp = admin.get(f"/api/income-expense/export/{car_id}/{year}")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    return resp.content


def test_export_has_a_sheet_per_category_and_totals(admin, car):
    _set(admin, car["id"], "cogs", 2, {"tires": 80})

    wb = openpyxl.load_workbook(io.BytesIO(_export(admin, car["id"])))

    assert set(SHEET_TITLES.values()) | {TOTALS_SHEET} == set(wb.sheetnames)
    ws = wb[SHEET_TITLES["cogs"]]
    row = next(
        r for r in range(DATA_START_ROW, ws.max_row + 1) if ws.cell(r, KEY_COL).value == "tires"
    )
    assert ws.cell(row, month_to_col(2)).value == 80


def test_reader_skips_dynamic_rows_and_reports_bad_cells(admin, car, tmp_path):
    admin.post("/api/income-expense/dynamic-subcategories", json={
        "car_id": car["id"], "year": 2025, "category_type": "cogs", "name": "Detailing",
    })
    wb = openpyxl.load_workbook(io.BytesIO(_export(admin, car["id"])))
    ws = wb[SHEET_TITLES["history"]]
    ws.cell(DATA_START_ROW, month_to_col(1), "lots")
    path = tmp_path / "ledger.xlsx"
    wb.save(path)

    parsed = read_ledger_workbook(path)

    assert parsed["skipped"] == 1
    assert len(parsed["errors"]) == 1
    assert "not a number" in parsed["errors"][0]
    assert parsed["cells"][("cogs", 5)]["tires"] == 0


def test_import_writes_changed_cells_into_another_year(admin, car):
    _set(admin, car["id"], "income", 1, {"rental_income": 900})
    _set(admin, car["id"], "history", 1, {"days_rented": 12})
    content = _export(admin, car["id"])

    body = admin.post(
        f"/api/income-expense/import/{car['id']}/2026",
        files={"file": ("ledger.xlsx", content, "application/octet-stream")},
    ).json()

    assert body["success"] is True
    assert body["data"]["errors"] == []
    assert body["data"]["cells_changed"] == 2
    ledger = admin.get(f"/api/income-expense/{car['id']}/2026").json()["data"]
    assert ledger["categories"]["income"][0]["rental_income"] == 900
    assert ledger["categories"]["history"][0]["days_rented"] == 12
    log = admin.get(f"/api/income-expense/log/{car['id']}/2026").json()
    assert log["total"] == 2

    again = admin.post(
        f"/api/income-expense/import/{car['id']}/2026",
        files={"file": ("ledger.xlsx", content, "application/octet-stream")},
    ).json()
    assert again["data"]["cells_changed"] == 0


def test_import_rejects_unreadable_file(admin, car):
    body = admin.post(
        f"/api/income-expense/import/{car['id']}/2025",
        files={"file": ("notes.xlsx", b"not a workbook", "application/octet-stream")},
    ).json()
    assert body["success"] is False
