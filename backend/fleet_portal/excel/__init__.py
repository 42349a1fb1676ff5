"""Ledger workbook export and import.

One sheet per ledger category plus a totals sheet.
"""

from fleet_portal.excel.config import SHEET_TITLES, TOTALS_SHEET
from fleet_portal.excel.ledger_reader import read_ledger_workbook
from fleet_portal.excel.ledger_writer import write_ledger_workbook

__all__ = [
    "SHEET_TITLES",
    "TOTALS_SHEET",
    "read_ledger_workbook",
    "write_ledger_workbook",
]
