"""Staged ledger editing from the client side."""

from __future__ import annotations

from fleet_portal.client.api import ApiError, PortalApi
from fleet_portal.client.ledger_editor import CellChange, EditingCell, LedgerEditor
from fleet_portal.client.query_cache import QueryCache


class RecordingApi:
    """Stands in for PortalApi and records the ledger writes it receives."""

    def __init__(self, fail_with: ApiError | None = None):
        self.fail_with = fail_with
        self.updates: list[tuple] = []
        self.mode_saves: list[dict] = []
        self.ledger_reads = 0

    def get_ledger(self, car_id, year):
        self.ledger_reads += 1
        if self.fail_with is not None:
            raise self.fail_with
        return {"car_id": car_id, "year": year, "formula_setting": {"month_modes": {"3": 70}},
                "categories": {}, "remarks": {}, "dynamic_subcategories": {}}

    def update_category(self, category, car_id, year, month, values, remarks=None):
        self.updates.append((category, car_id, year, month, dict(values)))
        if self.fail_with is not None:
            raise self.fail_with
        return {"month": month, **values}

    def save_month_modes(self, car_id, year, month_modes):
        self.mode_saves.append(dict(month_modes))
        return {"car_id": car_id, "year": year, "month_modes": {str(k): v for k, v in month_modes.items()}}


def test_save_sends_one_request_with_the_entered_value():
    api = RecordingApi()
    editor = LedgerEditor(api, car_id=7, year=2025)
    editor.set_editing_cell(EditingCell("cogs", "tires", 4, 0.0))

    saved = editor.save_changes(CellChange("cogs", "tires", 4, 310.25))

    assert saved is True
    assert api.updates == [("cogs", 7, 2025, 4, {"tires": 310.25})]
    assert editor.editing_cell is None
    assert editor.pending == {}
    assert editor.notifier.last.title == "Success"


def test_changes_are_grouped_by_category_and_month():
    api = RecordingApi()
    editor = LedgerEditor(api, car_id=1, year=2025)
    editor.update_cell("cogs", "tires", 1, 10)
    editor.update_cell("cogs", "brakes", 1, 20)
    editor.update_cell("cogs", "tires", 1, 15)
    editor.update_cell("cogs", "tires", 2, 30)
    editor.update_cell("income", "rental_income", 1, 500)

    editor.save_changes()

    assert sorted(api.updates) == sorted([
        ("cogs", 1, 2025, 1, {"tires": 15, "brakes": 20}),
        ("cogs", 1, 2025, 2, {"tires": 30}),
        ("income", 1, 2025, 1, {"rental_income": 500}),
    ])


def test_failed_save_keeps_cell_open_and_changes_staged():
    api = RecordingApi(fail_with=ApiError(200, "Tires cannot be negative"))
    editor = LedgerEditor(api, car_id=1, year=2025)
    cell = EditingCell("cogs", "tires", 4)
    editor.set_editing_cell(cell)

    saved = editor.save_changes(CellChange("cogs", "tires", 4, -5))

    assert saved is False
    assert len(api.updates) == 1
    assert editor.editing_cell == cell
    assert ("cogs", "tires", 4) in editor.pending
    assert editor.notifier.last.variant == "destructive"
    assert editor.notifier.last.description == "Tires cannot be negative"
    assert editor.is_saving is False


def test_nothing_staged_makes_no_request():
    api = RecordingApi()
    editor = LedgerEditor(api, car_id=1, year=2025)

    assert editor.save_changes() is False
    assert api.updates == []
    assert editor.notifier.last.title == "No changes"


def test_save_while_saving_is_ignored():
    api = RecordingApi()
    editor = LedgerEditor(api, car_id=1, year=2025)
    editor.update_cell("cogs", "tires", 1, 10)
    editor.is_saving = True

    assert editor.save_changes() is False
    assert api.updates == []


def test_successful_save_invalidates_cached_ledger():
    api = RecordingApi()
    cache = QueryCache()
    editor = LedgerEditor(api, car_id=1, year=2025, cache=cache)
    editor.ledger()
    editor.ledger()
    assert api.ledger_reads == 1

    editor.save_changes(CellChange("cogs", "tires", 1, 5))
    editor.ledger()

    assert api.ledger_reads == 2


def test_failed_load_falls_back_to_empty_ledger():
    editor = LedgerEditor(RecordingApi(fail_with=ApiError(0, "offline")), car_id=3, year=2024)

    ledger = editor.ledger()

    assert ledger["car_id"] == 3
    assert all(row["tires"] == 0 for row in ledger["categories"]["cogs"])
    assert editor.error is not None
    assert editor.error.message == "offline"


def test_refetch_recovers_after_a_failed_load():
    api = RecordingApi(fail_with=ApiError(503, "busy"))
    editor = LedgerEditor(api, car_id=3, year=2024)

    editor.ledger()
    editor.ledger()
    assert api.ledger_reads == 1  # the failure is cached, not retried

    api.fail_with = None
    ledger = editor.refetch()

    assert api.ledger_reads == 2
    assert editor.error is None
    assert ledger["formula_setting"]["month_modes"] == {"3": 70}
    assert editor.month_modes[3] == 70


def test_month_modes_load_from_ledger_and_toggle():
    api = RecordingApi()
    editor = LedgerEditor(api, car_id=1, year=2025)
    editor.ledger()
    assert editor.month_modes[3] == 70
    assert editor.month_modes[4] == 50

    assert editor.toggle_month_mode(4) is True

    assert api.updates == [
        ("income", 1, 2025, 4, {"car_management_split": 70.0, "car_owner_split": 30.0})
    ]
    assert api.mode_saves[0][4] == 70
    assert editor.month_modes[4] == 70


def test_failed_toggle_restores_previous_modes():
    api = RecordingApi(fail_with=ApiError(500, "boom"))
    editor = LedgerEditor(api, car_id=1, year=2025)

    assert editor.toggle_month_mode(2) is False
    assert editor.month_modes[2] == 50
    assert api.mode_saves == []


def test_editor_against_running_app(admin, car):
    editor = LedgerEditor(PortalApi(admin), car_id=car["id"], year=2025)
    editor.set_editing_cell(EditingCell("income", "rental_income", 2))

    assert editor.save_changes(CellChange("income", "rental_income", 2, 1250)) is True

    ledger = editor.ledger()
    assert ledger["categories"]["income"][1]["rental_income"] == 1250

    sub = editor.add_dynamic_subcategory("cogs", "Detailing")
    assert sub["name"] == "Detailing"
    editor.set_dynamic_value(sub["id"], 1, 45)
    cogs_subs = editor.ledger()["dynamic_subcategories"]["cogs"]
    assert cogs_subs[0]["values"] == [{"month": 1, "value": 45.0}]
