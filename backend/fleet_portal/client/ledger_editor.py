"""Editing state for one car's income and expense ledger.

Edits are staged per cell and sent in groups of one category-month per
request. The cached ledger is never patched locally: after a successful save
it is invalidated and re-read from the server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fleet_portal.client.api import ApiError, PortalApi
from fleet_portal.client.notifier import Notifier
from fleet_portal.client.query_cache import QueryCache
from fleet_portal.ledger_fields import (
    DEFAULT_MODE,
    DYNAMIC_CATEGORIES,
    MONTHS,
    empty_ledger,
    split_for_mode,
)

logger = logging.getLogger(__name__)

LEDGER_QUERY = "/api/income-expense"


@dataclass(frozen=True)
class EditingCell:
    category: str
    field: str
    month: int
    value: float = 0.0


@dataclass(frozen=True)
class CellChange:
    category: str
    field: str
    month: int
    value: float

    @property
    def key(self) -> tuple[str, str, int]:
        return (self.category, self.field, self.month)


def default_month_modes() -> dict[int, int]:
    return {month: DEFAULT_MODE for month in MONTHS}


class LedgerEditor:
    def __init__(
        self,
        api: PortalApi,
        car_id: int,
        year: int,
        cache: QueryCache | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.api = api
        self.car_id = car_id
        self.year = year
        self.cache = cache if cache is not None else QueryCache()
        self.notifier = notifier if notifier is not None else Notifier()
        self.pending: dict[tuple[str, str, int], CellChange] = {}
        self.month_modes = default_month_modes()
        self.is_saving = False
        self.is_saving_mode = False
        self.error: ApiError | None = None
        self._editing_cell: EditingCell | None = None
        self._modes_loaded_for: tuple[int, int] | None = None

    @property
    def query_key(self) -> tuple:
        return (LEDGER_QUERY, self.car_id, self.year)

    # --- Selection ---

    @property
    def editing_cell(self) -> EditingCell | None:
        return self._editing_cell

    def set_editing_cell(self, cell: EditingCell | None) -> None:
        self._editing_cell = cell

    def select(self, car_id: int, year: int) -> None:
        """Switch to another car/year. Staged edits belong to the old one."""
        self.car_id = car_id
        self.year = year
        self.pending.clear()
        self._editing_cell = None
        self.month_modes = default_month_modes()

    # --- Reads ---

    def ledger(self) -> dict:
        """The cached ledger, loading it on first use.

        A failed load falls back to a zero-filled ledger so the grid can
        still render, and leaves the failure in ``error``. The failure stays
        cached until ``refetch`` is called.
        """
        try:
            data = self.cache.fetch(
                self.query_key, lambda: self.api.get_ledger(self.car_id, self.year)
            )
        except ApiError as e:
            logger.warning("Ledger %d/%d unavailable: %s", self.car_id, self.year, e.message)
            self.error = e
            return self._empty()
        self.error = None

        if self._modes_loaded_for != (self.car_id, self.year):
            self._modes_loaded_for = (self.car_id, self.year)
            stored = (data.get("formula_setting") or {}).get("month_modes") or {}
            self.month_modes = {
                **default_month_modes(),
                **{int(month): int(mode) for month, mode in stored.items()},
            }
        return data

    def refetch(self) -> dict:
        """Drop the cached ledger, including a cached failure, and load it again."""
        self.cache.invalidate(self.query_key)
        return self.ledger()

    def _empty(self) -> dict:
        return {
            "car_id": self.car_id,
            "year": self.year,
            "formula_setting": {
                "car_id": self.car_id,
                "year": self.year,
                "month_modes": default_month_modes(),
            },
            "categories": empty_ledger(),
            "remarks": {},
            "dynamic_subcategories": {key: [] for key in DYNAMIC_CATEGORIES},
        }

    # --- Edits ---

    def update_cell(self, category: str, field: str, month: int, value: float) -> None:
        change = CellChange(category, field, month, value)
        self.pending[change.key] = change

    def _grouped(self) -> dict[tuple[str, int], dict[str, float]]:
        groups: dict[tuple[str, int], dict[str, float]] = {}
        for change in self.pending.values():
            groups.setdefault((change.category, change.month), {})[change.field] = change.value
        return groups

    def save_changes(self, immediate_change: CellChange | None = None) -> bool:
        """Send staged edits, one request per category-month.

        Returns True when everything was saved. A call made while another
        save is running is ignored.
        """
        if self.is_saving:
            return False
        if immediate_change is not None:
            self.pending[immediate_change.key] = immediate_change
        if not self.pending:
            self.notifier.info("No changes", "No changes to save")
            return False

        self.is_saving = True
        written = 0
        try:
            for (category, month), values in self._grouped().items():
                self.api.update_category(category, self.car_id, self.year, month, values)
                written += 1
        except ApiError as e:
            self.notifier.error(e.message or "Failed to save changes")
            # Groups sent before the failure are on the server already
            if written:
                self.cache.invalidate(self.query_key)
            return False
        finally:
            self.is_saving = False

        self.cache.invalidate(self.query_key)
        self.pending.clear()
        self._editing_cell = None
        self.notifier.success("Changes saved successfully")
        return True

    def toggle_month_mode(self, month: int) -> bool:
        """Flip a month between 50:50 and 70:30 and persist it.

        The split percentages are written first, then the mode. On failure
        the previous modes are restored.
        """
        previous = dict(self.month_modes)
        new_mode = 70 if previous.get(month, DEFAULT_MODE) == 50 else 50
        mgmt, owner = split_for_mode(new_mode)
        self.month_modes = {**previous, month: new_mode}

        self.is_saving_mode = True
        try:
            self.api.update_category(
                "income",
                self.car_id,
                self.year,
                month,
                {"car_management_split": mgmt, "car_owner_split": owner},
            )
            saved = self.api.save_month_modes(self.car_id, self.year, self.month_modes)
        except ApiError as e:
            self.month_modes = previous
            self.cache.invalidate(self.query_key)
            self.notifier.error(e.message or "Failed to save mode change")
            return False
        finally:
            self.is_saving_mode = False

        self.month_modes = {
            **default_month_modes(),
            **{int(m): int(mode) for m, mode in saved["month_modes"].items()},
        }
        self.cache.invalidate(self.query_key)
        self.notifier.success("Mode updated successfully")
        return True

    # --- Dynamic subcategories ---

    def _dynamic_call(self, action: str, call):
        try:
            result = call()
        except ApiError as e:
            self.notifier.error(e.message or f"Failed to {action}")
            return None
        self.cache.invalidate(self.query_key)
        return result

    def add_dynamic_subcategory(self, category: str, name: str) -> dict | None:
        sub = self._dynamic_call(
            "add subcategory",
            lambda: self.api.add_dynamic_subcategory(self.car_id, self.year, category, name),
        )
        if sub is not None:
            self.notifier.success(f'Subcategory "{name}" added')
        return sub

    def rename_dynamic_subcategory(self, sub_id: int, name: str) -> dict | None:
        sub = self._dynamic_call(
            "rename subcategory",
            lambda: self.api.rename_dynamic_subcategory(sub_id, name),
        )
        if sub is not None:
            self.notifier.success("Subcategory renamed")
        return sub

    def delete_dynamic_subcategory(self, sub_id: int) -> bool:
        def call() -> bool:
            self.api.delete_dynamic_subcategory(sub_id)
            return True

        deleted = self._dynamic_call("delete subcategory", call)
        if deleted:
            self.notifier.success("Subcategory deleted")
        return bool(deleted)

    def set_dynamic_value(self, sub_id: int, month: int, value: float) -> dict | None:
        sub = self._dynamic_call(
            "update value",
            lambda: self.api.set_dynamic_value(sub_id, month, value),
        )
        if sub is not None:
            self.notifier.success("Value updated")
        return sub
