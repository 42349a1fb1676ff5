from __future__ import annotations

import pytest

from fleet_portal.client.api import ApiError, PortalApi
from fleet_portal.client.pagination import InfiniteLoader, page_window, total_pages


class PagedApi:
    """Serves ``total`` numbered rows; optionally fails a given page once."""

    def __init__(self, total: int, fail_page: int | None = None):
        self.total = total
        self.fail_page = fail_page
        self.calls: list[dict] = []

    def get(self, path, params=None):
        self.calls.append(dict(params))
        page, limit = params["page"], params["limit"]
        if page == self.fail_page:
            self.fail_page = None
            raise ApiError(500, "Server error")
        start = (page - 1) * limit
        rows = [{"id": i} for i in range(start, min(start + limit, self.total))]
        return {"success": True, "data": rows, "total": self.total, "page": page, "limit": limit}


@pytest.mark.parametrize(
    ("total", "per_page", "expected"),
    [(0, 20, 1), (20, 20, 1), (21, 20, 2), (95, 10, 10)],
)
def test_total_pages(total, per_page, expected):
    assert total_pages(total, per_page) == expected


@pytest.mark.parametrize(
    ("current", "pages", "expected"),
    [
        (1, 5, [1, 2, 3, 4, 5]),
        (2, 10, [1, 2, 3, 4, "ellipsis", 10]),
        (9, 10, [1, "ellipsis", 7, 8, 9, 10]),
        (5, 10, [1, "ellipsis", 4, 5, 6, "ellipsis", 10]),
    ],
)
def test_page_window(current, pages, expected):
    assert page_window(current, pages) == expected


def test_loader_appends_pages_until_total():
    api = PagedApi(total=45)
    loader = InfiniteLoader(api, "/api/turo-trips", {"status": "booked"}, page_size=20)

    assert loader.fetch_next_page() is True
    assert loader.has_next_page is True
    assert loader.on_sentinel_visible() is True
    assert loader.on_sentinel_visible() is True
    assert len(loader.rows) == 45
    assert loader.has_next_page is False
    assert loader.on_sentinel_visible() is False
    assert [c["page"] for c in api.calls] == [1, 2, 3]
    assert api.calls[0]["status"] == "booked"


def test_failed_page_disables_next_and_retry_recovers():
    api = PagedApi(total=45, fail_page=2)
    loader = InfiniteLoader(api, "/api/turo-trips", page_size=20)
    loader.fetch_next_page()

    assert loader.on_sentinel_visible() is False
    assert loader.error is not None
    assert loader.has_next_page is False
    assert loader.on_sentinel_visible() is False

    assert loader.retry() is True
    assert loader.error is None
    assert len(loader.rows) == 40


def test_set_filters_restarts_from_first_page():
    api = PagedApi(total=45)
    loader = InfiniteLoader(api, "/api/turo-trips", {"search": "a"}, page_size=20)
    loader.fetch_next_page()
    loader.fetch_next_page()

    loader.set_filters({"search": "b"})

    assert loader.page == 1
    assert api.calls[-1] == {"search": "b", "page": 1, "limit": 20}
    assert loader.query_key == ("/api/turo-trips", ("search", "b"))


def test_loader_reads_ledger_log_from_app(admin, car):
    for month in range(1, 4):
        admin.post(
            "/api/income-expense/cogs",
            json={"car_id": car["id"], "year": 2025, "month": month, "values": {"tires": month * 10}},
        )
    loader = InfiniteLoader(PortalApi(admin), f"/api/income-expense/log/{car['id']}/2025", page_size=2)

    loader.fetch_next_page()
    assert loader.total == 3
    assert loader.has_next_page is True
    loader.on_sentinel_visible()
    assert [row["month"] for row in loader.rows] == [3, 2, 1]
