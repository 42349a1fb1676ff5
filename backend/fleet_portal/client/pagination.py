"""Page-by-page loading of list endpoints and the table pager window."""

from __future__ import annotations

import logging
import math
from typing import Any

from fleet_portal.client.api import ApiError, PortalApi
from fleet_portal.client.query_cache import QueryCache

logger = logging.getLogger(__name__)

ELLIPSIS = "ellipsis"
MAX_VISIBLE_PAGES = 7


def total_pages(total: int, per_page: int) -> int:
    """Number of pages for ``total`` rows; an empty table still has one."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    return max(1, math.ceil(total / per_page))


def page_window(current: int, pages: int) -> list[int | str]:
    """Page buttons to show: first, last and the pages around ``current``."""
    if pages <= MAX_VISIBLE_PAGES:
        return list(range(1, pages + 1))
    if current <= 3:
        return [1, 2, 3, 4, ELLIPSIS, pages]
    if current >= pages - 2:
        return [1, ELLIPSIS, *range(pages - 3, pages + 1)]
    return [1, ELLIPSIS, current - 1, current, current + 1, ELLIPSIS, pages]


class InfiniteLoader:
    """Accumulates pages of a paginated endpoint.

    Pages come from ``PageResponse`` envelopes (``data``, ``total``). GET
    endpoints receive the filters and paging as query parameters, POST
    endpoints as the JSON body.
    """

    def __init__(
        self,
        api: PortalApi,
        path: str,
        filters: dict[str, Any] | None = None,
        page_size: int = 20,
        method: str = "GET",
        cache: QueryCache | None = None,
    ) -> None:
        self.api = api
        self.path = path
        self.page_size = page_size
        self.method = method.upper()
        self.cache = cache
        self.filters: dict[str, Any] = {}
        self.pages: list[list[dict]] = []
        self.total = 0
        self.error: ApiError | None = None
        self.is_fetching = False
        self.set_filters(filters or {}, fetch=False)

    @property
    def query_key(self) -> tuple:
        return (self.path, *sorted(self.filters.items()))

    @property
    def page(self) -> int:
        """Number of pages loaded so far."""
        return len(self.pages)

    @property
    def rows(self) -> list[dict]:
        return [row for page in self.pages for row in page]

    @property
    def has_next_page(self) -> bool:
        if self.error is not None:
            return False
        return self.page * self.page_size < self.total

    def _request(self, page: int) -> dict:
        params = {
            **{k: v for k, v in self.filters.items() if v is not None},
            "page": page,
            "limit": self.page_size,
        }
        if self.method == "GET":
            return self.api.get(self.path, params=params)
        return self.api.request(self.method, self.path, json=params)

    def fetch_next_page(self) -> bool:
        """Load page ``page + 1`` and append its rows. Returns success."""
        if self.is_fetching:
            return False
        page = self.page + 1
        self.is_fetching = True
        try:
            if self.cache is not None:
                body = self.cache.fetch((*self.query_key, page), lambda: self._request(page))
            else:
                body = self._request(page)
        except ApiError as e:
            logger.warning("Loading %s page %d failed: %s", self.path, page, e.message)
            self.error = e
            return False
        finally:
            self.is_fetching = False

        self.error = None
        self.pages.append(list(body.get("data") or []))
        self.total = int(body.get("total") or 0)
        return True

    def on_sentinel_visible(self) -> bool:
        """The end of the list scrolled into view: load more if there is more."""
        if self.is_fetching or not self.has_next_page:
            return False
        return self.fetch_next_page()

    def set_filters(self, filters: dict[str, Any], fetch: bool = True) -> None:
        """Replace the filters and start over from the first page."""
        self.filters = dict(filters)
        self.pages = []
        self.total = 0
        self.error = None
        if fetch:
            self.fetch_next_page()

    def retry(self) -> bool:
        """Retry the page that failed last."""
        if self.error is None:
            return False
        if self.cache is not None:
            self.cache.invalidate((*self.query_key, self.page + 1))
        self.error = None
        return self.fetch_next_page()
