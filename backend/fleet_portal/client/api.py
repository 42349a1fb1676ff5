"""HTTP client for the portal API.

Wraps an ``httpx.Client`` that carries the session cookie. Any
``httpx.Client`` works, including FastAPI's ``TestClient``, so the same
code runs against a live server or the app in-process.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call. ``status`` is 0 when the request never completed."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


def build_api_url(base_url: str, path: str) -> str:
    """Join ``path`` onto ``base_url``; absolute URLs pass through unchanged."""
    base = (base_url or "").rstrip("/")
    if not path:
        return base
    if path.startswith(("http://", "https://")):
        return path
    normalized = path if path.startswith("/") else f"/{path}"
    return f"{base}{normalized}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            if body.get(key):
                return str(body[key])
    return response.text or response.reason_phrase


class PortalApi:
    def __init__(self, http: httpx.Client, base_url: str = "") -> None:
        self.http = http
        self.base_url = base_url

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict | None = None,
        files: dict | None = None,
    ) -> dict:
        """Send a request and return the full response envelope.

        Raises ``ApiError`` for non-2xx responses, for envelopes with
        ``success: false`` and for transport failures. Nothing is retried.
        """
        url = build_api_url(self.base_url, path)
        try:
            response = self.http.request(method, url, json=json, params=params, files=files)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(0, str(e) or "Network error") from e

        if not response.is_success:
            raise ApiError(response.status_code, _error_message(response))

        body = response.json()
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiError(response.status_code, body.get("error") or "Request failed")
        return body

    def get(self, path: str, params: dict | None = None) -> dict:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, files: dict | None = None) -> dict:
        return self.request("POST", path, json=json, files=files)

    def put(self, path: str, json: Any = None) -> dict:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> dict:
        return self.request("DELETE", path)

    # --- Auth ---

    def login(self, email: str, password: str) -> dict:
        return self.post("/api/auth/login", {"email": email, "password": password})["data"]

    def logout(self) -> None:
        self.post("/api/auth/logout")

    def me(self) -> dict:
        return self.get("/api/auth/me")["data"]

    def navigation(self, location: str = "/dashboard") -> list[dict]:
        return self.get("/api/navigation", params={"location": location})["data"]

    # --- Ledger ---

    def get_ledger(self, car_id: int, year: int) -> dict:
        return self.get(f"/api/income-expense/{car_id}/{year}")["data"]

    def update_category(
        self,
        category: str,
        car_id: int,
        year: int,
        month: int,
        values: dict[str, float],
        remarks: str | None = None,
    ) -> dict:
        payload = {"car_id": car_id, "year": year, "month": month, "values": values}
        if remarks is not None:
            payload["remarks"] = remarks
        return self.post(f"/api/income-expense/{category}", payload)["data"]

    def get_totals(self, car_id: int, year: int) -> dict:
        return self.get(f"/api/income-expense/totals/{car_id}/{year}")["data"]

    def save_month_modes(self, car_id: int, year: int, month_modes: dict[int, int]) -> dict:
        payload = {"car_id": car_id, "year": year, "month_modes": month_modes}
        return self.post("/api/income-expense/formula", payload)["data"]

    def add_dynamic_subcategory(self, car_id: int, year: int, category: str, name: str) -> dict:
        payload = {"car_id": car_id, "year": year, "category_type": category, "name": name}
        return self.post("/api/income-expense/dynamic-subcategories", payload)["data"]

    def rename_dynamic_subcategory(self, sub_id: int, name: str) -> dict:
        return self.put(f"/api/income-expense/dynamic-subcategories/{sub_id}", {"name": name})["data"]

    def delete_dynamic_subcategory(self, sub_id: int) -> None:
        self.delete(f"/api/income-expense/dynamic-subcategories/{sub_id}")

    def set_dynamic_value(self, sub_id: int, month: int, value: float) -> dict:
        return self.post(
            f"/api/income-expense/dynamic-subcategories/{sub_id}/values",
            {"month": month, "value": value},
        )["data"]

    # --- Payments ---

    def search_payments(self, **filters: Any) -> dict:
        """POST the filters as given and return the paged envelope."""
        return self.post("/api/payments/search", filters)
