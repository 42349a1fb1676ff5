from __future__ import annotations

import httpx
import pytest

from fleet_portal.client.api import ApiError, PortalApi, build_api_url
from fleet_portal.client.query_cache import QueryCache


def _api(handler) -> PortalApi:
    return PortalApi(httpx.Client(transport=httpx.MockTransport(handler), base_url="http://portal"))


def test_build_api_url():
    assert build_api_url("http://host/", "/api/cars") == "http://host/api/cars"
    assert build_api_url("http://host", "api/cars") == "http://host/api/cars"
    assert build_api_url("", "/api/cars") == "/api/cars"
    assert build_api_url("http://host", "https://other/x") == "https://other/x"


def test_http_error_uses_detail_message():
    api = _api(lambda request: httpx.Response(403, json={"detail": "Admin access required"}))

    with pytest.raises(ApiError) as exc:
        api.get("/api/admin/users")

    assert exc.value.status == 403
    assert exc.value.message == "Admin access required"


def test_failed_envelope_raises():
    api = _api(lambda request: httpx.Response(200, json={"success": False, "error": "nope"}))

    with pytest.raises(ApiError) as exc:
        api.post("/api/payments", {})

    assert exc.value.message == "nope"


def test_network_failure_has_status_zero():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ApiError) as exc:
        _api(handler).get("/api/cars")

    assert exc.value.status == 0


def test_query_cache_fetches_once_and_invalidates_by_prefix():
    cache = QueryCache()
    calls = []

    def load():
        calls.append(1)
        return {"ok": True}

    cache.fetch(("/api/income-expense", 1, 2025), load)
    cache.fetch(("/api/income-expense", 1, 2025), load)
    cache.fetch(("/api/income-expense", 2, 2025), load)
    assert len(calls) == 2

    assert cache.invalidate(("/api/income-expense", 1)) == 1
    assert ("/api/income-expense", 2, 2025) in cache

    cache.clear()
    assert ("/api/income-expense", 2, 2025) not in cache


def test_query_cache_keeps_errors_until_invalidated():
    cache = QueryCache()
    attempts = []

    def load():
        attempts.append(1)
        raise ApiError(500, "down")

    for _ in range(2):
        with pytest.raises(ApiError):
            cache.fetch(("k",), load)
    assert len(attempts) == 1
