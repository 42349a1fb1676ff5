from __future__ import annotations

from conftest import create_car, create_client
from fleet_portal.client.api import PortalApi


def _status_id(admin, name):
    statuses = admin.get("/api/payment-status").json()["data"]
    return next(s["id"] for s in statuses if s["name"] == name)


def _seed(admin):
    ada = create_client(admin, "Ada", "Owner")
    bob = create_client(admin, "Bob", "Lender")
    corolla = create_car(admin, ada["id"], vin="VIN-A", license_plate="AAA111")
    civic = create_car(admin, bob["id"], make="Honda", model="Civic", vin="VIN-B", license_plate="BBB222")
    paid, to_pay = _status_id(admin, "Paid"), _status_id(admin, "To Pay")
    rows = [
        (ada["id"], corolla["id"], paid, "2025-01"),
        (ada["id"], corolla["id"], to_pay, "2025-02"),
        (bob["id"], civic["id"], paid, "2025-02"),
        (bob["id"], civic["id"], to_pay, "2025-01"),
    ]
    for client_id, car_id, status_id, year_month in rows:
        body = admin.post("/api/payments", json={
            "client_id": client_id, "car_id": car_id, "status_id": status_id,
            "year_month": year_month, "amount_payable": 500, "amount_paid": 200,
        }).json()
        assert body["success"] is True, body
    return ada, bob


def test_default_statuses_are_seeded(admin):
    names = [s["name"] for s in admin.get("/api/payment-status").json()["data"]]
    assert names == ["To Pay", "Paid", "Partial", "Overdue"]


def test_search_matches_status_and_month(admin):
    _seed(admin)

    body = admin.post(
        "/api/payments/search", json={"status": "paid", "month_year": "2025-02"}
    ).json()

    assert body["total"] == 1
    row = body["data"][0]
    assert row["client_name"] == "Bob Lender"
    assert row["status_name"] == "Paid"
    assert row["year_month"] == "2025-02"
    assert row["balance"] == 300


def test_search_text_matches_client_car_and_plate(admin):
    _seed(admin)

    by_client = admin.post("/api/payments/search", json={"search_value": "ada"}).json()
    by_car = admin.post("/api/payments/search", json={"search_value": "civic"}).json()
    by_plate = admin.post("/api/payments/search", json={"search_value": "aaa1"}).json()

    assert by_client["total"] == 2
    assert {r["car_name"] for r in by_car["data"]} == {"Honda Civic"}
    assert {r["client_name"] for r in by_plate["data"]} == {"Ada Owner"}


def test_client_sends_exact_filters(admin):
    _seed(admin)
    api = PortalApi(admin)

    body = api.search_payments(search_value="", status="To Pay", month_year="2025-01", page=1, limit=10)

    assert [r["client_name"] for r in body["data"]] == ["Bob Lender"]
    assert body["page"] == 1
    assert body["limit"] == 10


def test_invalid_month_filter_is_rejected(admin):
    resp = admin.post("/api/payments/search", json={"month_year": "2025-13"})
    assert resp.status_code == 422


def test_create_by_month_skips_existing_and_offboarded(admin):
    ada, bob = _seed(admin)
    create_car(admin, ada["id"], model="Prius", vin="VIN-C", status="offboarded")
    extra = create_car(admin, bob["id"], model="Camry", vin="VIN-D")

    body = admin.post("/api/payments/create-by-month", json={"year_month": "2025-02"}).json()

    assert body["data"] == {"year_month": "2025-02", "created": 1, "skipped": 2}
    created = admin.post(
        "/api/payments/search", json={"month_year": "2025-02", "status": "To Pay"}
    ).json()
    assert extra["id"] in {r["car_id"] for r in created["data"]}


def test_update_and_delete_payment(admin):
    _seed(admin)
    payment = admin.post("/api/payments/search", json={"limit": 1}).json()["data"][0]

    updated = admin.put(
        f"/api/payments/{payment['id']}", json={"amount_paid": 500, "status_id": _status_id(admin, "Paid")}
    ).json()
    assert updated["data"]["balance"] == 0
    assert updated["data"]["status_name"] == "Paid"

    assert admin.delete(f"/api/payments/{payment['id']}").json()["success"] is True
    assert admin.delete(f"/api/payments/{payment['id']}").json()["success"] is False


def test_null_for_required_payment_fields_keeps_stored_values(admin):
    _seed(admin)
    payment = admin.post("/api/payments/search", json={"limit": 1}).json()["data"][0]

    body = admin.put(
        f"/api/payments/{payment['id']}",
        json={"status_id": None, "amount_paid": None, "amount_payable": None, "remarks": None},
    ).json()

    assert body["success"] is True
    assert body["data"]["status_id"] == payment["status_id"]
    assert body["data"]["amount_paid"] == 200
    assert body["data"]["amount_payable"] == 500
    assert body["data"]["remarks"] is None


def test_delete_by_year_month(admin):
    _seed(admin)
    body = admin.post("/api/payments/delete-by-year-month", json={"year_month": "2025-01"}).json()
    assert body["data"]["deleted"] == 2
    assert admin.post("/api/payments/search", json={}).json()["total"] == 2


def test_payment_status_names_are_unique(admin):
    body = admin.post("/api/payment-status", json={"name": "paid", "color": "#000000"}).json()
    assert body["success"] is False
    created = admin.post("/api/payment-status", json={"name": "Waived", "color": "#123abc"}).json()
    assert created["data"]["name"] == "Waived"
