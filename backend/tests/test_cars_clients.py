from __future__ import annotations

from conftest import create_car, create_client


def test_car_listing_is_paginated_and_searchable(admin):
    owner = create_client(admin)
    for i in range(3):
        create_car(admin, owner["id"], model=f"Model {i}", vin=f"VIN{i}", license_plate=f"PL{i}")
    create_car(admin, owner["id"], make="Tesla", model="Model Y", vin="VINT", license_plate="EV1")

    body = admin.get("/api/cars", params={"limit": 2}).json()
    assert body["total"] == 4
    assert body["limit"] == 2
    assert len(body["data"]) == 2
    assert body["data"][0]["owner_name"] == "Ada Owner"

    tesla = admin.get("/api/cars", params={"search": "tesla"}).json()
    assert [c["make_model"] for c in tesla["data"]] == ["Tesla Model Y"]


def test_employees_can_view_cars_but_not_edit(employee, admin, car):
    assert employee.get(f"/api/cars/{car['id']}").json()["data"]["vin"] == "VIN0001"
    assert employee.put(f"/api/cars/{car['id']}", json={"model": "X"}).status_code == 403


def test_duplicate_vin_is_rejected(admin, car):
    body = admin.post("/api/cars", json={"make": "Honda", "model": "Civic", "vin": "VIN0001"}).json()
    assert body["success"] is False


def test_duplicate_vin_is_rejected_on_update(admin, car):
    other = create_car(admin, vin="VIN0002")

    body = admin.put(f"/api/cars/{other['id']}", json={"vin": "VIN0001"}).json()
    assert body["success"] is False
    assert "VIN0001" in body["error"]

    # Re-saving a car's own VIN is not a conflict
    same = admin.put(f"/api/cars/{car['id']}", json={"vin": "VIN0001", "year": 2022}).json()
    assert same["success"] is True
    assert same["data"]["year"] == 2022


def test_null_for_required_car_fields_keeps_stored_values(admin, car):
    body = admin.put(
        f"/api/cars/{car['id']}",
        json={"make": None, "model": None, "status": None, "license_plate": None},
    ).json()

    assert body["success"] is True
    assert body["data"]["make_model"] == "Toyota Corolla"
    assert body["data"]["status"] == car["status"]
    assert body["data"]["license_plate"] is None


def test_null_client_name_keeps_stored_value(admin, car):
    client_id = car["client_id"]
    body = admin.put(f"/api/clients/{client_id}", json={"first_name": None, "phone": "555-0100"}).json()

    assert body["success"] is True
    assert body["data"]["first_name"] == "Ada"
    assert body["data"]["phone"] == "555-0100"


def test_car_with_ledger_history_cannot_be_deleted(admin, car):
    admin.post(
        "/api/income-expense/cogs",
        json={"car_id": car["id"], "year": 2025, "month": 1, "values": {"tires": 10}},
    )
    body = admin.delete(f"/api/cars/{car['id']}").json()
    assert body["success"] is False


def test_unused_car_can_be_deleted(admin):
    car = create_car(admin, vin="VINDEL")
    assert admin.delete(f"/api/cars/{car['id']}").json()["success"] is True
    assert admin.get(f"/api/cars/{car['id']}").json()["success"] is False


def test_client_car_count_and_deactivate(admin, car):
    clients = admin.get("/api/clients").json()
    assert clients["data"][0]["car_count"] == 1

    client_id = car["client_id"]
    body = admin.post(f"/api/clients/{client_id}/deactivate").json()
    assert body["data"]["is_active"] is False
    assert admin.get("/api/clients").json()["total"] == 0
    assert admin.get("/api/clients", params={"include_inactive": True}).json()["total"] == 1
