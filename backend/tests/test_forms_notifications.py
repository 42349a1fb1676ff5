from __future__ import annotations

from conftest import create_car


def _submit(client, car_id, form_type="going_out"):
    return client.post("/api/forms", json={
        "car_id": car_id, "form_type": form_type, "mileage": 12000, "fuel_level": "3/4",
    }).json()


def test_employee_submits_and_admin_approves(employee, admin, car):
    form = _submit(employee, car["id"])
    assert form["success"] is True
    assert form["data"]["status"] == "pending"

    pending = admin.get("/api/forms", params={"status": "pending"}).json()
    assert pending["total"] == 1

    approved = admin.post(f"/api/forms/{form['data']['id']}/approve").json()
    assert approved["data"]["status"] == "approved"
    assert admin.get(f"/api/cars/{car['id']}").json()["data"]["status"] == "rented"

    again = admin.post(f"/api/forms/{form['data']['id']}/approve").json()
    assert again["success"] is False


def test_decline_notifies_submitter(employee, admin, car):
    form = _submit(employee, car["id"], form_type="coming_back")
    admin.post(f"/api/forms/{form['data']['id']}/decline", json={"reason": "Photos missing"})

    body = employee.get("/api/notifications").json()
    assert body["meta"]["unread_count"] == 1
    note = body["data"][0]
    assert note["title"] == "Inspection form declined"
    assert note["message"] == "Photos missing"

    mine = employee.get("/api/forms/mine").json()
    assert mine["data"][0]["decline_reason"] == "Photos missing"
    assert admin.get(f"/api/cars/{car['id']}").json()["data"]["status"] == "available"


def test_offboarded_car_rejects_forms(employee, admin):
    car = create_car(admin, vin="VIN-OFF", status="offboarded")
    assert _submit(employee, car["id"])["success"] is False


def test_bad_fuel_level(employee, car):
    resp = employee.post("/api/forms", json={
        "car_id": car["id"], "form_type": "going_out", "mileage": 1, "fuel_level": "half",
    })
    assert resp.status_code == 422


def test_notifications_are_scoped_and_marked_read(employee, admin, car):
    for _ in range(2):
        form = _submit(employee, car["id"])
        admin.post(f"/api/forms/{form['data']['id']}/decline", json={"reason": "No"})

    assert admin.get("/api/notifications").json()["data"] == []

    notes = employee.get("/api/notifications").json()["data"]
    assert admin.post(f"/api/notifications/{notes[0]['id']}/read").json()["success"] is False

    read = employee.post(f"/api/notifications/{notes[0]['id']}/read").json()
    assert read["data"]["is_read"] is True
    assert employee.get("/api/notifications").json()["meta"]["unread_count"] == 1

    assert employee.post("/api/notifications/read-all").json()["data"]["updated"] == 1
    unread = employee.get("/api/notifications", params={"unread_only": True}).json()
    assert unread["data"] == []
