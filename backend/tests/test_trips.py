from __future__ import annotations


def _trip(reservation_id, car_id, status="completed", earnings=100.0, day=1):
    return {
        "reservation_id": reservation_id,
        "car_id": car_id,
        "guest_name": f"Guest {reservation_id}",
        "status": status,
        "trip_start": f"2025-03-{day:02d}T10:00:00",
        "trip_end": f"2025-03-{day + 2:02d}T10:00:00",
        "earnings": earnings,
    }


def test_import_upserts_by_reservation_and_reports_unknown_cars(admin, car):
    first = admin.post("/api/turo-trips/import", json={"trips": [
        _trip("R1", car["id"]), _trip("R2", car["id"], day=5), _trip("R3", 9999),
    ]}).json()
    assert first["data"]["created"] == 2
    assert first["data"]["errors"] == ["R3: car 9999 not found"]

    second = admin.post("/api/turo-trips/import", json={"trips": [
        _trip("R1", car["id"], status="cancelled", earnings=0),
    ]}).json()
    assert second["data"] == {"created": 0, "updated": 1, "errors": []}


def test_summary_excludes_cancelled_earnings(admin, car):
    admin.post("/api/turo-trips/import", json={"trips": [
        _trip("R1", car["id"], earnings=120),
        _trip("R2", car["id"], status="cancelled", earnings=80, day=4),
        _trip("R3", car["id"], status="booked", earnings=60, day=7),
    ]})

    summary = admin.get("/api/turo-trips/summary").json()["data"]

    assert summary["total_trips"] == 3
    assert summary["total_earnings"] == 180
    assert summary["by_status"]["cancelled"] == 1


def test_list_filters_and_names_cars(admin, car):
    admin.post("/api/turo-trips/import", json={"trips": [
        _trip("R1", car["id"]), _trip("R2", car["id"], status="booked", day=9),
    ]})

    body = admin.get("/api/turo-trips", params={"status": "booked"}).json()

    assert body["total"] == 1
    assert body["data"][0]["reservation_id"] == "R2"
    assert body["data"][0]["car_name"] == "Toyota Corolla"


def test_trip_end_before_start_is_invalid(admin, car):
    trip = _trip("R1", car["id"])
    trip["trip_end"] = "2025-02-01T00:00:00"
    assert admin.post("/api/turo-trips/import", json={"trips": [trip]}).status_code == 422
