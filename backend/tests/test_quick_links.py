from __future__ import annotations


def test_links_are_grouped_and_filtered_by_role(admin, employee):
    admin.post("/api/quick-links", json={
        "category": "Turo", "title": "Host dashboard", "url": "https://turo.com/host",
    })
    admin.post("/api/quick-links", json={
        "category": "Staff", "title": "Schedule", "url": "https://example.com/schedule",
        "visible_to_employees": True,
    })

    admin_view = admin.get("/api/quick-links").json()["data"]
    staff_view = employee.get("/api/quick-links").json()["data"]

    assert [link["title"] for link in admin_view["Turo"]] == ["Host dashboard"]
    assert list(staff_view) == ["Staff"]


def test_only_admins_manage_links(admin, employee):
    resp = employee.post("/api/quick-links", json={"title": "x", "url": "https://x.io"})
    assert resp.status_code == 403


def test_update_and_delete(admin):
    link = admin.post("/api/quick-links", json={"title": "Docs", "url": "https://docs.io"}).json()["data"]

    updated = admin.put(f"/api/quick-links/{link['id']}", json={"visible_to_clients": True}).json()
    assert updated["data"]["visible_to_clients"] is True

    assert admin.delete(f"/api/quick-links/{link['id']}").json()["success"] is True
    assert admin.get("/api/quick-links").json()["data"] == {}


def test_invalid_url(admin):
    resp = admin.post("/api/quick-links", json={"title": "Bad", "url": "ftp://nope"})
    assert resp.status_code == 422
