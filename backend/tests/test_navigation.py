from fleet_portal.models.user import UserRole
from fleet_portal.utils.navigation import SIDEBAR_ITEMS, is_active, items_for_role


def _hrefs(role):
    return {item.href for item in items_for_role(role)}


def test_admin_sees_admin_and_shared_items():
    assert _hrefs(UserRole.ADMIN) == {item.href for item in SIDEBAR_ITEMS if UserRole.ADMIN in item.roles or not item.roles}


def test_employee_does_not_see_admin_only_entries():
    hrefs = _hrefs(UserRole.EMPLOYEE)

    assert "/admin/income-expenses" not in hrefs
    assert "/admin/payments" not in hrefs
    assert "/profile" not in hrefs
    assert "/dashboard" in hrefs
    assert "/admin/forms" in hrefs


def test_client_gets_profile():
    assert "/profile" in _hrefs(UserRole.CLIENT)


def test_no_user_sees_nothing():
    assert items_for_role(None) == []


def test_active_item_matches_prefix_except_dashboard():
    cars = next(i for i in SIDEBAR_ITEMS if i.href == "/cars")
    dashboard = next(i for i in SIDEBAR_ITEMS if i.href == "/dashboard")

    assert is_active(cars, "/cars/12")
    assert not is_active(dashboard, "/dashboard-old")
    assert is_active(dashboard, "/dashboard")


def test_navigation_endpoint_filters_by_role(employee):
    body = employee.get("/api/navigation", params={"location": "/admin/forms"}).json()

    hrefs = {item["href"] for item in body["data"]}
    assert "/admin/payments" not in hrefs
    active = [item["href"] for item in body["data"] if item["active"]]
    assert active == ["/admin/forms"]
