"""Sidebar navigation filtered by the signed-in user's role."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from fleet_portal.models.user import UserRole


@dataclass(frozen=True)
class SidebarItem:
    href: str
    label: str
    icon: str
    roles: tuple[UserRole, ...] = ()

    def visible_to(self, role: UserRole | None) -> bool:
        if not self.roles:
            return True
        return role is not None and role in self.roles

    def to_dict(self) -> dict:
        data = asdict(self)
        data["roles"] = [r.value for r in self.roles]
        return data


_ADMIN = (UserRole.ADMIN,)

SIDEBAR_ITEMS: tuple[SidebarItem, ...] = (
    SidebarItem("/dashboard", "Dashboard", "layout-dashboard"),
    SidebarItem("/profile", "Profile", "user", (UserRole.CLIENT,)),
    SidebarItem("/admin/admins", "Admins", "users", _ADMIN),
    SidebarItem("/admin/clients", "Clients", "users", _ADMIN),
    SidebarItem("/cars", "Cars", "car"),
    SidebarItem("/admin/income-expenses", "Income and Expenses", "dollar-sign", _ADMIN),
    SidebarItem("/admin/payments", "Client Payments", "credit-card", _ADMIN),
    SidebarItem("/admin/totals", "Totals", "calculator"),
    SidebarItem("/admin/maintenance", "Car Maintenance", "wrench"),
    SidebarItem("/admin/forms", "Forms", "clipboard-list"),
    SidebarItem("/admin/view-client", "View as a Client", "eye", _ADMIN),
    SidebarItem("/admin/view-employee", "View as an Employee", "eye", _ADMIN),
    SidebarItem("/admin/car-rental", "Car Rental", "key", _ADMIN),
    SidebarItem("/admin/hr", "Human Resources", "briefcase", _ADMIN),
    SidebarItem("/admin/payroll", "Payroll", "dollar-sign", _ADMIN),
    SidebarItem("/admin/settings", "Settings", "settings"),
    SidebarItem("/admin/turo-guide", "Turo Guide", "book-open"),
    SidebarItem("/admin/training-manual", "System Tutorial", "graduation-cap"),
    SidebarItem("/admin/testimonials", "Client Testimonials", "star"),
)


def items_for_role(
    role: UserRole | None,
    items: tuple[SidebarItem, ...] = SIDEBAR_ITEMS,
) -> list[SidebarItem]:
    """Return the items a user with ``role`` may see.

    Items without roles are shown to every signed-in user. A missing role
    (no user) sees nothing.
    """
    if role is None:
        return []
    return [item for item in items if item.visible_to(role)]


def is_active(item: SidebarItem, location: str) -> bool:
    """Whether ``item`` should be highlighted for the current location."""
    if location == item.href:
        return True
    return item.href != "/dashboard" and location.startswith(item.href)
