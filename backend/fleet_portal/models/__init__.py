from fleet_portal.models.user import User
from fleet_portal.models.client import Client
from fleet_portal.models.car import Car
from fleet_portal.models.ledger_value import LedgerReceipt, LedgerValue
from fleet_portal.models.ledger_log import LedgerLog
from fleet_portal.models.formula_setting import FormulaSetting
from fleet_portal.models.dynamic_subcategory import (
    DynamicSubcategory,
    DynamicSubcategoryValue,
)
from fleet_portal.models.payment import Payment, PaymentStatus
from fleet_portal.models.turo_trip import TuroTrip
from fleet_portal.models.notification import Notification
from fleet_portal.models.quick_link import QuickLink
from fleet_portal.models.inspection_form import InspectionForm

__all__ = [
    "User",
    "Client",
    "Car",
    "LedgerValue",
    "LedgerReceipt",
    "LedgerLog",
    "FormulaSetting",
    "DynamicSubcategory",
    "DynamicSubcategoryValue",
    "Payment",
    "PaymentStatus",
    "TuroTrip",
    "Notification",
    "QuickLink",
    "InspectionForm",
]
