from ..extensions import db

from .user import User
from .bill import MonthlyBill, BillItem, BILL_STATUSES, STATUS_PENDING, STATUS_REQUESTED, STATUS_PAID

__all__ = [
    "db",
    "User",
    "MonthlyBill",
    "BillItem",
    "BILL_STATUSES",
    "STATUS_PENDING",
    "STATUS_REQUESTED",
    "STATUS_PAID",
]
