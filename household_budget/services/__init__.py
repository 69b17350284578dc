from flask import current_app

from .auth_service import AuthService, LoginResult
from .bill_service import BillService


def init_services(app, auth_service=None, bill_service=None):
    app.extensions["auth_service"] = auth_service or AuthService()
    app.extensions["bill_service"] = bill_service or BillService()


def get_auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def get_bill_service() -> BillService:
    return current_app.extensions["bill_service"]


__all__ = [
    "AuthService",
    "BillService",
    "LoginResult",
    "init_services",
    "get_auth_service",
    "get_bill_service",
]
