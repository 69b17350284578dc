from flask import Blueprint, jsonify

from ..security.auth import login_required
from ..services import get_auth_service

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("")
@login_required
def list_users():
    """All users, for choosing a payer when creating a bill."""
    users = get_auth_service().get_all_users()
    return jsonify({"users": [user.serialize() for user in users]}), 200
