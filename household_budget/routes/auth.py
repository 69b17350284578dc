# household_budget/routes/auth.py
from flask import Blueprint, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt

from ..errors import AuthenticationError
from ..messages import localize
from ..security.auth import login_required
from ..security.input_validation import strict_input_validation, validate_input_data
from ..security.rate_limit import AUTH, rate_limit
from ..security.tokens import TokenService
from ..services import get_auth_service

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _bearer_token():
    header = request.headers.get(current_app.config.get("JWT_HEADER_NAME", "Authorization"), "")
    if header.startswith("Bearer "):
        header = header[len("Bearer "):]
    return header.strip()


@bp.post("/login")
@rate_limit(AUTH)
@strict_input_validation
@validate_input_data(required_fields=["account_id", "password"])
def login():
    data = request.get_json()
    result = get_auth_service().login(str(data["account_id"]), str(data["password"]))
    return jsonify(result.serialize()), 200


@bp.post("/register")
@rate_limit(AUTH)
@strict_input_validation
@validate_input_data(required_fields=["name", "account_id", "password"])
def register():
    data = request.get_json()
    service = get_auth_service()
    user = service.register(str(data["name"]), str(data["account_id"]), str(data["password"]))
    token = service.issue_token(user)
    return jsonify({"token": token, "user": user.serialize()}), 201


@bp.get("/me")
@rate_limit(AUTH)
@login_required
def me():
    user = get_auth_service().get_user_by_id(g.user_id)
    return jsonify(user.serialize()), 200


@bp.post("/logout")
@rate_limit(AUTH)
@login_required
def logout():
    TokenService().revoke(get_jwt(), reason="user_logout")
    resp = jsonify({"message": localize("logged_out"), "code": "LOGOUT_SUCCESS"})
    resp.headers["X-User-Logout"] = "success"
    return resp, 200


@bp.post("/logout-all")
@rate_limit(AUTH)
@login_required
def logout_all():
    TokenService().revoke_all(g.user_id)
    return jsonify({"message": localize("logged_out_all"), "code": "LOGOUT_ALL_SUCCESS"}), 200


@bp.get("/token-status")
@rate_limit(AUTH)
def token_status():
    token = _bearer_token()
    if not token:
        raise AuthenticationError("authentication_required", code="MISSING_TOKEN")
    return jsonify({"token_status": TokenService().describe(token)}), 200
