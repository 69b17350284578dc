from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from ..messages import localize
from ..security.csrf import generate_csrf_token
from ..security.input_validation import validation_settings
from ..security.rate_limit import rate_limit_status
from ..security.tokens import get_blocklist

bp = Blueprint("system", __name__)


@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "message": localize("service_running"),
        "time": datetime.now(timezone.utc).isoformat(),
    }), 200


@bp.get("/api/csrf-token")
def csrf_token():
    return jsonify({"csrf_token": generate_csrf_token()}), 200


@bp.get("/api/security-status")
def security_status():
    return jsonify({
        "rate_limit": rate_limit_status(),
        "token_blacklist": get_blocklist().status(),
        "input_validation": validation_settings(current_app),
        "csrf_enabled": bool(current_app.config.get("CSRF_ENABLED")),
    }), 200
