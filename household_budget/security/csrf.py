"""Session-bound CSRF tokens for state-changing requests.

``GET /api/csrf-token`` stores a random value in the signed session cookie and
hands the client a signed, time-limited copy of it. Mutating requests must
echo that copy in the ``X-CSRF-Token`` header.
"""
import hmac
import logging
import secrets

from flask import current_app, request, session
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from ..errors import CSRFError

logger = logging.getLogger(__name__)

SESSION_KEY = "csrf_token"
SAFE_METHODS = frozenset(["GET", "HEAD", "OPTIONS", "TRACE"])
_SALT = "household-budget-csrf"


def _serializer():
    return URLSafeTimedSerializer(current_app.config["CSRF_SECRET"], salt=_SALT)


def generate_csrf_token():
    if SESSION_KEY not in session:
        session[SESSION_KEY] = secrets.token_hex(32)
    return _serializer().dumps(session[SESSION_KEY])


def validate_csrf_token(token):
    if not token:
        raise CSRFError(details={"reason": "missing"})

    expected = session.get(SESSION_KEY)
    if not expected:
        raise CSRFError(details={"reason": "no_session_token"})

    try:
        value = _serializer().loads(token, max_age=current_app.config.get("CSRF_TIME_LIMIT"))
    except SignatureExpired:
        raise CSRFError(details={"reason": "expired"})
    except BadData:
        raise CSRFError(details={"reason": "invalid"})

    if not isinstance(value, str) or not hmac.compare_digest(value, expected):
        raise CSRFError(details={"reason": "mismatch"})


def init_app(app):
    @app.before_request
    def _csrf_protect():
        if not current_app.config.get("CSRF_ENABLED", True):
            return
        if request.method in SAFE_METHODS:
            return
        token = request.headers.get(current_app.config.get("CSRF_HEADER_NAME", "X-CSRF-Token"))
        try:
            validate_csrf_token(token)
        except CSRFError as e:
            logger.warning("CSRF check failed (%s): %s %s", e.details["reason"], request.method, request.path)
            raise
