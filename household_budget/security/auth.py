from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..errors import AuthenticationError


def login_required(f):
    """Require a valid, unrevoked bearer token and expose its user id as ``g.user_id``."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        try:
            g.user_id = int(get_jwt_identity())
        except (TypeError, ValueError):
            raise AuthenticationError("invalid_token", code="INVALID_TOKEN")
        return f(*args, **kwargs)
    return wrapper
