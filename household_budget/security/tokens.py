"""Bearer token issuing, verification and revocation."""
import logging
import threading
import time
from datetime import datetime, timezone

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import ExpiredSignatureError, PyJWTError

from ..errors import AuthenticationError, error_response

logger = logging.getLogger(__name__)

ISSUED_AT_CLAIM = "issued_at"


class TokenBlocklist:
    """In-memory revocation list.

    Single tokens are revoked by ``jti`` until they expire; ``revoke_user``
    revokes every token a user was issued before the call. Lost on restart.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._tokens = {}        # jti -> (expires_at, reason)
        self._user_cutoffs = {}  # user id -> (revoked_before, keep_until)

    def revoke(self, jti, expires_at, reason="user_logout"):
        with self._lock:
            self._tokens[jti] = (expires_at, reason)

    def revoke_user(self, user_id, keep_until):
        now = self._clock()
        with self._lock:
            self._user_cutoffs[str(user_id)] = (now, keep_until)

    def is_revoked(self, payload):
        now = self._clock()
        with self._lock:
            entry = self._tokens.get(payload.get("jti"))
            if entry is not None:
                if entry[0] > now:
                    return True
                del self._tokens[payload.get("jti")]

            cutoff = self._user_cutoffs.get(str(payload.get("sub")))
            if cutoff is not None:
                if cutoff[1] <= now:
                    del self._user_cutoffs[str(payload.get("sub"))]
                    return False
                issued_at = payload.get(ISSUED_AT_CLAIM, payload.get("iat", 0))
                return issued_at < cutoff[0]
        return False

    def prune(self):
        now = self._clock()
        with self._lock:
            for jti in [k for k, (expires_at, _) in self._tokens.items() if expires_at <= now]:
                del self._tokens[jti]
            for user_id in [k for k, (_, keep_until) in self._user_cutoffs.items() if keep_until <= now]:
                del self._user_cutoffs[user_id]

    def status(self):
        now = self._clock()
        with self._lock:
            active = sum(1 for expires_at, _ in self._tokens.values() if expires_at > now)
            return {
                "total_tokens": len(self._tokens),
                "valid_tokens": active,
                "expired_tokens": len(self._tokens) - active,
                "revoked_users": len(self._user_cutoffs),
            }


def get_blocklist():
    return current_app.extensions["token_blocklist"]


class TokenService:
    """Issues and verifies signed, time-limited access tokens carrying a user id."""

    def issue(self, user_id) -> str:
        return create_access_token(
            identity=str(user_id),
            additional_claims={ISSUED_AT_CLAIM: time.time()},
        )

    def decode(self, token, allow_expired=False):
        try:
            return decode_token(token, allow_expired=allow_expired)
        except ExpiredSignatureError:
            raise AuthenticationError("token_expired", code="TOKEN_EXPIRED")
        except (PyJWTError, JWTExtendedException):
            raise AuthenticationError("invalid_token", code="INVALID_TOKEN")

    def verify(self, token) -> int:
        """Return the user id for a valid, unrevoked token."""
        payload = self.decode(token)
        if get_blocklist().is_revoked(payload):
            raise AuthenticationError("token_revoked", code="TOKEN_BLACKLISTED")
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("invalid_token", code="INVALID_TOKEN")

    def revoke(self, payload, reason="user_logout"):
        get_blocklist().prune()
        get_blocklist().revoke(payload["jti"], payload["exp"], reason)
        logger.info("Token revoked for user %s (%s)", payload.get("sub"), reason)

    def revoke_all(self, user_id):
        expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
        get_blocklist().prune()
        get_blocklist().revoke_user(user_id, time.time() + expires.total_seconds())
        logger.info("All tokens revoked for user %s", user_id)

    def describe(self, token):
        """Token details for the status endpoint; never raises for bad tokens."""
        try:
            payload = decode_token(token, allow_expired=True)
        except (PyJWTError, JWTExtendedException):
            return {"valid": False, "blacklisted": False, "error": "invalid_token"}

        revoked = get_blocklist().is_revoked(payload)
        expired = payload.get("exp", 0) <= time.time()
        return {
            "valid": not revoked and not expired,
            "blacklisted": revoked,
            "expired": expired,
            "user_id": int(payload["sub"]) if str(payload.get("sub", "")).isdigit() else None,
            "issued_at": _iso(payload.get("iat")),
            "expires_at": _iso(payload.get("exp")),
        }


def _iso(timestamp):
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def init_app(app, jwt):
    app.extensions["token_blocklist"] = TokenBlocklist()

    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header, jwt_payload):
        return get_blocklist().is_revoked(jwt_payload)

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return error_response(AuthenticationError("authentication_required", code="MISSING_TOKEN"))

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return error_response(AuthenticationError("invalid_token", code="INVALID_TOKEN"))

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return error_response(AuthenticationError("token_expired", code="TOKEN_EXPIRED"))

    @jwt.revoked_token_loader
    def _revoked_token(jwt_header, jwt_payload):
        return error_response(AuthenticationError("token_revoked", code="TOKEN_BLACKLISTED"))