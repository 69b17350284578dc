# household_budget/errors.py
from datetime import datetime, timezone

from flask import g, jsonify, request
from werkzeug.exceptions import HTTPException

from .messages import localize

SENSITIVE_HEADERS = {"authorization", "cookie", "x-csrf-token"}


class ApiError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code = 500
    error_type = "INTERNAL_ERROR"
    code = "INTERNAL_SERVER_ERROR"
    message_key = "internal_error"

    def __init__(self, message_key=None, code=None, details=None):
        super().__init__(message_key or self.message_key)
        if message_key:
            self.message_key = message_key
        if code:
            self.code = code
        self.details = details

    @property
    def message(self):
        return localize(self.message_key)


class ValidationError(ApiError):
    status_code = 400
    error_type = "VALIDATION_ERROR"
    code = "VALIDATION_FAILED"
    message_key = "validation_failed"


class RequestTooLargeError(ValidationError):
    status_code = 413
    code = "REQUEST_TOO_LARGE"
    message_key = "request_too_large"


class AuthenticationError(ApiError):
    status_code = 401
    error_type = "AUTHENTICATION_ERROR"
    code = "AUTHENTICATION_REQUIRED"
    message_key = "authentication_required"


class AuthorizationError(ApiError):
    status_code = 403
    error_type = "AUTHORIZATION_ERROR"
    code = "ACCESS_FORBIDDEN"
    message_key = "access_forbidden"


class CSRFError(AuthorizationError):
    error_type = "CSRF_ERROR"
    code = "INVALID_CSRF_TOKEN"
    message_key = "invalid_csrf_token"


class NotFoundError(ApiError):
    status_code = 404
    error_type = "NOT_FOUND"
    code = "RESOURCE_NOT_FOUND"
    message_key = "resource_not_found"


class ConflictError(ApiError):
    status_code = 409
    error_type = "CONFLICT"
    code = "RESOURCE_CONFLICT"
    message_key = "bill_exists"


class RateLimitError(ApiError):
    status_code = 429
    error_type = "RATE_LIMIT_ERROR"
    code = "RATE_LIMIT_EXCEEDED"
    message_key = "rate_limited"


class InfrastructureError(ApiError):
    status_code = 500
    error_type = "INTERNAL_ERROR"
    code = "PROCESSING_ERROR"
    message_key = "internal_error"


_HTTP_ERROR_KINDS = {
    400: (ValidationError, "invalid_input"),
    401: (AuthenticationError, "authentication_required"),
    403: (AuthorizationError, "access_forbidden"),
    404: (NotFoundError, "resource_not_found"),
    405: (NotFoundError, "resource_not_found"),
    413: (RequestTooLargeError, "request_too_large"),
    429: (RateLimitError, "rate_limited"),
}


def error_body(error):
    body = {
        "error": error.message,
        "type": error.error_type,
        "code": error.code,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    request_id = g.get("request_id")
    if request_id:
        body["request_id"] = request_id
    if error.details:
        body["details"] = error.details
    return body


def error_response(error):
    return jsonify(error_body(error)), error.status_code


def safe_headers():
    """Request headers with credentials stripped, for logging."""
    return {k: v for k, v in request.headers.items() if k.lower() not in SENSITIVE_HEADERS}


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            app.logger.error("API error [%s] %s %s: %s", g.get("request_id"), request.method, request.path,
                             e.__cause__ or e)
        return error_response(e)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        kind, message_key = _HTTP_ERROR_KINDS.get(e.code, (InfrastructureError, "internal_error"))
        error = kind(message_key)
        error.status_code = e.code or 500
        return error_response(error)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled exception [%s] %s %s | headers=%s", g.get("request_id"), request.method,
                             request.path, safe_headers())
        return error_response(InfrastructureError(code="INTERNAL_SERVER_ERROR"))
