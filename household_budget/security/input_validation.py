import logging
import re
import unicodedata
from functools import wraps

from flask import current_app, request

from ..errors import RequestTooLargeError, ValidationError

logger = logging.getLogger(__name__)

SQL_INJECTION_PATTERNS = [
    re.compile(r"(union\s+select|drop\s+table|delete\s+from|update\s+\w+\s+set)", re.IGNORECASE),
    re.compile(r"(exec\s*\(|sp_executesql|xp_cmdshell)", re.IGNORECASE),
    re.compile(r"(<\s*script|javascript:|vbscript:|onload\s*=|onerror\s*=)", re.IGNORECASE),
    re.compile(r"(\bor\s+1\s*=\s*1|\band\s+1\s*=\s*1)", re.IGNORECASE),
    re.compile(r"('\s*or\s*'|'\s*and\s*')", re.IGNORECASE),
]

XSS_PATTERNS = [
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"\bon\w+\s*=", re.IGNORECASE),
    re.compile(r"<object[^>]*>.*?</object>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<embed[^>]*>", re.IGNORECASE),
]

ALLOWED_CONTROL_CHARS = {"\n", "\r", "\t"}

# Secrets are checked for length and encoding only
UNSCANNED_FIELDS = {"password"}


def contains_control_chars(value):
    return any(
        unicodedata.category(ch) == "Cc" and ch not in ALLOWED_CONTROL_CHARS
        for ch in value
    )


def contains_sql_injection(value):
    return any(p.search(value) for p in SQL_INJECTION_PATTERNS)


def contains_xss(value):
    return any(p.search(value) for p in XSS_PATTERNS)


def check_value(value, max_length, scan_patterns=True):
    """Return a violation code for ``value``, or None when it is acceptable."""
    if len(value) > max_length:
        return "LENGTH_EXCEEDED"
    if contains_control_chars(value):
        return "CONTROL_CHARS"
    if scan_patterns and contains_sql_injection(value):
        return "SQL_INJECTION"
    if scan_patterns and contains_xss(value):
        return "XSS_ATTACK"
    return None


def _reject(field, violation, max_length):
    logger.warning("Rejected input: field=%s violation=%s path=%s", field, violation, request.path)
    raise ValidationError(
        "invalid_input",
        code="INVALID_INPUT",
        details={"field": field, "violation": violation, "max_length": max_length},
    )


def validate_request(max_body_size, max_field_length, check_json=False):
    if request.content_length is not None and request.content_length > max_body_size:
        raise RequestTooLargeError(details={"max_size": max_body_size})

    for key, values in request.args.lists():
        for value in values:
            violation = check_value(value, max_field_length)
            if violation:
                _reject(key, violation, max_field_length)

    if check_json and request.is_json:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            for key, value in data.items():
                if not isinstance(value, str):
                    continue
                violation = check_value(value, max_field_length, scan_patterns=key not in UNSCANNED_FIELDS)
                if violation:
                    _reject(key, violation, max_field_length)


def strict_input_validation(f):
    """Tighter limits for authentication endpoints, applied to JSON fields too."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        validate_request(
            current_app.config.get("STRICT_MAX_BODY_SIZE", 10 * 1024),
            current_app.config.get("STRICT_MAX_FIELD_LENGTH", 100),
            check_json=True,
        )
        return f(*args, **kwargs)
    return wrapper


def validate_input_data(required_fields=None, optional_fields=None):
    """Require a JSON object body with the given fields and no others."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                raise ValidationError(details={"errors": ["request body must be a JSON object"]})

            errors = []
            for field in required_fields or []:
                if field not in data or data[field] is None or str(data[field]).strip() == "":
                    errors.append(f"{field} is required")

            allowed_fields = set((required_fields or []) + (optional_fields or []))
            if allowed_fields:
                unexpected_fields = set(data) - allowed_fields
                if unexpected_fields:
                    errors.append(f"Unexpected fields: {', '.join(sorted(unexpected_fields))}")

            if errors:
                raise ValidationError(details={"errors": errors})
            return f(*args, **kwargs)
        return wrapper
    return decorator


def validation_settings(app):
    return {
        "validation_enabled": True,
        "max_body_size": app.config.get("MAX_BODY_SIZE"),
        "max_field_length": app.config.get("MAX_FIELD_LENGTH"),
        "sql_injection_protection": True,
        "xss_protection": True,
    }


def init_app(app):
    @app.before_request
    def _validate_input():
        validate_request(
            current_app.config.get("MAX_BODY_SIZE", 1024 * 1024),
            current_app.config.get("MAX_FIELD_LENGTH", 1000),
        )
