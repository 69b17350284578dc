"""Request pipeline: each stage passes the request on or raises an ApiError.

Order: request id / error normalization, audit logging, security headers,
development headers, input validation, global rate limit, CSRF, then the view.
"""
from . import audit, csrf, headers, input_validation, rate_limit, tokens


def init_security(app, jwt):
    audit.init_request_id(app)
    audit.init_app(app)
    headers.init_app(app)
    input_validation.init_app(app)
    rate_limit.init_app(app)
    csrf.init_app(app)
    tokens.init_app(app, jwt)
