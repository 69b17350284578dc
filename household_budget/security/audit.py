import logging
import time
import uuid

from flask import g, request

audit_logger = logging.getLogger("household_budget.audit")

SENSITIVE_ENDPOINTS = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/auth/logout",
    "/api/auth/me",
)
AUDITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def is_security_sensitive(path, method):
    return path.startswith(SENSITIVE_ENDPOINTS) or method in AUDITED_METHODS


def init_request_id(app):
    """First stage of the pipeline; every error body and log line can reference it."""
    @app.before_request
    def _assign_request_id():
        g.request_id = uuid.uuid4().hex


def init_app(app):
    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _audit(resp):
        if is_security_sensitive(request.path, request.method):
            started = g.get("request_started")
            duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
            audit_logger.info(
                "Security audit: %s %s | status=%s | duration=%.1fms | ip=%s | user=%s | ua=%s | request_id=%s",
                request.method,
                request.path,
                resp.status_code,
                duration_ms,
                request.remote_addr,
                g.get("user_id"),
                request.user_agent.string,
                g.get("request_id"),
            )
        return resp
