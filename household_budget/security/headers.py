from flask import g, request

CACHEABLE_PATHS = ("/health", "/api/csrf-token")

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def init_app(app):
    development = app.config.get("APP_ENV") != "production"

    @app.after_request
    def _security_headers(resp):
        for name, value in SECURITY_HEADERS.items():
            resp.headers[name] = value

        if request.path.startswith("/api/"):
            resp.headers["Content-Security-Policy"] = "default-src 'none'"

        if request.path not in CACHEABLE_PATHS:
            resp.headers.update(NO_STORE_HEADERS)

        resp.headers["Server"] = ""
        return resp

    if development:
        @app.after_request
        def _development_headers(resp):
            resp.headers["X-Environment"] = app.config.get("APP_ENV", "development")
            resp.headers["X-Request-ID"] = g.get("request_id", "")
            return resp
