# household_budget/__init__.py
from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

from flask import Flask, g, has_app_context
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.utils import import_string

from .config import CONFIGS, get_config
from .errors import register_error_handlers
from .extensions import cors, db, jwt, migrate
from .security import init_security

__version__ = "1.0.0"


# --- Config ------------------------------------------------------------------
def _resolve_config(config_object: Optional[str | Any]):
    """Accepts a config class, an environment name or a dotted path."""
    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS") or get_config()
    if isinstance(config_object, str):
        if config_object.lower() in CONFIGS:
            return CONFIGS[config_object.lower()]
        return import_string(config_object)
    return config_object


def _get_allowed_origins(app: Flask) -> list[str]:
    origins = app.config.get("CORS_ALLOWED_ORIGINS") or ""
    if isinstance(origins, str):
        origins = origins.split(",")
    return sorted({o.strip() for o in origins if o.strip()})


class RequestIdFilter(logging.Filter):
    """Stamps records with the id assigned to the current request, or "-"."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = g.get("request_id", "-") if has_app_context() else "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _configure_logging(app: Flask) -> None:
    """JSON logs to stdout, one object per line."""
    level = app.config.get("LOG_LEVEL", "INFO")
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z"))
        handler.addFilter(RequestIdFilter())
        root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins(app)}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization", "X-CSRF-Token"],
        expose_headers=["Content-Length"],
        max_age=12 * 3600,
    )


def _configure_proxy(app: Flask) -> None:
    """Respect X-Forwarded-* from the reverse proxy in front of the API."""
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None) -> Flask:
    """
    Standard Flask application factory.

    `config_object` may be:
      - a config class
      - an environment name ("development", "testing", "production")
      - dotted path to a config class (e.g., "household_budget.config.ProductionConfig")
      - None (then CONFIG_CLASS or APP_ENV from the environment decide)
    """
    app = Flask(__name__, instance_relative_config=True)

    config_class = _resolve_config(config_object)
    app.config.from_object(config_class)
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        os.makedirs(app.instance_path, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(app.instance_path, "household_budget.db")

    _configure_logging(app)
    config_class.validate(app)
    _configure_proxy(app)
    _configure_cors(app)

    _init_extensions(app)
    register_error_handlers(app)
    init_security(app, jwt)

    from .services import init_services
    from .routes import register_blueprints
    from .cli import register_cli

    init_services(app)
    register_blueprints(app)
    register_cli(app)

    app.logger.info("household-budget API started (env=%s)", app.config.get("APP_ENV"))
    return app
