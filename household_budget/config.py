import os
import secrets
from datetime import timedelta

SECRETS_DIR = os.environ.get("SECRETS_DIR", "/run/secrets")
MIN_SECRET_LENGTH = 32


def read_secret(name, env_var):
    """Read a secret from the container secrets dir, falling back to the environment."""
    path = os.path.join(SECRETS_DIR, name)
    try:
        with open(path, encoding="utf-8") as fh:
            value = fh.read().strip()
        if value:
            return value
    except OSError:
        pass
    value = os.environ.get(env_var, "").strip()
    return value or None


def _env_bool(key, default):
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(key, default):
    try:
        return int(os.environ.get(key, default))
    except (TypeError, ValueError):
        return default


class Config:
    APP_ENV = "production"

    # Session cookie signing (also carries the CSRF token)
    SECRET_KEY = read_secret("session_secret", "SESSION_SECRET")
    SESSION_COOKIE_NAME = "household_budget_session"
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", False)

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # JWT Configuration
    JWT_SECRET_KEY = read_secret("jwt_secret", "JWT_SECRET")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"

    # CSRF
    CSRF_ENABLED = _env_bool("CSRF_ENABLED", True)
    CSRF_SECRET = read_secret("csrf_secret", "CSRF_SECRET")
    CSRF_HEADER_NAME = "X-CSRF-Token"
    CSRF_TIME_LIMIT = _env_int("CSRF_TIME_LIMIT", 12 * 3600)

    # Requests per window, keyed by client ip
    RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
    RATE_LIMIT_WINDOW_SECONDS = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)
    RATE_LIMIT_GENERAL = _env_int("RATE_LIMIT_GENERAL", 100)
    RATE_LIMIT_AUTH = _env_int("RATE_LIMIT_AUTH", 10)
    RATE_LIMIT_CREATE = _env_int("RATE_LIMIT_CREATE", 30)

    # Input validation
    MAX_BODY_SIZE = 1024 * 1024
    MAX_FIELD_LENGTH = 1000
    STRICT_MAX_BODY_SIZE = 10 * 1024
    STRICT_MAX_FIELD_LENGTH = 100

    CORS_ALLOWED_ORIGINS = os.environ.get(
        "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://frontend:80"
    )
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls, app):
        jwt_secret = app.config.get("JWT_SECRET_KEY")
        if not jwt_secret:
            raise ValueError("JWT_SECRET environment variable or jwt_secret Docker secret must be set")
        if len(jwt_secret) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters long")
        if not app.config.get("SECRET_KEY"):
            raise ValueError("SESSION_SECRET environment variable or session_secret Docker secret must be set")
        if app.config.get("CSRF_ENABLED") and not app.config.get("CSRF_SECRET"):
            raise ValueError("CSRF_SECRET environment variable or csrf_secret Docker secret must be set")


class ProductionConfig(Config):
    pass


class DevelopmentConfig(Config):
    APP_ENV = "development"
    DEBUG = True

    @classmethod
    def validate(cls, app):
        for key, label in (("JWT_SECRET_KEY", "JWT"), ("SECRET_KEY", "session"), ("CSRF_SECRET", "CSRF")):
            value = app.config.get(key)
            if not value:
                app.logger.warning("Using a generated %s secret; set it explicitly outside development", label)
                app.config[key] = secrets.token_urlsafe(48)
            elif len(value) < MIN_SECRET_LENGTH:
                app.logger.warning("%s secret should be at least %d characters long (current: %d)",
                                   label, MIN_SECRET_LENGTH, len(value))


class TestingConfig(DevelopmentConfig):
    APP_ENV = "testing"
    DEBUG = False
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SECRET_KEY = "test-session-secret-0123456789abcdef0123"
    JWT_SECRET_KEY = "test-jwt-secret-0123456789abcdef0123456789"
    CSRF_SECRET = "test-csrf-secret-0123456789abcdef012345"
    CSRF_ENABLED = False
    RATE_LIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


CONFIGS = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "testing": TestingConfig,
}


def get_config(name=None):
    """Resolve a config class from a name, falling back to APP_ENV."""
    name = (name or os.environ.get("APP_ENV") or "production").lower()
    try:
        return CONFIGS[name]
    except KeyError:
        raise ValueError(f"Unknown APP_ENV {name!r}; expected one of {', '.join(CONFIGS)}")
