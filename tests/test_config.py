"""
Unit tests for configuration loading and startup validation.
"""

import pytest

from household_budget import config as config_module
from household_budget import create_app
from household_budget.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    read_secret,
)

IN_MEMORY = {"SQLALCHEMY_DATABASE_URI": "sqlite://", "SQLALCHEMY_ENGINE_OPTIONS": {}}
LONG_SECRET = "s" * 40


def _config(base, **overrides):
    return type("CustomConfig", (base,), {**IN_MEMORY, **overrides})


class TestReadSecret:
    def test_secret_file_wins_over_environment(self, tmp_path, monkeypatch):
        (tmp_path / "jwt_secret").write_text("from-file\n", encoding="utf-8")
        monkeypatch.setattr(config_module, "SECRETS_DIR", str(tmp_path))
        monkeypatch.setenv("JWT_SECRET", "from-env")

        assert read_secret("jwt_secret", "JWT_SECRET") == "from-file"

    def test_falls_back_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, "SECRETS_DIR", str(tmp_path))
        monkeypatch.setenv("JWT_SECRET", "from-env")

        assert read_secret("jwt_secret", "JWT_SECRET") == "from-env"

    def test_missing_everywhere(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, "SECRETS_DIR", str(tmp_path))
        monkeypatch.delenv("JWT_SECRET", raising=False)

        assert read_secret("jwt_secret", "JWT_SECRET") is None


class TestConfigSelection:
    def test_named_configs(self):
        assert get_config("testing") is TestingConfig
        assert get_config("Development") is DevelopmentConfig

    def test_app_env_default(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_config() is ProductionConfig

        monkeypatch.setenv("APP_ENV", "testing")
        assert get_config() is TestingConfig

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_config("staging")

    def test_create_app_accepts_name_and_dotted_path(self):
        assert create_app("testing").config["APP_ENV"] == "testing"
        assert create_app("household_budget.config.TestingConfig").config["TESTING"] is True


class TestStartupValidation:
    """Production refuses weak or missing secrets."""

    def test_production_requires_jwt_secret(self):
        cfg = _config(ProductionConfig, JWT_SECRET_KEY=None, SECRET_KEY=LONG_SECRET, CSRF_SECRET=LONG_SECRET)
        with pytest.raises(ValueError, match="JWT_SECRET"):
            create_app(cfg)

    def test_production_rejects_short_jwt_secret(self):
        cfg = _config(ProductionConfig, JWT_SECRET_KEY="too-short", SECRET_KEY=LONG_SECRET, CSRF_SECRET=LONG_SECRET)
        with pytest.raises(ValueError, match="at least 32"):
            create_app(cfg)

    def test_production_requires_csrf_secret_when_enabled(self):
        cfg = _config(ProductionConfig, JWT_SECRET_KEY=LONG_SECRET, SECRET_KEY=LONG_SECRET,
                      CSRF_SECRET=None, CSRF_ENABLED=True)
        with pytest.raises(ValueError, match="CSRF_SECRET"):
            create_app(cfg)

    def test_production_starts_with_secrets(self):
        cfg = _config(ProductionConfig, JWT_SECRET_KEY=LONG_SECRET, SECRET_KEY=LONG_SECRET, CSRF_SECRET=LONG_SECRET)
        app = create_app(cfg)

        assert app.config["APP_ENV"] == "production"
        resp = app.test_client().get("/health")
        assert "X-Environment" not in resp.headers

    def test_development_generates_missing_secrets(self):
        cfg = _config(DevelopmentConfig, JWT_SECRET_KEY=None, SECRET_KEY=None, CSRF_SECRET=None)
        app = create_app(cfg)

        assert len(app.config["JWT_SECRET_KEY"]) >= 32
        assert app.config["SECRET_KEY"]
        assert app.config["CSRF_SECRET"]
