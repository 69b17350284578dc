"""Shared fixtures: an app on in-memory SQLite plus user and token helpers."""
import pytest

from household_budget import create_app
from household_budget.config import TestingConfig
from household_budget.extensions import db
from household_budget.security.passwords import PasswordHasher
from household_budget.services import AuthService, init_services

PASSWORD = "correct-horse-battery"


def build_app(**overrides):
    """Create an app from TestingConfig with per-test setting overrides."""
    config = type("OverriddenTestingConfig", (TestingConfig,), overrides)
    app = create_app(config)
    # low round count keeps the suite fast; the algorithm is unchanged
    init_services(app, auth_service=AuthService(password_hasher=PasswordHasher(rounds=1000)))
    with app.app_context():
        db.create_all()
    return app


def teardown(app):
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app():
    app = build_app()
    yield app
    teardown(app)


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, account_id, name=None, password=PASSWORD):
    """Register through the API; returns (token, user dict)."""
    resp = client.post("/api/auth/register", json={
        "name": name or account_id.title(),
        "account_id": account_id,
        "password": password,
    })
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return body["token"], body["user"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    return register(client, "alice")


@pytest.fixture
def bob(client):
    return register(client, "bob")
