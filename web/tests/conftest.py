"""Shared test fixtures for the web test suite."""

import pytest

from web import auth as auth_module
from web.app import create_app


@pytest.fixture
def app(store, fake_auth, monkeypatch):
    """Flask app serving the seeded in-memory store."""
    monkeypatch.setattr(auth_module, "ADMIN_EMAIL", "admin@example.com")
    flask_app = create_app(store=store, auth_client=fake_auth, load=False)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    with app.test_client() as test_client:
        yield test_client


def login(client, email, password):
    return client.post("/login", json={"email": email, "password": password})


@pytest.fixture
def admin_client(client):
    """Test client signed in as the editor."""
    response = login(client, "admin@example.com", "secret")
    assert response.status_code == 200
    return client


@pytest.fixture
def visitor_client(client):
    """Test client signed in with an account that is not the editor."""
    response = login(client, "visitor@example.com", "hunter2")
    assert response.status_code == 200
    return client
