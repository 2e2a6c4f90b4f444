"""Pytest configuration and fixtures."""

import pytest

from greenquest import create_app, db
from greenquest.models import User, UserRole


class AuthenticatedClient:
    """Test client wrapper that sends a bearer token with every request."""

    def __init__(self, client, headers):
        self._client = client
        self._headers = headers

    def get(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.get(*args, **kwargs)

    def post(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.post(*args, **kwargs)

    def put(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.put(*args, **kwargs)

    def delete(self, *args, **kwargs):
        kwargs.setdefault("headers", {}).update(self._headers)
        return self._client.delete(*args, **kwargs)


@pytest.fixture
def app():
    """Create and configure a test application instance."""
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory creating a user row and returning its id and email."""

    def _make_user(email, name="User", role=UserRole.USER.value):
        user = User(email=email, name=name, role=role)
        db.session.add(user)
        db.session.commit()
        return {"id": user.id, "email": user.email}

    return _make_user


@pytest.fixture
def login(client):
    """Factory returning auth headers for an existing user's email."""

    def _login(email):
        response = client.post("/api/v1/auth/dev", json={"email": email})
        assert response.status_code == 200
        token = response.json["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def test_user(make_user):
    """Create a test user in the database."""
    return make_user("test@example.com", "Test User")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@example.com", "Admin", UserRole.ADMIN.value)


@pytest.fixture
def agent_user(make_user):
    return make_user("agent@example.com", "Agent", UserRole.AGENT.value)


@pytest.fixture
def auth_headers(login, test_user):
    """Get authorization headers with JWT token."""
    return login(test_user["email"])


@pytest.fixture
def auth_client(client, auth_headers):
    """Authenticated client for the plain test user."""
    return AuthenticatedClient(client, auth_headers)


@pytest.fixture
def admin_client(client, login, admin_user):
    return AuthenticatedClient(client, login(admin_user["email"]))


@pytest.fixture
def agent_client(client, login, agent_user):
    return AuthenticatedClient(client, login(agent_user["email"]))
