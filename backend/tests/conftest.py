"""
Pytest fixtures for store console backend tests.

Provides the test app (in-memory SQLite), a clean database per test, the
test client, and helpers to create identities/admins and log them in.
"""

import pytest
from storeconsole import create_app
from storeconsole.config import Config
from storeconsole.extensions import db
from storeconsole.models import AdminUser, ROLE_ADMIN, ROLE_SUPER_ADMIN
from storeconsole.services import access_service, auth_service
from storeconsole.time_utils import utcnow


DEFAULT_PASSWORD = "secret123"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STORE_NAME = "Test General Store"
    CLOUDINARY_CLOUD_NAME = "test-cloud"
    CLOUDINARY_UPLOAD_PRESET = "test-preset"
    CLOUDINARY_FOLDER = "shop-products"
    UPLOAD_MAX_BYTES = 1024 * 1024
    MAX_CONTENT_LENGTH = UPLOAD_MAX_BYTES + 64 * 1024
    UPLOAD_TIMEOUT_SECONDS = 5
    PASSWORD_RESET_URL = "http://console.test/reset?token={token}"
    CORS_ALLOWED_ORIGINS = ["http://localhost:3000"]


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_identity(email: str, password: str = DEFAULT_PASSWORD, role: str | None = None, name: str | None = None):
    """Create an identity, plus an admin record when `role` is given."""
    identity = auth_service.create_identity(email, password, display_name=name)
    if role is not None:
        db.session.add(AdminUser(
            id=identity.id,
            email=identity.email,
            name=name or email.split("@")[0],
            role=role,
            is_active=True,
            created_at=utcnow(),
            created_by="system",
        ))
        db.session.commit()
    return identity


def get_auth_token(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    """Helper to get auth token for an identity."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def super_admin(db_session):
    return make_identity("owner@store.test", role=ROLE_SUPER_ADMIN, name="Owner")


@pytest.fixture(scope='function')
def plain_admin(db_session):
    return make_identity("staff@store.test", role=ROLE_ADMIN, name="Staff")


@pytest.fixture(scope='function')
def super_admin_actor(super_admin):
    return access_service.resolve_admin(super_admin)


@pytest.fixture(scope='function')
def super_admin_headers(client, super_admin):
    return auth_headers(get_auth_token(client, super_admin.email))


@pytest.fixture(scope='function')
def admin_headers(client, plain_admin):
    return auth_headers(get_auth_token(client, plain_admin.email))


@pytest.fixture(scope='function')
def identity_factory(db_session):
    """make_identity bound to a clean database."""
    return make_identity


@pytest.fixture(scope='function')
def login_headers(client):
    """Log an identity in through the API and return its Authorization headers."""
    def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        return auth_headers(get_auth_token(client, email, password))
    return _login
