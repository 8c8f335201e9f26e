import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import httpx
import pytest
from app import create_app
from app.extensions import db
from app.models import User, AdminUser
from app.services import inference, tokens

SERVICE_KEY = "test-service-role-key"
ML_URL = "http://ml.test"

@pytest.fixture(scope="session")
def app():
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
        MAIL_SUPPRESS_SEND=True,
        APP_BASE_URL="http://example.test",
        SERVICE_ROLE_KEY=SERVICE_KEY,
        ML_SERVICE_URL=None,
        ADMIN_EMAIL=None,
        NOTIFY_ASYNC=False,
        RATELIMIT_ENABLED=False,
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()

@pytest.fixture()
def service_headers():
    return {"Authorization": f"Bearer {SERVICE_KEY}"}

@pytest.fixture()
def make_user(app):
    """Create a user; returns (user_id, bearer headers)."""
    def _make(email="user@example.com", password="s3cret-pass", admin=False):
        with app.app_context():
            u = User(email=email, is_active=True)
            u.set_password(password)
            db.session.add(u)
            db.session.flush()
            if admin:
                db.session.add(AdminUser(user_id=u.id, email=u.email))
            db.session.commit()
            token = tokens.issue_access_token(u.id)
            return u.id, {"Authorization": f"Bearer {token}"}
    return _make

@pytest.fixture()
def ml_service(app, monkeypatch):
    """
    Point the inference gateway at a stub /predict endpoint.
    Pass a handler(request) -> httpx.Response; records every request seen.
    """
    seen = []

    def _install(handler):
        def _recording(request):
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(_recording)
        monkeypatch.setitem(app.config, "ML_SERVICE_URL", ML_URL)
        monkeypatch.setattr(
            inference, "_http_client",
            lambda timeout: httpx.Client(transport=transport, timeout=timeout),
        )
        return seen

    return _install
