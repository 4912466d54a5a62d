"""
Pytest configuration and shared fixtures.

Every test gets a fresh application bound to its own in-memory SQLite
database, so tests never see each other's rows. Mail is suppressed
and sent inline; use the ``outbox`` fixture to inspect what would
have gone out.
"""

import pytest

from logistics import create_app
from logistics.extensions import db as _db
from logistics.extensions import mail
from logistics.services import account_service

WORKER_PASSWORD = "worker-pass-123"
ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    The ``testing`` config points at ``sqlite:///:memory:``; the
    engine belongs to this app instance, so the schema is created
    here and thrown away with the app.
    """
    app = create_app("testing")

    with app.app_context():
        _db.create_all()

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name
    """
    Provide the database session inside an application context.

    Use this for service-level tests. Route tests should use
    ``client`` instead, so each request gets its own context.
    """
    with app.app_context():
        yield _db.session
        _db.session.remove()


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_home(client):
            response = client.get("/")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def outbox(app):  # pylint: disable=redefined-outer-name
    """Collect every message the app dispatches during the test."""
    with mail.record_messages() as messages:
        yield messages


# -- Account helpers -------------------------------------------------------


@pytest.fixture(scope="function")
def make_worker(app):  # pylint: disable=redefined-outer-name
    """
    Factory that registers a worker and returns its credentials.

    Plain values are returned because the ORM object would be detached
    once the helper's app context closes.
    """

    def _make(email="worker@example.com", approved=True):
        with app.app_context():
            worker = account_service.register_worker(
                first_name="Wanjiru",
                second_name="Kamau",
                email=email,
                phone_no="0712345678",
                branch="Nairobi",
                password=WORKER_PASSWORD,
            )
            if approved:
                account_service.approve_worker(worker.id)
            return {"id": worker.id, "email": worker.email, "password": WORKER_PASSWORD}

    return _make


@pytest.fixture(scope="function")
def make_admin(app):  # pylint: disable=redefined-outer-name
    """Factory that registers an admin and returns its credentials."""

    def _make(email="admin@example.com"):
        with app.app_context():
            admin = account_service.register_admin(
                first_name="Otieno",
                second_name="Odhiambo",
                email=email,
                password=ADMIN_PASSWORD,
            )
            return {"id": admin.id, "email": admin.email, "password": ADMIN_PASSWORD}

    return _make


def _sign_in(client, account):
    client.post(
        "/signin", data={"email": account["email"], "password": account["password"]}
    )


@pytest.fixture(scope="function")
def worker_client(client, make_worker):  # pylint: disable=redefined-outer-name
    """Test client signed in as an approved worker."""
    _sign_in(client, make_worker())
    return client


@pytest.fixture(scope="function")
def admin_client(client, make_admin):  # pylint: disable=redefined-outer-name
    """Test client signed in as an admin."""
    _sign_in(client, make_admin())
    return client
