"""
Shared pytest fixtures for the MaintenanceHub test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - tenant_id: Default tenant id used by API and service tests
    - client_company: Pre-created ClientCompany for the default tenant
"""

import pytest

from maintenancehub import create_app
from maintenancehub.models import db as _db


DEFAULT_TEST_TENANT_ID = 1


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def tenant_id():
    return DEFAULT_TEST_TENANT_ID


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def client_company(tenant_id):
    """Create and return a ClientCompany dict via the service."""
    from maintenancehub.services import excellence_service

    return excellence_service.create_client_company(
        tenant_id, {"name": "Acme Paper Mill", "industry": "Pulp & Paper"},
    )
