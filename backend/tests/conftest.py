"""
Pytest fixtures for MOF tracker backend tests.

Provides test database setup, entity factories, and test client.
"""

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool

from moftrack import create_app
from moftrack.extensions import db
from moftrack.services import lifecycle_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False},
        },
        'MOF_SERIAL_PREFIX': 'TEST',
    })

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


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: make_user("picker", role="Picking") -> User."""
    def _make(username, role=lifecycle_service.ROLE_PICKING, email=None, full_name=None):
        return lifecycle_service.create_user(
            username=username,
            email=email or f"{username}@moftrack.test",
            full_name=full_name or username.title(),
            role=role,
        )
    return _make


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory: make_item("SN-1", part_number="P1") -> Item."""
    def _make(serial_number, part_number="P1", supplier="Acme Parts"):
        return lifecycle_service.create_item(
            part_number=part_number,
            supplier=supplier,
            serial_number=serial_number,
        )
    return _make


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user("admin", role=lifecycle_service.ROLE_ADMIN)


@pytest.fixture(scope='function')
def picker(make_user):
    return make_user("picker", role=lifecycle_service.ROLE_PICKING)


@pytest.fixture(scope='function')
def requester(make_user):
    return make_user("requester", role=lifecycle_service.ROLE_REQUESTER)


@pytest.fixture(scope='function')
def make_mof(db_session, admin):
    """Factory: make_mof(quantity=2, part_number="P1") -> Mof created by the admin user."""
    def _make(quantity=2, part_number="P1", created_by=None):
        return lifecycle_service.create_mof(
            part_number=part_number,
            quantity_requested=quantity,
            expected_receiving_date=datetime(2026, 11, 1),
            requester_name="Rina Requester",
            department="Assembly",
            project="Line 3 Retrofit",
            created_by=created_by or admin.id,
        )
    return _make
