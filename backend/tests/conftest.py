"""
Pytest fixtures for marketplace backend tests.

Provides the test database, a clean document store per test, producer and
product fixtures, and test clients for both offer stores.
"""

from datetime import date, timedelta

import pytest
from flask import g

from marketplace import create_app
from marketplace.extensions import db
from marketplace.services import products_service, users_service

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'OFFER_STORE': 'document',
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing (document offer store)."""
    app = create_app(TEST_CONFIG)

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
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    g.pop('notices', None)

    yield db.session

    # Cleanup after test
    db.session.rollback()
    app.extensions['offers_feed'].stop()
    app.extensions['document_store'].close()
    g.pop('notices', None)


@pytest.fixture(scope='function')
def relational_app():
    """Separate application whose HTTP layer uses the relational offer store."""
    app = create_app({**TEST_CONFIG, 'OFFER_STORE': 'relational'})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def relational_client(relational_app):
    return relational_app.test_client()


@pytest.fixture(scope='function')
def producer(db_session):
    """Relational producer account."""
    return users_service.create_user(
        "grower@greenfarm.test",
        "secret1",
        "Green Farm",
        company_name="Green Farm",
    )


@pytest.fixture(scope='function')
def tomatoes(db_session):
    return products_service.create_product("Tomatoes", "Vegetables", "KG", box_size="5kg")


@pytest.fixture(scope='function')
def cucumbers(db_session):
    return products_service.create_product("Cucumbers (Long)", "vegetables", "kg", varieties=["Long English"])


def producer_profile(user_id="prod-1", company="Green Farm", **certs) -> dict:
    """Document-shaped producer profile; certs maps type -> validUntil."""
    return {
        "id": user_id,
        "role": "producer",
        "companyName": company,
        "certifications": {
            cert_type: {"number": f"{cert_type.upper()}-001", "validUntil": valid_until}
            for cert_type, valid_until in certs.items()
        },
    }


def days_from(today: date, days: int) -> str:
    return (today + timedelta(days=days)).isoformat()
