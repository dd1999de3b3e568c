"""
Pytest fixtures for jewelcase backend tests.

Provides the in-memory test database, the test client and small factories
for catalog products, agents and cases.
"""

import json
from types import SimpleNamespace

import pytest

from jewelcase import create_app
from jewelcase.extensions import db
from jewelcase.services import agents_service, case_service, products_service
from jewelcase.services.scanner_service import ItemScanner


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'OPENAI_API_KEY': '',
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
def make_product(db_session):
    """Factory: create an ACTIVE catalog product and return its dict."""
    def _make(name="Gold Hoop Earring", category="earring", price_cents=10000, photo=None):
        return products_service.create_product(
            db_session,
            patch={"name": name, "category": category, "price_cents": price_cents, "photo": photo},
        )
    return _make


@pytest.fixture(scope='function')
def make_agent(db_session):
    """Factory: create an agent and return its dict."""
    def _make(name="Ana Souza", contact="+55 (11) 99999-0000"):
        return agents_service.create_agent(db_session, patch={"name": name, "contact": contact})
    return _make


@pytest.fixture(scope='function')
def make_case(db_session):
    """Factory: create a case from (product_id, quantity, price_cents) tuples."""
    def _make(name="Kit A", items=(), agent_id=None):
        return case_service.create_case(
            db_session,
            name=name,
            agent_id=agent_id,
            items=[
                {"product_id": pid, "quantity": qty, "price_cents": price}
                for pid, qty, price in items
            ],
        )
    return _make


class FakeCompletions:
    """Stands in for client.chat.completions; records every call."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_model_client(content=None, error=None):
    if isinstance(content, (dict, list)):
        content = json.dumps(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


@pytest.fixture(scope='function')
def install_scanner(app):
    """Register an ItemScanner backed by a fake model client for the route under test."""
    def _install(content=None, error=None):
        client = fake_model_client(content, error)
        app.extensions["item_scanner"] = ItemScanner(client=client, model="test-model")
        return client.chat.completions

    yield _install

    app.extensions.pop("item_scanner", None)
