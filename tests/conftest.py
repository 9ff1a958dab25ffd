# tests/conftest.py
import mongomock
import pytest

from app import create_app
from marketplace.mongo import mongo

TEST_CONFIG = {
    "TESTING": True,
    "MONGO_URI": "",
    "SECRET_KEY": "test-secret",
    "JWT_SECRET_KEY": "test-jwt-secret-key-that-is-long-enough",
    "DASHBOARD_REFRESH_SECONDS": 15,
}


@pytest.fixture
def app(monkeypatch):
    monkeypatch.delenv("DISABLE_MONGO", raising=False)
    app = create_app(TEST_CONFIG)
    mongo.db = mongomock.MongoClient().db
    with app.app_context():
        yield app
    mongo.db = None


@pytest.fixture
def db(app):
    return mongo.db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """login("owner", "F1") puts the identity into the Flask session."""
    def _login(role, user_id, email="", first_name="Test", last_name="User"):
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role
            sess["email"] = email
            sess["first_name"] = first_name
            sess["last_name"] = last_name
    return _login
