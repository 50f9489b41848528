import pytest

from db import dispose_db, get_session, init_db
from main import create_app
from tests import factories


@pytest.fixture
def session():
    """Session on a fresh in-memory database."""
    init_db("sqlite://")
    s = get_session()
    factories.bind(s)
    yield s
    s.close()
    dispose_db()


@pytest.fixture
def app(tmp_path):
    """Flask app on a throw-away SQLite file."""
    app = create_app(f"sqlite:///{tmp_path / 'test.sqlite'}")
    app.config.update(TESTING=True)
    yield app
    dispose_db()


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Session on the app's database, for arranging API test data."""
    s = get_session()
    factories.bind(s)
    yield s
    s.close()
