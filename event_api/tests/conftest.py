import pytest
from argon2 import PasswordHasher
from unittest.mock import MagicMock

from event_api.config import Settings
from event_api.gateway.server import create_app

TOKEN = "12345"


@pytest.fixture
def settings():
    return Settings(database_url="postgresql://test", auth_token=TOKEN, app_env="development")


@pytest.fixture
def hasher():
    # Real argon2, cheap parameters
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def mock_db():
    """
    Mocks the pool, its connection and the cursor.

    Returns:
        tuple: (db, connection, cursor)
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()

    # Setup the context manager for connection
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    mock_conn.cursor.return_value = mock_cursor

    db = MagicMock()
    db.connection.return_value = mock_conn
    return db, mock_conn, mock_cursor


@pytest.fixture
def app(settings, mock_db, hasher):
    db, _, _ = mock_db
    app = create_app(settings, db=db, hasher=hasher)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
