import pytest
import psycopg2
from psycopg2.extras import DictCursor

from event_api.config import Settings
from event_api.database.db_connection import Database


@pytest.fixture
def mock_pool(mocker):
    pool_cls = mocker.patch("event_api.database.db_connection.ThreadedConnectionPool")
    return pool_cls


def test_pool_is_built_from_settings(mock_pool):
    Database.from_settings(Settings(database_url="postgresql://test", db_pool_min=2, db_pool_max=5))
    mock_pool.assert_called_once_with(2, 5, "postgresql://test", cursor_factory=DictCursor)


def test_connection_commits_and_returns_to_pool(mock_pool):
    pool = mock_pool.return_value
    conn = pool.getconn.return_value
    db = Database("postgresql://test")

    with db.connection() as borrowed:
        assert borrowed is conn

    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    pool.putconn.assert_called_once_with(conn)


def test_connection_rolls_back_on_error(mock_pool):
    pool = mock_pool.return_value
    conn = pool.getconn.return_value
    db = Database("postgresql://test")

    with pytest.raises(ValueError):
        with db.connection():
            raise ValueError("boom")

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    pool.putconn.assert_called_once_with(conn)


def test_pool_start_failure_is_raised(mock_pool):
    mock_pool.side_effect = psycopg2.OperationalError("could not connect")
    with pytest.raises(psycopg2.OperationalError):
        Database("postgresql://test")


def test_close(mock_pool):
    db = Database("postgresql://test")
    db.close()
    db.close()

    mock_pool.return_value.closeall.assert_called_once()
    with pytest.raises(RuntimeError, match="closed"):
        with db.connection():
            pass
