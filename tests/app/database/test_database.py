from unittest.mock import patch

from careerflow.app.database import database


def test_engine_options_sqlite():
    assert database.engine_options("sqlite:///careerflow.db") == {
        "connect_args": {"check_same_thread": False}
    }


def test_engine_options_postgres():
    assert database.engine_options("postgresql://careerflow@localhost/careerflow") == {
        "pool_pre_ping": True
    }


def test_get_db_closes_session():
    with patch.object(database, "get_session_local") as mock_session_local:
        db = mock_session_local.return_value.return_value
        generator = database.get_db()

        assert next(generator) is db
        db.close.assert_not_called()
        generator.close()

    db.close.assert_called_once()
