import os

from sqlalchemy.pool import StaticPool


def test_file_sqlite_is_thread_shareable():
    from studioboard.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./studioboard.db")
    assert kwargs["connect_args"]["check_same_thread"] is False
    # File databases keep the default pool.
    assert "poolclass" not in kwargs


def test_memory_sqlite_uses_one_shared_connection():
    from studioboard.database import database as db

    assert db.get_engine_kwargs("sqlite:///:memory:")["poolclass"] is StaticPool
    assert db.get_engine_kwargs("sqlite://")["poolclass"] is StaticPool


def test_debug_env_enables_echo(monkeypatch):
    from studioboard.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite://")["echo"] is True

    monkeypatch.setenv("DEBUG", "false")
    assert db.get_engine_kwargs("sqlite://")["echo"] is False


def test_sqlite_url_detection():
    from studioboard.database import database as db

    assert db._is_sqlite_url("sqlite:///./studioboard.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False
    assert db._is_sqlite_url("") is False
    assert db._is_memory_url("sqlite:///./studioboard.db") is False


def test_memory_engine_shares_schema_across_sessions():
    from sqlalchemy import inspect
    from sqlalchemy.orm import sessionmaker
    from studioboard.database import database as db
    from studioboard.database import models  # noqa: F401

    engine = db.build_engine("sqlite:///:memory:")
    db.Base.metadata.create_all(bind=engine)

    # A second session must see the tables created through the first connection
    session = sessionmaker(bind=engine)()
    try:
        assert session.query(models.TaskDB).count() == 0
    finally:
        session.close()
    assert {"tasks", "users", "service_requests"} <= set(inspect(engine).get_table_names())


def test_file_engine_creates_tables(tmp_path):
    from sqlalchemy import inspect
    from studioboard.database import database as db
    from studioboard.database import models  # noqa: F401

    engine = db.build_engine(f"sqlite:///{tmp_path / 'board.db'}")
    db.Base.metadata.create_all(bind=engine)

    assert {"tasks", "users", "service_requests"} <= set(inspect(engine).get_table_names())
    assert os.path.exists(tmp_path / "board.db")
