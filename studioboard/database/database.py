"""Storage setup for the studioboard reference backend.

The backend keeps tasks, users and service requests in SQLite. `DATABASE_URL`
picks the file; `sqlite:///:memory:` gives a throwaway database shared by every
session of the process.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./studioboard.db")


def _is_sqlite_url(database_url: str) -> bool:
    return (database_url or "").startswith("sqlite")


def _is_memory_url(database_url: str) -> bool:
    return _is_sqlite_url(database_url) and (database_url.endswith(":memory:") or database_url == "sqlite://")


def get_engine_kwargs(database_url: str) -> dict:
    """create_engine kwargs for a database URL.

    Request handlers run in a thread pool, so SQLite connections must be
    shareable across threads. An in-memory database lives in one connection,
    which StaticPool hands to every session.
    """
    engine_kwargs: dict = {"echo": os.getenv("DEBUG", "False").lower() == "true"}
    if _is_sqlite_url(database_url):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    if _is_memory_url(database_url):
        engine_kwargs["poolclass"] = StaticPool
    return engine_kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def enable_foreign_keys(dbapi_conn, connection_record):
    """Turn on SQLite FK enforcement so unknown assignees are refused and
    deleted users unassign their tasks."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the tasks, users and service_requests tables if missing."""
    from studioboard.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
