"""Database engine and session management.

Engines are keyed by database URL so the live store, scripts and tests
can share pooled connections. SQLite URLs get thread-safety settings for
FastAPI's threadpool; any other SQLAlchemy URL (e.g. a hosted Postgres)
is passed through unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from growthboard.db.schema import Base

DEFAULT_DB_PATH = Path("data/growthboard.db")
MEMORY_URL = "sqlite:///:memory:"

_engines: dict[str, Engine] = {}
_factories: dict[str, sessionmaker] = {}


def database_url(db_path: Path | str | None = None) -> str:
    """Resolve a path or URL into a SQLAlchemy URL.

    Args:
        db_path: SQLite file path, ":memory:", or a full database URL.
            Defaults to data/growthboard.db.

    Returns:
        Database URL string.
    """
    if db_path is None:
        db_path = DEFAULT_DB_PATH
    if isinstance(db_path, str):
        if "://" in db_path:
            return db_path
        if db_path == ":memory:":
            return MEMORY_URL
    return f"sqlite:///{Path(db_path).resolve()}"


def get_engine(db_path: Path | str | None = None) -> Engine:
    """Get (or create and cache) the engine for a database.

    Args:
        db_path: SQLite file path, ":memory:", or a database URL.

    Returns:
        Cached SQLAlchemy engine.
    """
    url = database_url(db_path)
    if url in _engines:
        return _engines[url]

    if url.startswith("sqlite"):
        if url != MEMORY_URL:
            Path(url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)
        # One shared connection; the threadpool may hand it to any worker thread
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url, echo=False, pool_pre_ping=True)

    _engines[url] = engine
    return engine


def get_session(db_path: Path | str | None = None) -> Session:
    """Open a session. Caller closes it; prefer session_scope()."""
    url = database_url(db_path)
    factory = _factories.get(url)
    if factory is None:
        factory = sessionmaker(bind=get_engine(url), expire_on_commit=False)
        _factories[url] = factory
    return factory()


@contextmanager
def session_scope(db_path: Path | str | None = None) -> Generator[Session, None, None]:
    """Transactional scope: commit on success, roll back on error, always close.

    Example:
        with session_scope() as session:
            repo.upsert_board(session, board)
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | str | None = None) -> Engine:
    """Create all tables (idempotent) and return the engine."""
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    return engine


def dispose_engines() -> None:
    """Dispose and forget every cached engine (tests, shutdown)."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _factories.clear()
