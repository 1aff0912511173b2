"""Database engine and session management for saved selections."""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from golf_configurator.models.db_models import Base

DB_PATH_ENV_VAR = "GOLF_CONFIGURATOR_DB_PATH"

# Default database path
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent.parent / "data" / "golf_configurator.db"

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_database_url(db_path: Path | None = None) -> str:
    """Resolve the database URL.

    Priority:
        1. DATABASE_URL environment variable
        2. Explicit db_path argument
        3. GOLF_CONFIGURATOR_DB_PATH environment variable
        4. data/golf_configurator.db
    """
    if url := os.environ.get("DATABASE_URL"):
        return url
    if db_path is None:
        env_path = os.environ.get(DB_PATH_ENV_VAR)
        db_path = Path(env_path) if env_path else DEFAULT_DB_PATH
    return f"sqlite:///{db_path}"


def get_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Get or create the shared engine, creating tables on first use.

    Args:
        db_path: Path to SQLite database file.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine

    if _engine is not None:
        return _engine

    path_obj = Path(db_path) if db_path else None
    database_url = get_database_url(path_obj)
    is_sqlite = database_url.startswith("sqlite")

    engine_kwargs: dict[str, object] = {"echo": echo}
    if is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        sqlite_file = Path(database_url.removeprefix("sqlite:///"))
        sqlite_file.parent.mkdir(parents=True, exist_ok=True)
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["pool_recycle"] = 3600

    _engine = create_engine(database_url, **engine_kwargs)

    # WAL lets the debounced writer and API readers share the file
    if is_sqlite:
        with _engine.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.commit()

    Base.metadata.create_all(_engine)
    return _engine


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Get or create the session factory bound to the shared engine."""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=engine or get_engine()
        )
    return _SessionLocal


@contextmanager
def get_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Yield a session that is closed on exit."""
    session = get_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


def init_db(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Initialize the database, creating all tables."""
    return get_engine(db_path, echo)


def reset_engine() -> None:
    """Dispose the shared engine and session factory. Used by tests."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
