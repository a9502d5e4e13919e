from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings

# Default to a local SQLite file, but allow override via STORAGE_URL env var
STORAGE_URL = settings.storage_url or "sqlite:///./client_storage.db"

# Create declarative base for models
Base = declarative_base()


def create_storage_engine(url: str = STORAGE_URL) -> Engine:
    """
    Create the engine backing the client-side storage.

    In-memory SQLite URLs share a single connection so that every session
    sees the same database for the lifetime of the engine.
    """
    if url.startswith("sqlite") and ":memory:" in url:
        from sqlalchemy.pool import StaticPool

        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
        future=True,
    )


def init_db(engine: Engine) -> None:
    """
    Initialize the storage database by creating all tables.
    This should be called before the storage is first used.
    """
    # Import models here to ensure they're registered with Base
    from database_models import StorageEntry  # noqa: F401

    Base.metadata.create_all(engine)
