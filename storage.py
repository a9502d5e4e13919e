"""
Persistence port - durable key/value storage for the client session
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.engine import Engine

from database import create_session_factory, create_storage_engine, init_db
from database_models import StorageEntry

logger = logging.getLogger(__name__)


class StoragePort(ABC):
    """
    Key/value abstraction over durable client-side storage.

    Values are strings and every key is absent by default. Only single-key
    atomicity is provided.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class InMemoryStorage(StoragePort):
    """Dict-backed storage; lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)


class SqlStorage(StoragePort):
    """
    Storage persisted in a SQL table, so the session survives restarts.

    Args:
        url: SQLAlchemy URL of the storage database
        engine: Pre-built engine (takes precedence over ``url``)
    """

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine or (create_storage_engine(url) if url else create_storage_engine())
        init_db(self.engine)
        self._session_factory = create_session_factory(self.engine)

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            try:
                entry = session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
                session.commit()
            except Exception:
                session.rollback()
                logger.error(f"Failed to write storage key '{key}'", exc_info=True)
                raise

    def remove(self, key: str) -> None:
        with self._session_factory() as session:
            try:
                entry = session.get(StorageEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
            except Exception:
                session.rollback()
                logger.error(f"Failed to remove storage key '{key}'", exc_info=True)
                raise

    def dispose(self) -> None:
        self.engine.dispose()
