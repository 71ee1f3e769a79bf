"""
Durable key-value byte storage used by the state store.
"""
import logging
from typing import Dict, Optional, Protocol

from sqlalchemy.orm import Session, sessionmaker

from training_app.models.stored_snapshot import StoredSnapshot

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def put(self, key: str, value: bytes) -> None: ...


class MemoryStorage:
    """In-process storage; contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._blobs: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._blobs[key] = bytes(value)


class SqlAlchemyStorage:
    """
    Stores each key as one row of STORED_SNAPSHOTS.
    Every put() runs in its own session and commits before returning.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[bytes]:
        db: Session = self._session_factory()
        try:
            row = db.query(StoredSnapshot).filter(StoredSnapshot.storage_key == key).first()
            return bytes(row.payload) if row else None
        finally:
            db.close()

    def put(self, key: str, value: bytes) -> None:
        db: Session = self._session_factory()
        try:
            row = db.query(StoredSnapshot).filter(StoredSnapshot.storage_key == key).first()
            if row:
                row.payload = value
            else:
                db.add(StoredSnapshot(storage_key=key, payload=value))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to persist snapshot under key %s", key)
            raise
        finally:
            db.close()
