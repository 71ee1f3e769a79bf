from sqlalchemy import Column, Integer, String, LargeBinary, DateTime
from datetime import datetime, timezone
from training_app.db.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class StoredSnapshot(Base):
    __tablename__ = "STORED_SNAPSHOTS"

    snapshot_id = Column(Integer, primary_key=True, autoincrement=True)
    storage_key = Column(String(100), unique=True, nullable=False, index=True)
    payload = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)
