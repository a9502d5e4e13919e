from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime
from database import Base


class StorageEntry(Base):
    """
    Single key/value pair of the durable client-side storage.
    Values are always strings (serialized JSON where needed).
    """
    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
