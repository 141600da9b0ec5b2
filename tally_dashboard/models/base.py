from sqlalchemy import Column, DateTime, Integer
from datetime import datetime, timezone

from ..database import Base


def utcnow():
    """Naive UTC timestamp, konsisten untuk semua kolom DateTime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# BaseModel dengan kolom umum. Abstract, tidak dibuat sebagai tabel.
class BaseModel(Base):
    __abstract__ = True
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
