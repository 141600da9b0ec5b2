"""
Integration Models
==================

Models related to the Tally integration audit trail.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, utcnow

SYNC_IN_PROGRESS = 'in_progress'
SYNC_LOG_SUCCESS = 'success'
SYNC_LOG_FAILED = 'failed'
SYNC_LOG_STATUSES = (SYNC_IN_PROGRESS, SYNC_LOG_SUCCESS, SYNC_LOG_FAILED)


class SyncLog(Base):
    """Satu baris per percobaan sync ke Tally. Ditutup tepat sekali."""
    __tablename__ = 'sync_logs'

    id = Column(Integer, primary_key=True)
    sync_type = Column(String(50), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    start_time = Column(DateTime, default=utcnow, nullable=False, index=True)
    end_time = Column(DateTime)
    status = Column(String(20), default=SYNC_IN_PROGRESS, nullable=False, index=True)
    records_processed = Column(Integer, default=0, nullable=False)
    error_message = Column(Text)

    user = relationship('User', back_populates='sync_logs', lazy='joined')

    def __repr__(self):
        return f'<SyncLog {self.sync_type} - {self.status}>'
