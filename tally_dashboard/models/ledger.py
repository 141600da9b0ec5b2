from decimal import Decimal
from sqlalchemy import Column, String, Text, DateTime, Boolean, Numeric
from .base import BaseModel


class TallyLedger(BaseModel):
    """Ledger (akun) lokal yang di-mirror ke chart of accounts Tally"""
    __tablename__ = 'tally_ledgers'

    # Identity
    ledger_name = Column(String(255), unique=True, nullable=False, index=True)
    ledger_alias = Column(String(255))
    parent_group = Column(String(100), default='Sundry Debtors')

    # Financial state
    opening_balance = Column(Numeric(15, 2), default=Decimal('0.00'))
    closing_balance = Column(Numeric(15, 2), default=Decimal('0.00'))

    # Contact
    address = Column(String(500))
    state = Column(String(100))
    pincode = Column(String(20))
    mobile = Column(String(20))
    email = Column(String(100))

    # Tax identifiers
    gst_number = Column(String(50))
    pan_number = Column(String(20))

    is_active = Column(Boolean, default=True)

    # Tally linkage, hanya diubah oleh sync orchestrator
    tally_guid = Column(String(100))
    synced_at = Column(DateTime)
    error_message = Column(Text)

    @property
    def is_synced(self):
        return self.synced_at is not None

    def __repr__(self):
        return f'<TallyLedger {self.ledger_name}>'
