from decimal import Decimal
from sqlalchemy import Column, String, Text, Date, DateTime, Numeric
from .base import BaseModel

VOUCHER_TYPES = ('Sales', 'Purchase', 'Receipt', 'Payment', 'Contra')

SYNC_PENDING = 'pending'
SYNC_SUCCESS = 'success'
SYNC_FAILED = 'failed'
SYNC_STATUSES = (SYNC_PENDING, SYNC_SUCCESS, SYNC_FAILED)


class TallyInvoice(BaseModel):
    """Invoice lokal, di Tally menjadi Sales voucher"""
    __tablename__ = 'tally_invoices'

    voucher_type = Column(String(50), default='Sales', nullable=False)
    voucher_number = Column(String(100), unique=True, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    # Referensi ke ledger by name (bukan foreign key, Tally juga key by name)
    party_ledger_name = Column(String(255), nullable=False)

    amount = Column(Numeric(15, 2), nullable=False)
    tax_amount = Column(Numeric(15, 2), default=Decimal('0.00'))
    total_amount = Column(Numeric(15, 2), nullable=False)
    narration = Column(Text)

    # Tally linkage
    tally_guid = Column(String(100))
    sync_status = Column(String(20), default=SYNC_PENDING, nullable=False, index=True)
    error_message = Column(Text)
    synced_at = Column(DateTime)

    def __repr__(self):
        return f'<TallyInvoice {self.voucher_number} - {self.sync_status}>'
