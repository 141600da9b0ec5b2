"""
Invoice Schemas
===============

Schemas untuk TallyInvoice create, filter dan response
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
import datetime
from decimal import Decimal

from .base import BaseSchema, TimestampMixin, TallyLinkMixin, Money
from .validators import blank_to_none

VoucherType = Literal['Sales', 'Purchase', 'Receipt', 'Payment', 'Contra']
SyncStatus = Literal['pending', 'success', 'failed']


class InvoiceCreateSchema(BaseSchema):
    """Input untuk membuat invoice baru"""
    voucher_type: VoucherType = 'Sales'
    voucher_number: Optional[str] = Field(None, max_length=100)
    date: datetime.date
    party_ledger_name: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=Decimal('0.01'))
    tax_amount: Decimal = Field(Decimal('0'), ge=0)
    total_amount: Decimal = Field(..., ge=Decimal('0.01'))
    narration: Optional[str] = Field(None, max_length=1000)

    @field_validator('voucher_number', 'narration', mode='before')
    @classmethod
    def empty_as_missing(cls, v):
        return blank_to_none(v)

    @field_validator('tax_amount', mode='before')
    @classmethod
    def tax_default(cls, v):
        return Decimal('0') if v is None or v == '' else v


class InvoiceSchema(BaseSchema, TimestampMixin, TallyLinkMixin):
    """Response schema untuk TallyInvoice"""
    id: int
    voucher_type: str
    voucher_number: str
    date: datetime.date
    party_ledger_name: str
    amount: Money
    tax_amount: Money = Decimal('0')
    total_amount: Money
    narration: Optional[str] = None
    sync_status: str

    @field_validator('tax_amount', mode='before')
    @classmethod
    def none_as_zero(cls, v):
        return Decimal('0') if v is None else v


class InvoiceFilterSchema(BaseModel):
    """Filter untuk list invoices"""
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    sync_status: Optional[SyncStatus] = None


class InvoiceTotalsSchema(BaseModel):
    total_amount: Money = Decimal('0')
    total_tax: Money = Decimal('0')
    grand_total: Money = Decimal('0')
    total_invoices: int = 0
