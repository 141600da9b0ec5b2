"""
Ledger Schemas
==============

Schemas untuk TallyLedger create dan response
"""

from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional
from decimal import Decimal

from .base import BaseSchema, TimestampMixin, TallyLinkMixin, Money
from .validators import validate_digits, validate_gst_number, validate_pan_number, blank_to_none

MAX_BALANCE = Decimal('9999999999.99')


class LedgerCreateSchema(BaseSchema):
    """Input untuk membuat ledger baru"""
    ledger_name: str = Field(..., min_length=1, max_length=255)
    ledger_alias: Optional[str] = Field(None, max_length=255)
    parent_group: Optional[str] = Field(None, max_length=100)
    opening_balance: Decimal = Field(Decimal('0'), ge=-MAX_BALANCE, le=MAX_BALANCE)

    address: Optional[str] = Field(None, max_length=500)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[EmailStr] = None

    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    is_active: bool = True

    @field_validator(
        'ledger_alias', 'parent_group', 'address', 'state', 'pincode',
        'mobile', 'email', 'gst_number', 'pan_number', mode='before'
    )
    @classmethod
    def empty_as_missing(cls, v):
        return blank_to_none(v)

    @field_validator('opening_balance', mode='before')
    @classmethod
    def balance_default(cls, v):
        return Decimal('0') if v is None or v == '' else v

    @field_validator('pincode')
    @classmethod
    def validate_pincode(cls, v):
        return validate_digits(v, 'Pincode', 10)

    @field_validator('mobile')
    @classmethod
    def validate_mobile(cls, v):
        return validate_digits(v, 'Mobile', 15)

    @field_validator('gst_number')
    @classmethod
    def validate_gst(cls, v):
        return validate_gst_number(v)

    @field_validator('pan_number')
    @classmethod
    def validate_pan(cls, v):
        return validate_pan_number(v)


class LedgerSchema(BaseSchema, TimestampMixin, TallyLinkMixin):
    """Response schema untuk TallyLedger"""
    id: int
    ledger_name: str
    ledger_alias: Optional[str] = None
    parent_group: Optional[str] = None
    opening_balance: Money = Decimal('0')
    closing_balance: Money = Decimal('0')
    address: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    is_active: bool = True

    @field_validator('opening_balance', 'closing_balance', mode='before')
    @classmethod
    def none_as_zero(cls, v):
        return Decimal('0') if v is None else v


class RemoteLedgerSchema(BaseModel):
    """Ledger seperti yang dibaca dari export Tally"""
    name: str
    guid: str
    parent: str = 'Sundry Debtors'
    opening_balance: Decimal = Decimal('0')
    closing_balance: Decimal = Decimal('0')
    is_active: bool = True

