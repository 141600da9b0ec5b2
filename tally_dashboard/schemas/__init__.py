"""
Pydantic Schemas
================
"""

from .base import BaseSchema, TimestampMixin, TallyLinkMixin, Money
from .ledger import LedgerCreateSchema, LedgerSchema, RemoteLedgerSchema
from .invoice import (
    InvoiceCreateSchema, InvoiceSchema, InvoiceFilterSchema, InvoiceTotalsSchema
)
from .sync_log import SyncLogSchema, SyncLogFilterSchema
from .user import (
    RegisterSchema, LoginSchema, UserCreateSchema, UserUpdateSchema,
    ProfileUpdateSchema, UserSchema, LoginResponseSchema
)

__all__ = [
    'BaseSchema', 'TimestampMixin', 'TallyLinkMixin', 'Money',
    'LedgerCreateSchema', 'LedgerSchema', 'RemoteLedgerSchema',
    'InvoiceCreateSchema', 'InvoiceSchema', 'InvoiceFilterSchema', 'InvoiceTotalsSchema',
    'SyncLogSchema', 'SyncLogFilterSchema',
    'RegisterSchema', 'LoginSchema', 'UserCreateSchema', 'UserUpdateSchema',
    'ProfileUpdateSchema', 'UserSchema', 'LoginResponseSchema',
]
