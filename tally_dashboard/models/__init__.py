"""
Tally Dashboard Models Package
==============================

Database models untuk dashboard: users, ledgers, invoices dan sync audit log.

Domain Structure:
- Core: Base model and database setup
- User: authentication and roles
- Ledger: chart of accounts mirrored to Tally
- Invoice: vouchers mirrored to Tally
- Integration: Tally sync audit trail
"""

from .base import Base, BaseModel, utcnow
from .user import User, USER_ROLES
from .ledger import TallyLedger
from .invoice import (
    TallyInvoice, VOUCHER_TYPES, SYNC_STATUSES, SYNC_PENDING, SYNC_SUCCESS, SYNC_FAILED
)
from .integration import (
    SyncLog, SYNC_LOG_STATUSES, SYNC_IN_PROGRESS, SYNC_LOG_SUCCESS, SYNC_LOG_FAILED
)

__all__ = [
    'Base', 'BaseModel', 'utcnow',
    'User', 'USER_ROLES',
    'TallyLedger',
    'TallyInvoice', 'VOUCHER_TYPES', 'SYNC_STATUSES', 'SYNC_PENDING', 'SYNC_SUCCESS', 'SYNC_FAILED',
    'SyncLog', 'SYNC_LOG_STATUSES', 'SYNC_IN_PROGRESS', 'SYNC_LOG_SUCCESS', 'SYNC_LOG_FAILED',
]
