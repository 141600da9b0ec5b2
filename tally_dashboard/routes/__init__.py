"""
Dashboard Routes Module
=======================

API Routes untuk dashboard application
"""

from .auth import auth_router
from .tally import ledger_router, invoice_router, sync_router
from .admin import admin_user_router

__all__ = ['auth_router', 'ledger_router', 'invoice_router', 'sync_router', 'admin_user_router']
