"""
Tally Routes
============

Routes untuk ledger, invoice, sync dan dashboard
"""

from .ledger_routes import router as ledger_router
from .invoice_routes import router as invoice_router
from .sync_routes import router as sync_router

__all__ = ['ledger_router', 'invoice_router', 'sync_router']
