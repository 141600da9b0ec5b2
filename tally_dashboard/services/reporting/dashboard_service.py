"""
Dashboard Report Service
========================

Ringkasan untuk dashboard dan listing sync log.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import BaseService
from ...models import TallyLedger, TallyInvoice, SyncLog, SYNC_PENDING, SYNC_FAILED
from ...schemas import SyncLogSchema, SyncLogFilterSchema

RECENT_SYNC_LIMIT = 5


class DashboardReportService(BaseService):
    """Service untuk dashboard stats dan sync log reports"""

    def __init__(self, db_session: AsyncSession, current_user=None):
        super().__init__(db_session, current_user)

    async def _count(self, model_class, *conditions) -> int:
        query = select(func.count(model_class.id))
        if conditions:
            query = query.filter(*conditions)
        return (await self.db_session.execute(query)).scalar() or 0

    async def get_dashboard_stats(self) -> Dict[str, Any]:
        total_ledgers = await self._count(TallyLedger)
        active_ledgers = await self._count(TallyLedger, TallyLedger.is_active.is_(True))
        total_invoices = await self._count(TallyInvoice)
        pending_invoices = await self._count(TallyInvoice, TallyInvoice.sync_status == SYNC_PENDING)
        failed_invoices = await self._count(TallyInvoice, TallyInvoice.sync_status == SYNC_FAILED)

        total_amount = (await self.db_session.execute(
            select(func.coalesce(func.sum(TallyInvoice.total_amount), 0))
        )).scalar()

        if total_invoices > 0:
            rate = Decimal(total_invoices - pending_invoices - failed_invoices) * 100 / total_invoices
            success_rate = f"{rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"
        else:
            success_rate = "0.00"

        recent = await self.db_session.execute(
            select(SyncLog).order_by(SyncLog.start_time.desc(), SyncLog.id.desc()).limit(RECENT_SYNC_LIMIT)
        )

        return {
            'stats': {
                'totalLedgers': total_ledgers,
                'activeLedgers': active_ledgers,
                'totalInvoices': total_invoices,
                'totalInvoiceAmount': float(total_amount or 0),
                'pendingInvoices': pending_invoices,
                'failedInvoices': failed_invoices,
                'successRate': success_rate,
            },
            'recentSyncs': [
                SyncLogSchema.model_validate(log).model_dump(mode='json')
                for log in recent.unique().scalars().all()
            ]
        }

    async def list_sync_logs(self, page: int = 1, per_page: int = 20,
                             filters: Dict[str, Any] = None) -> Dict[str, Any]:
        """Sync logs terbaru dulu, filter by type / status / rentang start_time"""
        filter_schema = SyncLogFilterSchema.model_validate(filters or {})

        query = select(SyncLog)
        query = self._apply_filters(query, SyncLog, {
            'sync_type': filter_schema.sync_type,
            'status': filter_schema.status,
        })
        if filter_schema.start_date and filter_schema.end_date:
            query = query.filter(SyncLog.start_time.between(filter_schema.start_date, filter_schema.end_date))
        query = query.order_by(SyncLog.start_time.desc(), SyncLog.id.desc())

        result = await self._paginate_query(query, page, per_page)
        return {
            'items': [SyncLogSchema.model_validate(log).model_dump(mode='json') for log in result['items']],
            'pagination': result['pagination']
        }
