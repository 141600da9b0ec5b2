"""
Invoice Service
===============

Service untuk TallyInvoice (Sales voucher) management dan push ke Tally
"""

from typing import Dict, Any, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import BaseService, transactional
from ..integration import TallyService, SYNC_TYPE_INVOICE_DELETE, generate_voucher_number
from ...models import TallyInvoice, SYNC_PENDING, SYNC_SUCCESS, SYNC_FAILED, utcnow
from ...schemas import InvoiceCreateSchema, InvoiceSchema, InvoiceFilterSchema, InvoiceTotalsSchema

MAX_VOUCHER_NUMBER_ATTEMPTS = 10


class InvoiceService(BaseService):
    """Service untuk Invoice management + Tally sync"""

    model_class = TallyInvoice
    response_schema = InvoiceSchema

    def __init__(self, db_session: AsyncSession, tally_service: TallyService, current_user=None):
        super().__init__(db_session, current_user)
        self.tally_service = tally_service

    def _serialize(self, invoice: TallyInvoice) -> Dict[str, Any]:
        return self.response_schema.model_validate(invoice).model_dump(mode='json')

    def _filtered_query(self, query, filters: InvoiceFilterSchema):
        if filters.start_date:
            query = query.filter(TallyInvoice.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(TallyInvoice.date <= filters.end_date)
        return self._apply_filters(query, TallyInvoice, {'sync_status': filters.sync_status})

    # ==================== QUERIES ====================

    async def list_invoices(self, page: int = 1, per_page: int = 20,
                            filters: Dict[str, Any] = None) -> Dict[str, Any]:
        """List invoices + totals untuk filter yang sama"""
        filter_schema = InvoiceFilterSchema.model_validate(filters or {})

        query = self._filtered_query(select(TallyInvoice), filter_schema)
        query = self._apply_sorting(query, TallyInvoice, 'date', 'desc')
        result = await self._paginate_query(query, page, per_page)

        return {
            'items': [self._serialize(item) for item in result['items']],
            'pagination': result['pagination'],
            'totals': await self.get_totals(filter_schema)
        }

    async def get_totals(self, filters: InvoiceFilterSchema = None) -> Dict[str, Any]:
        query = select(
            func.coalesce(func.sum(TallyInvoice.amount), 0),
            func.coalesce(func.sum(TallyInvoice.tax_amount), 0),
            func.coalesce(func.sum(TallyInvoice.total_amount), 0),
            func.count(TallyInvoice.id)
        )
        query = self._filtered_query(query, filters or InvoiceFilterSchema())
        row = (await self.db_session.execute(query)).one()

        totals = InvoiceTotalsSchema(
            total_amount=row[0],
            total_tax=row[1],
            grand_total=row[2],
            total_invoices=row[3]
        )
        return totals.model_dump(mode='json')

    async def get_invoice(self, invoice_id: int) -> Dict[str, Any]:
        invoice = await self._get_or_404(TallyInvoice, invoice_id)
        return self._serialize(invoice)

    # ==================== CREATE ====================

    async def _next_voucher_number(self) -> str:
        for _ in range(MAX_VOUCHER_NUMBER_ATTEMPTS):
            candidate = generate_voucher_number()
            if await self._get_by_field(TallyInvoice, 'voucher_number', candidate) is None:
                return candidate
        # Fallback: suffix dengan jumlah invoice supaya tetap unik
        count = (await self.db_session.execute(select(func.count(TallyInvoice.id)))).scalar()
        return f"{generate_voucher_number()}-{count + 1}"

    async def create_invoice(self, data: Dict[str, Any], user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Simpan invoice (status pending) lalu push ke Tally.

        Status akhir success / failed ditulis setelah push; kegagalan Tally
        tidak membuat operasi gagal.
        """
        validated = InvoiceCreateSchema.model_validate(data)
        if validated.voucher_number:
            await self._validate_unique_field(
                TallyInvoice, 'voucher_number', validated.voucher_number,
                error_message=f"Voucher number '{validated.voucher_number}' already exists"
            )
        else:
            validated.voucher_number = await self._next_voucher_number()

        invoice = await self._persist_new_invoice(validated)
        self.logger.info(f"Invoice '{invoice.voucher_number}' created locally (id={invoice.id})")

        tally_result = await self.tally_service.create_invoice(invoice, user_id or self.current_user_id)
        await self._apply_sync_result(invoice, tally_result.success, tally_result.message)

        return {
            'invoice': self._serialize(invoice),
            'tallySync': tally_result.to_dict(),
            'message': ('Invoice created and synced to Tally' if tally_result.success
                        else 'Invoice created locally but Tally sync failed')
        }

    @transactional
    async def _persist_new_invoice(self, validated: InvoiceCreateSchema) -> TallyInvoice:
        invoice = TallyInvoice(**validated.model_dump(), sync_status=SYNC_PENDING)
        self.db_session.add(invoice)
        await self.db_session.flush()
        return invoice

    @transactional
    async def _apply_sync_result(self, invoice: TallyInvoice, success: bool, message: str):
        if success:
            invoice.sync_status = SYNC_SUCCESS
            invoice.tally_guid = invoice.voucher_number
            invoice.synced_at = utcnow()
            invoice.error_message = None
        else:
            invoice.sync_status = SYNC_FAILED
            invoice.error_message = message

    # ==================== DELETE ====================

    async def delete_invoice(self, invoice_id: int, user_id: Optional[int] = None) -> Dict[str, Any]:
        invoice = await self._get_or_404(TallyInvoice, invoice_id)
        voucher_number = invoice.voucher_number
        user_id = user_id or self.current_user_id
        warning = None

        if not invoice.synced_at:
            tally_result = await self.tally_service.record_local_only(
                SYNC_TYPE_INVOICE_DELETE, user_id,
                f"Invoice '{voucher_number}' was never synced to Tally"
            )
        else:
            tally_result = await self.tally_service.delete_invoice(voucher_number, user_id)
            if not tally_result.success:
                warning = f"Deleted locally but Tally delete failed: {tally_result.message}"
                self.logger.warning(f"Invoice '{voucher_number}': {warning}")

        await self._delete_entity(invoice)
        self.logger.info(f"Invoice '{voucher_number}' deleted locally")

        result = {
            'deletedInvoice': voucher_number,
            'tallySync': tally_result.to_dict(),
            'message': f"Invoice '{voucher_number}' deleted successfully"
        }
        if warning:
            result['warning'] = warning
        return result

    @transactional
    async def _delete_entity(self, entity):
        await self.db_session.delete(entity)
