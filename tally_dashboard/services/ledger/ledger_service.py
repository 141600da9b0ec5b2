"""
Ledger Service
==============

Service untuk TallyLedger: simpan lokal dulu, lalu sync ke Tally.

Remote failure tidak pernah membatalkan write lokal. Hasil sync selalu
dikembalikan di key `tallySync`.
"""

from typing import Dict, Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import BaseService, transactional
from ..integration import TallyService, SYNC_TYPE_LEDGER_DELETE, SYNC_TYPE_MANUAL
from ...models import TallyLedger, utcnow
from ...schemas import LedgerCreateSchema, LedgerSchema, RemoteLedgerSchema


class LedgerService(BaseService):
    """Service untuk Ledger management + Tally sync"""

    model_class = TallyLedger
    response_schema = LedgerSchema
    search_fields = ['ledger_name', 'ledger_alias', 'gst_number']

    def __init__(self, db_session: AsyncSession, tally_service: TallyService, current_user=None):
        super().__init__(db_session, current_user)
        self.tally_service = tally_service

    def _serialize(self, ledger: TallyLedger) -> Dict[str, Any]:
        return self.response_schema.model_validate(ledger).model_dump(mode='json')

    # ==================== QUERIES ====================

    async def list_ledgers(self, page: int = 1, per_page: int = 20, search: str = None,
                           parent_group: str = None) -> Dict[str, Any]:
        query = select(TallyLedger)
        query = self._apply_filters(query, TallyLedger, {'parent_group': parent_group})
        query = self._apply_search(query, TallyLedger, search, self.search_fields)
        query = self._apply_sorting(query, TallyLedger, 'created_at', 'desc')

        result = await self._paginate_query(query, page, per_page)
        return {
            'items': [self._serialize(item) for item in result['items']],
            'pagination': result['pagination']
        }

    async def get_ledger(self, ledger_id: int) -> Dict[str, Any]:
        ledger = await self._get_or_404(TallyLedger, ledger_id)
        return self._serialize(ledger)

    # ==================== CREATE ====================

    async def create_ledger(self, data: Dict[str, Any], user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Create ledger lokal lalu push ke Tally.

        Duplicate name -> ConflictError. Kegagalan Tally hanya mengisi
        error_message di ledger, operasi tetap sukses.
        """
        validated = LedgerCreateSchema.model_validate(data)
        await self._validate_unique_field(
            TallyLedger, 'ledger_name', validated.ledger_name,
            error_message=f"Ledger '{validated.ledger_name}' already exists"
        )

        ledger = await self._persist_new_ledger(validated)
        self.logger.info(f"Ledger '{ledger.ledger_name}' created locally (id={ledger.id})")

        tally_result = await self.tally_service.create_ledger(ledger, user_id or self.current_user_id)
        await self._apply_sync_result(ledger, tally_result.success, tally_result.message)

        return {
            'ledger': self._serialize(ledger),
            'tallySync': tally_result.to_dict(),
            'message': ('Ledger created and synced to Tally' if tally_result.success
                        else 'Ledger created locally but Tally sync failed')
        }

    @transactional
    async def _persist_new_ledger(self, validated: LedgerCreateSchema) -> TallyLedger:
        values = validated.model_dump()
        values['parent_group'] = values.get('parent_group') or 'Sundry Debtors'
        values['email'] = str(values['email']) if values.get('email') else None
        ledger = TallyLedger(**values)
        ledger.closing_balance = ledger.opening_balance
        self.db_session.add(ledger)
        await self.db_session.flush()
        return ledger

    @transactional
    async def _apply_sync_result(self, ledger: TallyLedger, success: bool, message: str):
        if success:
            ledger.tally_guid = ledger.ledger_name
            ledger.synced_at = utcnow()
            ledger.error_message = None
        else:
            ledger.error_message = message

    # ==================== DELETE ====================

    async def delete_ledger(self, ledger_id: int, user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Delete ledger. Ledger yang belum pernah sync tidak dikirim ke Tally.
        Error Tally selain 'not found' hanya menjadi warning.
        """
        ledger = await self._get_or_404(TallyLedger, ledger_id)
        ledger_name = ledger.ledger_name
        user_id = user_id or self.current_user_id
        warning = None

        if not ledger.is_synced:
            tally_result = await self.tally_service.record_local_only(
                SYNC_TYPE_LEDGER_DELETE, user_id,
                f"Ledger '{ledger_name}' was never synced to Tally"
            )
        else:
            tally_result = await self.tally_service.delete_ledger(ledger_name, user_id)
            if not tally_result.success:
                warning = f"Deleted locally but Tally delete failed: {tally_result.message}"
                self.logger.warning(f"Ledger '{ledger_name}': {warning}")

        await self._delete_entity(ledger)
        self.logger.info(f"Ledger '{ledger_name}' deleted locally")

        result = {
            'deletedLedger': ledger_name,
            'tallySync': tally_result.to_dict(),
            'message': f"Ledger '{ledger_name}' deleted successfully"
        }
        if warning:
            result['warning'] = warning
        return result

    @transactional
    async def _delete_entity(self, entity):
        await self.db_session.delete(entity)

    # ==================== BULK PULL ====================

    async def sync_ledgers_to_database(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Pull semua ledger dari Tally dan upsert by name.

        Tiap record di-commit sendiri, jadi kalau gagal di tengah jalan
        record sebelumnya tetap tersimpan dan jumlahnya tercatat di sync log.
        """
        user_id = user_id or self.current_user_id
        processed = 0

        async with self.tally_service.recorder.track(SYNC_TYPE_MANUAL, user_id) as outcome:
            try:
                remote_ledgers = await self.tally_service.fetch_ledgers()
                for raw in remote_ledgers:
                    await self._upsert_remote_ledger(RemoteLedgerSchema.model_validate(raw))
                    processed += 1
            except Exception as e:
                self.logger.error(f"Ledger sync failed after {processed} records: {str(e)}")
                message = getattr(e, 'message', None) or str(e)
                outcome.fail(message, processed)
                return {
                    'success': False,
                    'message': f"Failed to sync ledgers: {message}",
                    'count': processed
                }

            outcome.succeed(processed)

        return {
            'success': True,
            'message': f"Successfully synced {processed} ledgers from Tally",
            'count': processed
        }

    @transactional
    async def _upsert_remote_ledger(self, remote: RemoteLedgerSchema) -> TallyLedger:
        ledger = await self._get_by_field(TallyLedger, 'ledger_name', remote.name)
        if ledger is None:
            ledger = TallyLedger(
                ledger_name=remote.name,
                parent_group=remote.parent,
                opening_balance=remote.opening_balance,
                closing_balance=remote.closing_balance,
                is_active=remote.is_active,
            )
            self.db_session.add(ledger)
        else:
            ledger.parent_group = remote.parent
            ledger.closing_balance = remote.closing_balance

        ledger.tally_guid = remote.guid
        ledger.synced_at = utcnow()
        ledger.error_message = None
        await self.db_session.flush()
        return ledger
