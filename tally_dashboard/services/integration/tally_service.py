"""
Tally Integration Service
=========================

CRITICAL SERVICE untuk push ledger / invoice ke Tally.

Setiap operasi mengikuti urutan yang sama:
    sync log open -> probe -> build XML -> send -> classify -> sync log close

Kegagalan remote tidak pernah di-raise ke caller; semuanya dikembalikan
sebagai TallyResult dan dicatat di sync log.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import TallyIntegrationError, TallyNoResponseError
from .response_parser import (
    TallyResult, classify_response, extract_remote_error, is_missing_on_remote, parse_ledger_list
)
from .sync_log_recorder import (
    SyncLogRecorder, SyncOutcome,
    SYNC_TYPE_LEDGER, SYNC_TYPE_LEDGER_DELETE, SYNC_TYPE_INVOICE, SYNC_TYPE_INVOICE_DELETE
)
from .transport import TallyTransport
from .xml_builder import TallyXMLBuilder


class TallyService:
    """Facade untuk semua komunikasi dengan Tally"""

    def __init__(self, transport: TallyTransport, builder: TallyXMLBuilder,
                 recorder: SyncLogRecorder, max_attempts: int = 1, retry_backoff: float = 0.5):
        self.transport = transport
        self.builder = builder
        self.recorder = recorder
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = max(0.0, retry_backoff)
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: Dict[str, Any], session_factory, transport: TallyTransport = None):
        """Build service dari dict tally_config()"""
        transport = transport or TallyTransport(
            config['tally_host'],
            timeout=config.get('tally_timeout', 30),
            probe_timeout=config.get('tally_probe_timeout', 5)
        )
        builder = TallyXMLBuilder(
            config.get('tally_company_name', 'DevCompany'),
            config.get('tally_sales_account', 'Sales')
        )
        return cls(
            transport, builder, SyncLogRecorder(session_factory),
            max_attempts=config.get('tally_max_attempts', 1),
            retry_backoff=config.get('tally_retry_backoff', 0.5)
        )

    @property
    def host(self) -> str:
        return self.transport.base_url

    def close(self):
        """Tutup HTTP session transport (dipanggil saat app shutdown)"""
        self.transport.close()

    # ==================== LOW LEVEL ====================

    async def _send(self, xml: str) -> str:
        """
        Kirim di worker thread. Retry hanya untuk no-response/timeout,
        dengan jeda retry_backoff, 2x, 4x, ... antar attempt.
        """
        attempt = 1
        while True:
            try:
                return await asyncio.to_thread(self.transport.send, xml)
            except TallyNoResponseError as e:
                if attempt >= self.max_attempts:
                    raise
                self.logger.warning(
                    f"Tally did not respond (attempt {attempt}/{self.max_attempts}): {e.message}"
                )
                await asyncio.sleep(self.retry_backoff * (2 ** (attempt - 1)))
                attempt += 1

    async def _ensure_reachable(self):
        """Probe listener; error transport yang sudah diklasifikasi di-raise"""
        await asyncio.to_thread(self.transport.probe, self.builder.build_connection_probe())

    async def _push(self, outcome: SyncOutcome, xml: str, operation: str) -> TallyResult:
        """probe -> send -> classify, hasilnya ditulis ke outcome"""
        try:
            await self._ensure_reachable()
            response = await self._send(xml)
        except TallyIntegrationError as e:
            self.logger.error(f"{operation} failed: {e.message}")
            outcome.fail(e.message)
            body = getattr(e, 'tally_response', None)
            return TallyResult(False, e.message, body, remote_error=extract_remote_error(body))

        result = classify_response(response)
        if result.success:
            outcome.succeed(1)
        else:
            self.logger.error(f"{operation} rejected by Tally: {result.message}")
            outcome.fail(result.message)
        return result

    # ==================== CONNECTIVITY ====================

    async def check_connection(self) -> Dict[str, Any]:
        try:
            await self._ensure_reachable()
        except TallyIntegrationError as e:
            return {'success': False, 'connected': False, 'host': self.host,
                    'message': e.message, 'errorCode': e.error_code}
        return {'success': True, 'connected': True, 'host': self.host,
                'message': f"Connected to Tally at {self.host}"}

    # ==================== LEDGERS ====================

    async def create_ledger(self, ledger: Any, user_id: Optional[int] = None) -> TallyResult:
        name = getattr(ledger, 'ledger_name', None)
        self.logger.info(f"Pushing ledger '{name}' to Tally")
        async with self.recorder.track(SYNC_TYPE_LEDGER, user_id) as outcome:
            result = await self._push(outcome, self.builder.build_ledger_create(ledger), 'Ledger create')
            if result.success:
                result.message = 'Ledger created successfully in Tally'
                result.data['ledgerName'] = name
            return result

    async def delete_ledger(self, ledger_name: str, user_id: Optional[int] = None) -> TallyResult:
        self.logger.info(f"Deleting ledger '{ledger_name}' from Tally")
        async with self.recorder.track(SYNC_TYPE_LEDGER_DELETE, user_id) as outcome:
            result = await self._push(outcome, self.builder.build_ledger_delete(ledger_name), 'Ledger delete')
            if result.success:
                result.message = 'Ledger deleted successfully from Tally'
            elif is_missing_on_remote(result.remote_error):
                outcome.succeed(0)
                result = TallyResult(True, 'Ledger does not exist in Tally (nothing to delete)', result.response)
            return result

    async def ledger_exists(self, ledger_name: str) -> bool:
        """Export ledger by name; error transport dianggap tidak ada"""
        try:
            response = await self._send(self.builder.build_ledger_lookup(ledger_name))
        except TallyIntegrationError as e:
            self.logger.warning(f"Ledger lookup for '{ledger_name}' failed: {e.message}")
            return False
        return f"<LEDGERNAME>{ledger_name}</LEDGERNAME>" in response or \
            f'NAME="{ledger_name}"' in response

    async def ensure_sales_ledger(self) -> bool:
        """Pastikan ledger sales account ada di Tally, buat kalau belum"""
        account = self.builder.sales_account
        if await self.ledger_exists(account):
            return True
        self.logger.info(f"Sales ledger '{account}' not found in Tally, creating it")
        try:
            response = await self._send(self.builder.build_sales_ledger_create())
        except TallyIntegrationError as e:
            self.logger.error(f"Failed to create sales ledger '{account}': {e.message}")
            return False
        return classify_response(response).success

    async def fetch_ledgers(self) -> List[Dict[str, Any]]:
        """Pull semua ledger dari Tally. Error transport di-raise."""
        response = await self._send(self.builder.build_ledger_list_export())
        ledgers = parse_ledger_list(response)
        self.logger.info(f"Fetched {len(ledgers)} ledgers from Tally")
        return ledgers

    # ==================== INVOICES ====================

    async def create_invoice(self, invoice: Any, user_id: Optional[int] = None) -> TallyResult:
        voucher_number = getattr(invoice, 'voucher_number', None)
        self.logger.info(f"Pushing invoice '{voucher_number}' to Tally")
        async with self.recorder.track(SYNC_TYPE_INVOICE, user_id) as outcome:
            xml = self.builder.build_invoice_create(invoice, voucher_number)
            result = await self._push(outcome, xml, 'Invoice push')
            if result.success:
                result.message = 'Invoice pushed successfully to Tally'
                result.data['voucherNumber'] = voucher_number
            return result

    async def delete_invoice(self, voucher_number: str, user_id: Optional[int] = None) -> TallyResult:
        self.logger.info(f"Deleting invoice '{voucher_number}' from Tally")
        async with self.recorder.track(SYNC_TYPE_INVOICE_DELETE, user_id) as outcome:
            xml = self.builder.build_invoice_delete(voucher_number)
            result = await self._push(outcome, xml, 'Invoice delete')
            if result.success:
                result.message = 'Invoice deleted successfully from Tally'
            elif is_missing_on_remote(result.remote_error):
                outcome.succeed(0)
                result = TallyResult(True, 'Invoice does not exist in Tally (nothing to delete)', result.response)
            return result

    # ==================== NEVER SYNCED ====================

    async def record_local_only(self, sync_type: str, user_id: Optional[int], message: str) -> TallyResult:
        """Delete record yang belum pernah di-sync: tanpa request, log success 0 record"""
        async with self.recorder.track(sync_type, user_id) as outcome:
            outcome.succeed(0)
        return TallyResult(True, message)
