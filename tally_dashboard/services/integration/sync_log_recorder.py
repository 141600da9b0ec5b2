"""
Sync Log Recorder
=================

Audit trail untuk setiap percobaan sync ke Tally.

Recorder memakai session sendiri (bukan session request) supaya baris log
tetap ter-commit walaupun operasi utama gagal atau di-rollback. Kegagalan
menulis log hanya di-log, tidak pernah menutupi hasil operasi.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ...models import SyncLog, SYNC_IN_PROGRESS, SYNC_LOG_SUCCESS, SYNC_LOG_FAILED, utcnow

logger = logging.getLogger(__name__)

# Sync type tags
SYNC_TYPE_LEDGER = 'tally_ledger'
SYNC_TYPE_LEDGER_DELETE = 'tally_ledger_delete'
SYNC_TYPE_INVOICE = 'tally_invoice'
SYNC_TYPE_INVOICE_DELETE = 'tally_invoice_delete'
SYNC_TYPE_MANUAL = 'manual'


@dataclass
class SyncOutcome:
    """Hasil yang diisi body `track()`; default-nya gagal"""
    status: str = SYNC_LOG_FAILED
    records_processed: int = 0
    error_message: Optional[str] = None
    log_id: Optional[int] = None

    def succeed(self, records_processed: int = 1):
        self.status = SYNC_LOG_SUCCESS
        self.records_processed = records_processed
        self.error_message = None

    def fail(self, error_message: str, records_processed: int = 0):
        self.status = SYNC_LOG_FAILED
        self.records_processed = records_processed
        self.error_message = error_message


class SyncLogRecorder:
    """Open/close baris SyncLog di session terpisah"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def open(self, sync_type: str, user_id: Optional[int] = None) -> Optional[int]:
        """Commit baris in_progress sebelum request ke Tally; return id-nya"""
        try:
            async with self.session_factory() as session:
                log = SyncLog(
                    sync_type=sync_type,
                    user_id=user_id,
                    status=SYNC_IN_PROGRESS,
                    start_time=utcnow(),
                    records_processed=0
                )
                session.add(log)
                await session.commit()
                return log.id
        except SQLAlchemyError as e:
            logger.error(f"Failed to create sync log for {sync_type}: {str(e)}")
            return None

    async def close(self, log_id: Optional[int], status: str, records_processed: int = 0,
                    error_message: Optional[str] = None) -> bool:
        """
        Tutup log. Hanya baris yang masih in_progress yang di-update, jadi
        log yang sudah ditutup tidak pernah berubah lagi.
        """
        if log_id is None:
            return False
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(SyncLog)
                    .where(SyncLog.id == log_id, SyncLog.status == SYNC_IN_PROGRESS)
                    .values(
                        status=status,
                        end_time=utcnow(),
                        records_processed=records_processed,
                        error_message=error_message
                    )
                )
                await session.commit()
                if result.rowcount == 0:
                    logger.warning(f"Sync log {log_id} already closed or missing, not updated")
                    return False
                return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to close sync log {log_id}: {str(e)}")
            return False

    @asynccontextmanager
    async def track(self, sync_type: str, user_id: Optional[int] = None):
        """
        Context manager: open log, yield SyncOutcome, close log di finally.

        Exception dari body dicatat sebagai failed lalu di-raise ulang.
        """
        outcome = SyncOutcome()
        outcome.log_id = await self.open(sync_type, user_id)
        try:
            yield outcome
        except Exception as e:
            outcome.fail(str(e), outcome.records_processed)
            raise
        finally:
            await self.close(
                outcome.log_id,
                outcome.status,
                outcome.records_processed,
                outcome.error_message
            )
