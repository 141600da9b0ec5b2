from .xml_builder import (
    TallyXMLBuilder, escape_xml, unescape_xml, clean_address, format_amount,
    format_tally_date, generate_voucher_number
)
from .transport import TallyTransport
from .response_parser import (
    TallyResult, classify_response, extract_remote_error, is_missing_on_remote, parse_ledger_list
)
from .sync_log_recorder import (
    SyncLogRecorder, SyncOutcome,
    SYNC_TYPE_LEDGER, SYNC_TYPE_LEDGER_DELETE, SYNC_TYPE_INVOICE, SYNC_TYPE_INVOICE_DELETE,
    SYNC_TYPE_MANUAL
)
from .tally_service import TallyService

__all__ = [
    'TallyXMLBuilder', 'escape_xml', 'unescape_xml', 'clean_address', 'format_amount',
    'format_tally_date', 'generate_voucher_number',
    'TallyTransport',
    'TallyResult', 'classify_response', 'extract_remote_error', 'is_missing_on_remote', 'parse_ledger_list',
    'SyncLogRecorder', 'SyncOutcome',
    'SYNC_TYPE_LEDGER', 'SYNC_TYPE_LEDGER_DELETE', 'SYNC_TYPE_INVOICE', 'SYNC_TYPE_INVOICE_DELETE',
    'SYNC_TYPE_MANUAL',
    'TallyService',
]
