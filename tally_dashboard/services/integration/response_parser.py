"""
Tally Response Parser
=====================

Klasifikasi response XML dari Tally menjadi TallyResult.

Tally tidak punya format response yang konsisten antar versi, jadi
klasifikasi di sini sengaja longgar (substring matching). Semua heuristik
dikumpulkan di module ini supaya gampang diganti.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Dict, Any

from .xml_builder import unescape_xml

logger = logging.getLogger(__name__)

SUCCESS_MARKERS = (
    '<CREATED>1</CREATED>',
    '<ALTERED>1</ALTERED>',
    '<DELETED>1</DELETED>',
    '<LASTVCHID>',
    'VOUCHER',
)
MISSING_MARKERS = ('does not exist', 'not found')
MIN_RESPONSE_LENGTH = 50
RAW_LOG_LIMIT = 500

LINEERROR_RE = re.compile(r'<LINEERROR>(.*?)</LINEERROR>', re.DOTALL)
ERROR_RE = re.compile(r'<ERROR>(.*?)</ERROR>', re.DOTALL)
LEDGER_BLOCK_RE = re.compile(r'<LEDGER\b([^>]*)>(.*?)</LEDGER>', re.DOTALL)
NAME_ATTR_RE = re.compile(r'(?<![A-Z])NAME="([^"]*)"')
SIMPLE_NAME_RE = re.compile(r'<NAME>([^<]*)</NAME>')


@dataclass
class TallyResult:
    """Hasil satu interaksi dengan Tally"""
    success: bool
    message: str = ''
    response: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    # Teks LINEERROR / ERROR dari body Tally, None kalau gagal di transport
    remote_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'success': self.success, 'message': self.message}
        if self.success:
            result.update(self.data)
        else:
            result['error'] = self.message
        return result


def classify_response(text: Optional[str]) -> TallyResult:
    """
    Urutan rule:
    kosong -> gagal, marker sukses -> sukses, LINEERROR, ERROR,
    response terlalu pendek -> invalid, sisanya unknown.
    """
    if not text or not text.strip():
        return TallyResult(False, 'Empty response from Tally', text)

    if any(marker in text for marker in SUCCESS_MARKERS):
        return TallyResult(True, 'Operation completed successfully', text)

    match = LINEERROR_RE.search(text)
    if match:
        error = unescape_xml(match.group(1).strip())
        return TallyResult(False, error or 'TDL Line error', text, remote_error=error)

    match = ERROR_RE.search(text)
    if match:
        error = unescape_xml(match.group(1).strip())
        return TallyResult(False, error or 'Tally error', text, remote_error=error)

    if len(text) < MIN_RESPONSE_LENGTH:
        return TallyResult(False, 'Invalid Tally response', text)

    logger.warning(f"Unknown Tally response: {text[:RAW_LOG_LIMIT]}")
    return TallyResult(False, 'Unknown Tally response', text)


def extract_remote_error(text: Optional[str]) -> Optional[str]:
    """Teks LINEERROR / ERROR dari body Tally (misalnya body HTTP error), atau None"""
    if not text:
        return None
    for pattern in (LINEERROR_RE, ERROR_RE):
        match = pattern.search(text)
        if match:
            return unescape_xml(match.group(1).strip()) or None
    return None


def is_missing_on_remote(message: Optional[str]) -> bool:
    """
    True kalau pesan error dari Tally berarti record sudah tidak ada.

    Hanya untuk teks LINEERROR / ERROR (TallyResult.remote_error), bukan
    pesan transport seperti HTTP 404.
    """
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in MISSING_MARKERS)


def _child_text(block: str, tag: str) -> Optional[str]:
    match = re.search(rf'<{tag}\b[^>]*>(.*?)</{tag}>', block, re.DOTALL)
    if not match:
        return None
    return unescape_xml(match.group(1).strip())


def _parse_amount(value: Optional[str]) -> Decimal:
    if not value:
        return Decimal('0')
    # Tally kadang mengirim "1,234.50 Dr"
    cleaned = value.replace(',', '').split()[0] if value.split() else ''
    try:
        return Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return Decimal('0')


def _ledger_record(name: str, guid: Optional[str] = None, parent: Optional[str] = None,
                   opening: Optional[str] = None, closing: Optional[str] = None) -> Dict[str, Any]:
    return {
        'name': name,
        'guid': guid or name,
        'parent': parent or 'Sundry Debtors',
        'opening_balance': _parse_amount(opening),
        'closing_balance': _parse_amount(closing),
    }


def _node_text(node, tag: str) -> Optional[str]:
    value = node.findtext(f".//{tag}")
    return value.strip() if value else None


def parse_ledger_list(text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Ekstrak ledger dari collection export.

    Tiap element <LEDGER> menghasilkan name, guid (fallback ke name), parent,
    opening_balance dan closing_balance. Kalau tidak ada LEDGER sama sekali,
    fallback ke semua tag <NAME>. Body yang bukan XML valid (Tally kadang
    mengirim karakter kontrol) diparse dengan regex.
    """
    if not text:
        return []

    try:
        root = ET.fromstring(text.encode('utf-8'))
    except ET.ParseError as e:
        logger.warning(f"Ledger export is not well-formed XML ({e}), using lenient parser")
        return _parse_ledger_list_lenient(text)

    ledgers = []
    seen = set()
    for node in root.iter('LEDGER'):
        name = (node.get('NAME') or _node_text(node, 'NAME') or '').strip()
        if not name or name in seen:
            continue
        seen.add(name)
        ledgers.append(_ledger_record(
            name,
            guid=_node_text(node, 'GUID'),
            parent=_node_text(node, 'PARENT'),
            opening=_node_text(node, 'OPENINGBALANCE'),
            closing=_node_text(node, 'CLOSINGBALANCE'),
        ))

    if ledgers:
        return ledgers

    for node in root.iter('NAME'):
        name = (node.text or '').strip()
        if name and name not in seen:
            seen.add(name)
            ledgers.append(_ledger_record(name))
    return ledgers


def _parse_ledger_list_lenient(text: str) -> List[Dict[str, Any]]:
    ledgers = []
    seen = set()
    for attrs, body in LEDGER_BLOCK_RE.findall(text):
        attr_match = NAME_ATTR_RE.search(attrs)
        name = unescape_xml(attr_match.group(1)) if attr_match else _child_text(body, 'NAME')
        if not name or name in seen:
            continue
        seen.add(name)
        ledgers.append(_ledger_record(
            name,
            guid=_child_text(body, 'GUID'),
            parent=_child_text(body, 'PARENT'),
            opening=_child_text(body, 'OPENINGBALANCE'),
            closing=_child_text(body, 'CLOSINGBALANCE'),
        ))

    if ledgers:
        return ledgers

    for raw_name in SIMPLE_NAME_RE.findall(text):
        name = unescape_xml(raw_name.strip())
        if name and name not in seen:
            seen.add(name)
            ledgers.append(_ledger_record(name))
    return ledgers
