"""
Tally XML Message Builder
=========================

Menerjemahkan ledger / invoice lokal menjadi envelope XML Tally.

Semua method murni dan deterministik (kecuali generate_voucher_number dan
fallback tanggal). Semua teks dari user di-escape; field opsional yang kosong
tidak pernah dikirim sebagai tag kosong karena import schema Tally tidak
menerimanya secara konsisten.
"""

import logging
import random
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional
from xml.sax.saxutils import escape, unescape

logger = logging.getLogger(__name__)

XML_ENTITIES = {'"': '&quot;', "'": '&apos;'}
XML_ENTITIES_REVERSE = {v: k for k, v in XML_ENTITIES.items()}

MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
          'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

DEFAULT_PARENT_GROUP = 'Sundry Debtors'
TWO_PLACES = Decimal('0.01')


def escape_xml(value: Any) -> str:
    """Escape & < > " ' menjadi entity XML. None menjadi string kosong."""
    if value is None:
        return ''
    return escape(str(value), XML_ENTITIES)


def unescape_xml(value: Optional[str]) -> str:
    """Kebalikan dari escape_xml"""
    if not value:
        return ''
    return unescape(value, XML_ENTITIES_REVERSE)


def clean_address(address: Optional[str]) -> str:
    """Flatten alamat multi-baris menjadi satu baris untuk ADDRESS.LIST"""
    if not address:
        return ''
    text = re.sub(r'\r\n|\r|\n', ', ', address)
    text = re.sub(r'[ \t\f\v]+', ' ', text)
    text = re.sub(r'\s*,(\s*,)+\s*', ', ', text)
    text = re.sub(r'\s*,\s*', ', ', text)
    return text.strip(' ,')


def to_decimal(value: Any) -> Decimal:
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")


def format_amount(value: Any) -> str:
    """Dua desimal, tanpa separator ribuan, tidak tergantung locale"""
    amount = to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if amount == 0:
        amount = Decimal('0.00')
    return f"{amount:f}"


def format_tally_date(value: Any, today: Optional[date] = None) -> str:
    """
    Format tanggal Tally: 'D MMM YYYY', contoh '5 Jan 2024'.

    Input yang tidak bisa di-parse diganti tanggal hari ini (perilaku lama
    yang dipertahankan), tapi selalu dicatat sebagai WARNING.
    """
    parsed = _parse_date(value)
    if parsed is None:
        parsed = today or date.today()
        logger.warning(f"Invalid date {value!r} for Tally voucher, falling back to {parsed.isoformat()}")
    return f"{parsed.day} {MONTHS[parsed.month - 1]} {parsed.year}"


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def generate_voucher_number(today: Optional[date] = None) -> str:
    """Voucher number default: INV-YYYYMMDD-NNN"""
    today = today or date.today()
    return f"INV-{today:%Y%m%d}-{random.randint(0, 999):03d}"


def _get(record: Any, field: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        value = record.get(field, default)
    else:
        value = getattr(record, field, default)
    return default if value is None else value


class TallyXMLBuilder:
    """Builder untuk semua request envelope yang dikirim ke Tally"""

    def __init__(self, company_name: str, sales_account: str = 'Sales'):
        self.company_name = company_name
        self.sales_account = sales_account

    # ==================== ENVELOPE ====================

    def _static_variables(self, *extra: str) -> str:
        lines = [f"<SVCURRENTCOMPANY>{escape_xml(self.company_name)}</SVCURRENTCOMPANY>"]
        lines.extend(extra)
        return "\n".join(f"          {line}" for line in lines)

    def _import_envelope(self, tally_request: str, report_name: str, message: str) -> str:
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<ENVELOPE>
  <HEADER>
    <TALLYREQUEST>{tally_request}</TALLYREQUEST>
  </HEADER>
  <BODY>
    <IMPORTDATA>
      <REQUESTDESC>
        <REPORTNAME>{report_name}</REPORTNAME>
        <STATICVARIABLES>
{self._static_variables()}
        </STATICVARIABLES>
      </REQUESTDESC>
      <REQUESTDATA>
{message}
      </REQUESTDATA>
    </IMPORTDATA>
  </BODY>
</ENVELOPE>"""

    def _export_envelope(self, report_name: str, *extra_variables: str) -> str:
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<ENVELOPE>
  <HEADER>
    <TALLYREQUEST>Export</TALLYREQUEST>
  </HEADER>
  <BODY>
    <EXPORTDATA>
      <REQUESTDESC>
        <REPORTNAME>{report_name}</REPORTNAME>
        <STATICVARIABLES>
{self._static_variables(*extra_variables)}
        </STATICVARIABLES>
      </REQUESTDESC>
    </EXPORTDATA>
  </BODY>
</ENVELOPE>"""

    # ==================== CONNECTIVITY ====================

    def build_connection_probe(self) -> str:
        """Request paling ringan untuk memastikan listener Tally hidup"""
        return """<?xml version="1.0" encoding="UTF-8"?>
<ENVELOPE>
  <HEADER>
    <TALLYREQUEST>Export</TALLYREQUEST>
  </HEADER>
  <BODY>
    <DESC>
      <STATICVARIABLES>
        <SVEXPORTFORMAT>$$SysName:XML</SVEXPORTFORMAT>
      </STATICVARIABLES>
    </DESC>
  </BODY>
</ENVELOPE>"""

    # ==================== LEDGER ====================

    def build_ledger_create(self, ledger: Any) -> str:
        name = escape_xml(_get(ledger, 'ledger_name'))
        parent = escape_xml(_get(ledger, 'parent_group') or DEFAULT_PARENT_GROUP)
        balance = to_decimal(_get(ledger, 'opening_balance', 0))
        balance_type = 'Dr' if balance >= 0 else 'Cr'

        fields = [
            f"<NAME>{name}</NAME>",
            f"<PARENT>{parent}</PARENT>",
            "<ISBILLWISEON>Yes</ISBILLWISEON>",
            f"<OPENINGBALANCE>{format_amount(abs(balance))}</OPENINGBALANCE>",
            f"<OPENINGBALANCETYPE>{balance_type}</OPENINGBALANCETYPE>",
        ]
        fields.extend(self._ledger_optional_fields(ledger))

        body = "\n".join(f"            {field}" for field in fields)
        message = f"""        <TALLYMESSAGE xmlns:UDF="TallyUDF">
          <LEDGER NAME="{name}" ACTION="Create">
{body}
          </LEDGER>
        </TALLYMESSAGE>"""
        return self._import_envelope('Import Data', 'All Masters', message)

    def _ledger_optional_fields(self, ledger: Any) -> list:
        fields = []

        address = clean_address(_get(ledger, 'address'))
        if address:
            fields.append(
                f"<ADDRESS.LIST><ADDRESS>{escape_xml(address)}</ADDRESS></ADDRESS.LIST>"
            )

        state = _get(ledger, 'state')
        if state:
            fields.append(f"<STATENAME>{escape_xml(state)}</STATENAME>")
            fields.append(f"<STATE>{escape_xml(state)}</STATE>")

        pincode = _get(ledger, 'pincode')
        if pincode:
            fields.append(f"<PINCODE>{escape_xml(pincode)}</PINCODE>")

        mobile = _get(ledger, 'mobile')
        if mobile:
            fields.append(
                "<CONTACTDETAILS.LIST>"
                f"<CONTACTNUMBER>{escape_xml(mobile)}</CONTACTNUMBER>"
                "<CONTACTTYPE>Mobile</CONTACTTYPE>"
                "</CONTACTDETAILS.LIST>"
            )

        email = _get(ledger, 'email')
        if email:
            fields.append(
                "<EMAILDETAILS.LIST>"
                f"<EMAILID>{escape_xml(email)}</EMAILID>"
                "<EMAILTYPE>Primary</EMAILTYPE>"
                "</EMAILDETAILS.LIST>"
            )

        gst_number = _get(ledger, 'gst_number')
        if gst_number:
            fields.append(
                "<GSTDETAILS.LIST>"
                "<APPLICABLEFROM>01-Apr-2017</APPLICABLEFROM>"
                "<GSTREGISTRATIONTYPE>Regular</GSTREGISTRATIONTYPE>"
                f"<GSTNUMBER>{escape_xml(gst_number)}</GSTNUMBER>"
                "</GSTDETAILS.LIST>"
            )

        pan_number = _get(ledger, 'pan_number')
        if pan_number:
            fields.append(
                "<TAXREGISTEREDDETAILS.LIST>"
                "<REGISTRATIONTYPE>Income Tax</REGISTRATIONTYPE>"
                f"<REGISTRATIONNUMBER>{escape_xml(pan_number)}</REGISTRATIONNUMBER>"
                "</TAXREGISTEREDDETAILS.LIST>"
            )
            fields.append(f"<INCOMETAXNUMBER>{escape_xml(pan_number)}</INCOMETAXNUMBER>")

        return fields

    def build_ledger_delete(self, ledger_name: str) -> str:
        name = escape_xml(ledger_name)
        message = f"""        <TALLYMESSAGE>
          <LEDGER NAME="{name}" ACTION="Delete">
            <NAME>{name}</NAME>
          </LEDGER>
        </TALLYMESSAGE>"""
        return self._import_envelope('Import Data', 'All Masters', message)

    def build_ledger_lookup(self, ledger_name: str) -> str:
        """Export satu ledger by name, untuk cek keberadaan di Tally"""
        name = escape_xml(ledger_name)
        return self._export_envelope(
            'Ledger',
            f"<SVFROMNAME>{name}</SVFROMNAME>",
            f"<SVTONAME>{name}</SVTONAME>",
        )

    def build_ledger_list_export(self) -> str:
        """Collection export semua ledger (dipakai bulk pull)"""
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<ENVELOPE>
  <HEADER>
    <TALLYREQUEST>Export Data</TALLYREQUEST>
    <TYPE>Collection</TYPE>
    <ID>LedgerCollection</ID>
  </HEADER>
  <BODY>
    <DESC>
      <STATICVARIABLES>
        <SVCURRENTCOMPANY>{escape_xml(self.company_name)}</SVCURRENTCOMPANY>
        <EXPLODEFLAG>Yes</EXPLODEFLAG>
        <SVEXPORTFORMAT>$$SysName:XML</SVEXPORTFORMAT>
      </STATICVARIABLES>
      <TDL>
        <TDLMESSAGE>
          <COLLECTION NAME="LedgerCollection">
            <TYPE>Ledger</TYPE>
            <FETCH>Name, Parent, Guid, OpeningBalance, ClosingBalance</FETCH>
          </COLLECTION>
        </TDLMESSAGE>
      </TDL>
    </DESC>
  </BODY>
</ENVELOPE>"""

    def build_sales_ledger_create(self) -> str:
        """Master ledger untuk sales account, dibuat kalau belum ada"""
        name = escape_xml(self.sales_account)
        message = f"""        <TALLYMESSAGE>
          <LEDGER NAME="{name}" ACTION="Create">
            <NAME>{name}</NAME>
            <PARENT>Sales Accounts</PARENT>
          </LEDGER>
        </TALLYMESSAGE>"""
        return self._import_envelope('Import Data', 'All Masters', message)

    # ==================== INVOICE / VOUCHER ====================

    def build_invoice_create(self, invoice: Any, voucher_number: Optional[str] = None,
                             today: Optional[date] = None) -> str:
        """
        Sales voucher dengan dua baris ALLLEDGERENTRIES.LIST yang balance:
        party ledger di-debit total_amount, sales account di-kredit -total_amount.
        """
        voucher_number = escape_xml(voucher_number or _get(invoice, 'voucher_number'))
        party = escape_xml(_get(invoice, 'party_ledger_name'))
        narration = escape_xml(_get(invoice, 'narration') or 'Sales Invoice')
        voucher_date = format_tally_date(_get(invoice, 'date'), today=today)

        total = to_decimal(_get(invoice, 'total_amount', 0))
        debit = format_amount(total)
        credit = format_amount(-total)

        message = f"""        <TALLYMESSAGE xmlns:UDF="TallyUDF">
          <VOUCHER REMOTEID="{voucher_number}" VCHTYPE="Sales" ACTION="Create" OBJVIEW="Accounting Voucher View">
            <DATE>{voucher_date}</DATE>
            <GUID>{voucher_number}</GUID>
            <NARRATION>{narration}</NARRATION>
            <VOUCHERTYPENAME>Sales</VOUCHERTYPENAME>
            <VOUCHERNUMBER>{voucher_number}</VOUCHERNUMBER>
            <REFERENCE>{voucher_number}</REFERENCE>
            <PARTYLEDGERNAME>{party}</PARTYLEDGERNAME>
            <PERSISTEDVIEW>Accounting Voucher View</PERSISTEDVIEW>
{self._ledger_entry(party, deemed_positive=False, is_party=True, amount=debit)}
{self._ledger_entry(escape_xml(self.sales_account), deemed_positive=True, is_party=False, amount=credit)}
          </VOUCHER>
        </TALLYMESSAGE>"""
        return self._import_envelope('Import', 'Voucher', message)

    @staticmethod
    def _ledger_entry(ledger_name: str, deemed_positive: bool, is_party: bool, amount: str) -> str:
        yes_no = lambda flag: 'Yes' if flag else 'No'
        return f"""            <ALLLEDGERENTRIES.LIST>
              <LEDGERNAME>{ledger_name}</LEDGERNAME>
              <GSTCLASS/>
              <ISDEEMEDPOSITIVE>{yes_no(deemed_positive)}</ISDEEMEDPOSITIVE>
              <LEDGERFROMITEM>No</LEDGERFROMITEM>
              <REMOVEZEROENTRIES>No</REMOVEZEROENTRIES>
              <ISPARTYLEDGER>{yes_no(is_party)}</ISPARTYLEDGER>
              <AMOUNT>{amount}</AMOUNT>
            </ALLLEDGERENTRIES.LIST>"""

    def build_invoice_delete(self, voucher_number: str) -> str:
        message = f"""        <TALLYMESSAGE>
          <VOUCHER VCHTYPE="Sales" ACTION="Delete">
            <VOUCHERNUMBER>{escape_xml(voucher_number)}</VOUCHERNUMBER>
          </VOUCHER>
        </TALLYMESSAGE>"""
        return self._import_envelope('Import Data', 'Vouchers', message)
