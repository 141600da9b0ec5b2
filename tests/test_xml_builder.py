import logging
import re
import xml.etree.ElementTree as ET
from datetime import date
from decimal import Decimal

from tally_dashboard.services.integration import (
    TallyXMLBuilder, escape_xml, unescape_xml, clean_address, format_amount,
    format_tally_date, generate_voucher_number
)

builder = TallyXMLBuilder('DevCompany', 'Sales')


def parse(xml):
    return ET.fromstring(xml.encode('utf-8'))


def test_escape_xml_covers_five_entities():
    assert escape_xml('a & b < c > d " e \' f') == 'a &amp; b &lt; c &gt; d &quot; e &apos; f'
    assert escape_xml(None) == ''
    assert unescape_xml(escape_xml('Tom & Jerry\'s "Shop" <1>')) == 'Tom & Jerry\'s "Shop" <1>'


def test_clean_address_flattens_lines():
    assert clean_address("12 Main St\nSuite 4\r\n\nMumbai  ") == '12 Main St, Suite 4, Mumbai'
    assert clean_address('  Plot   7 ,  ,  Pune ') == 'Plot 7, Pune'
    assert clean_address(None) == ''


def test_format_amount():
    assert format_amount(None) == '0.00'
    assert format_amount(1234.5) == '1234.50'
    assert format_amount('2.345') == '2.35'
    assert format_amount(Decimal('-0.001')) == '0.00'
    assert format_amount(Decimal('-500')) == '-500.00'
    assert format_amount(1000000) == '1000000.00'


def test_format_tally_date():
    assert format_tally_date(date(2024, 1, 5)) == '5 Jan 2024'
    assert format_tally_date('2024-03-15') == '15 Mar 2024'
    assert format_tally_date('2024-12-31T10:00:00Z') == '31 Dec 2024'


def test_format_tally_date_falls_back_to_today_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        result = format_tally_date('not a date', today=date(2024, 7, 9))
    assert result == '9 Jul 2024'
    assert 'Invalid date' in caplog.text


def test_generate_voucher_number_format():
    assert re.match(r'^INV-20240201-\d{3}$', generate_voucher_number(date(2024, 2, 1)))


def test_connection_probe():
    root = parse(builder.build_connection_probe())
    assert root.find('HEADER/TALLYREQUEST').text == 'Export'
    assert root.find('.//SVEXPORTFORMAT').text == '$$SysName:XML'


def test_ledger_create_minimal_credit_balance():
    xml = builder.build_ledger_create({'ledger_name': 'Acme Corp', 'opening_balance': Decimal('-500')})
    root = parse(xml)

    assert root.find('HEADER/TALLYREQUEST').text == 'Import Data'
    assert root.find('.//REPORTNAME').text == 'All Masters'
    assert root.find('.//SVCURRENTCOMPANY').text == 'DevCompany'

    ledger = root.find('.//LEDGER')
    assert ledger.get('NAME') == 'Acme Corp'
    assert ledger.find('PARENT').text == 'Sundry Debtors'
    assert ledger.find('OPENINGBALANCE').text == '500.00'
    assert ledger.find('OPENINGBALANCETYPE').text == 'Cr'

    for tag in ('ADDRESS.LIST', 'STATENAME', 'PINCODE', 'CONTACTDETAILS.LIST',
                'EMAILDETAILS.LIST', 'GSTDETAILS.LIST', 'TAXREGISTEREDDETAILS.LIST'):
        assert ledger.find(tag) is None
        assert tag not in xml


def test_ledger_create_debit_balance_and_zero():
    ledger = parse(builder.build_ledger_create({'ledger_name': 'A', 'opening_balance': 1500})).find('.//LEDGER')
    assert ledger.find('OPENINGBALANCE').text == '1500.00'
    assert ledger.find('OPENINGBALANCETYPE').text == 'Dr'

    ledger = parse(builder.build_ledger_create({'ledger_name': 'B'})).find('.//LEDGER')
    assert ledger.find('OPENINGBALANCE').text == '0.00'
    assert ledger.find('OPENINGBALANCETYPE').text == 'Dr'


def test_ledger_create_with_all_optional_fields():
    ledger = parse(builder.build_ledger_create({
        'ledger_name': 'Globex',
        'parent_group': 'Sundry Creditors',
        'opening_balance': 10,
        'address': '12 Main St\nMumbai',
        'state': 'Maharashtra',
        'pincode': '400001',
        'mobile': '9876543210',
        'email': 'ap@globex.example',
        'gst_number': '27AAPFU0939F1ZV',
        'pan_number': 'AAPFU0939F',
    })).find('.//LEDGER')

    assert ledger.find('PARENT').text == 'Sundry Creditors'
    assert ledger.find('ADDRESS.LIST/ADDRESS').text == '12 Main St, Mumbai'
    assert ledger.find('STATENAME').text == 'Maharashtra'
    assert ledger.find('STATE').text == 'Maharashtra'
    assert ledger.find('PINCODE').text == '400001'
    assert ledger.find('CONTACTDETAILS.LIST/CONTACTNUMBER').text == '9876543210'
    assert ledger.find('CONTACTDETAILS.LIST/CONTACTTYPE').text == 'Mobile'
    assert ledger.find('EMAILDETAILS.LIST/EMAILID').text == 'ap@globex.example'
    assert ledger.find('GSTDETAILS.LIST/GSTNUMBER').text == '27AAPFU0939F1ZV'
    assert ledger.find('GSTDETAILS.LIST/GSTREGISTRATIONTYPE').text == 'Regular'
    assert ledger.find('TAXREGISTEREDDETAILS.LIST/REGISTRATIONNUMBER').text == 'AAPFU0939F'
    assert ledger.find('INCOMETAXNUMBER').text == 'AAPFU0939F'


def test_ledger_name_with_markup_stays_well_formed():
    name = 'Tom & Jerry\'s <"Shop">'
    xml = builder.build_ledger_create({'ledger_name': name, 'address': 'A & B'})
    ledger = parse(xml).find('.//LEDGER')

    assert ledger.get('NAME') == name
    assert ledger.find('NAME').text == name
    assert ledger.find('ADDRESS.LIST/ADDRESS').text == 'A & B'

    delete = parse(builder.build_ledger_delete(name)).find('.//LEDGER')
    assert delete.get('NAME') == name
    assert delete.get('ACTION') == 'Delete'
    assert [child.tag for child in delete] == ['NAME']


def test_invoice_create_has_balanced_entries():
    invoice = {
        'voucher_number': 'INV-20240105-001',
        'date': date(2024, 1, 5),
        'party_ledger_name': 'Acme & Co',
        'total_amount': Decimal('1180.50'),
    }
    root = parse(builder.build_invoice_create(invoice))

    assert root.find('HEADER/TALLYREQUEST').text == 'Import'
    assert root.find('.//REPORTNAME').text == 'Voucher'

    voucher = root.find('.//VOUCHER')
    assert voucher.get('VCHTYPE') == 'Sales'
    assert voucher.get('ACTION') == 'Create'
    assert voucher.find('DATE').text == '5 Jan 2024'
    assert voucher.find('NARRATION').text == 'Sales Invoice'
    assert voucher.find('VOUCHERNUMBER').text == 'INV-20240105-001'
    assert voucher.find('PARTYLEDGERNAME').text == 'Acme & Co'

    entries = voucher.findall('ALLLEDGERENTRIES.LIST')
    assert len(entries) == 2
    party, sales = entries
    assert party.find('LEDGERNAME').text == 'Acme & Co'
    assert party.find('ISDEEMEDPOSITIVE').text == 'No'
    assert party.find('ISPARTYLEDGER').text == 'Yes'
    assert party.find('AMOUNT').text == '1180.50'
    assert sales.find('LEDGERNAME').text == 'Sales'
    assert sales.find('ISDEEMEDPOSITIVE').text == 'Yes'
    assert sales.find('AMOUNT').text == '-1180.50'
    assert Decimal(party.find('AMOUNT').text) + Decimal(sales.find('AMOUNT').text) == 0


def test_invoice_create_uses_configured_sales_account():
    custom = TallyXMLBuilder('DevCompany', 'Sales A/c')
    voucher = parse(custom.build_invoice_create({
        'voucher_number': 'V1', 'date': '2024-02-29', 'party_ledger_name': 'P',
        'total_amount': 10, 'narration': 'Feb <leap>'
    })).find('.//VOUCHER')

    assert voucher.findall('ALLLEDGERENTRIES.LIST')[1].find('LEDGERNAME').text == 'Sales A/c'
    assert voucher.find('NARRATION').text == 'Feb <leap>'
    assert voucher.find('DATE').text == '29 Feb 2024'


def test_invoice_delete():
    root = parse(builder.build_invoice_delete('INV-1'))
    assert root.find('HEADER/TALLYREQUEST').text == 'Import Data'
    assert root.find('.//REPORTNAME').text == 'Vouchers'
    voucher = root.find('.//VOUCHER')
    assert voucher.get('ACTION') == 'Delete'
    assert voucher.find('VOUCHERNUMBER').text == 'INV-1'


def test_export_requests_are_well_formed():
    lookup = parse(builder.build_ledger_lookup('Sales'))
    assert lookup.find('.//SVFROMNAME').text == 'Sales'
    assert lookup.find('.//SVTONAME').text == 'Sales'

    export = parse(builder.build_ledger_list_export())
    assert export.find('HEADER/TYPE').text == 'Collection'
    assert export.find('.//COLLECTION/TYPE').text == 'Ledger'

    sales = parse(builder.build_sales_ledger_create()).find('.//LEDGER')
    assert sales.get('NAME') == 'Sales'
    assert sales.find('PARENT').text == 'Sales Accounts'
