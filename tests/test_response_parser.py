import logging
from decimal import Decimal

from tally_dashboard.services.integration import (
    classify_response, extract_remote_error, is_missing_on_remote, parse_ledger_list
)


def test_empty_response_fails():
    assert classify_response(None).message == 'Empty response from Tally'
    assert classify_response('   ').success is False


def test_success_markers():
    assert classify_response('<RESPONSE><CREATED>1</CREATED><ALTERED>0</ALTERED></RESPONSE>').success
    assert classify_response('<RESPONSE><CREATED>0</CREATED><ALTERED>1</ALTERED></RESPONSE>').success
    assert classify_response('<RESPONSE><DELETED>1</DELETED></RESPONSE>').success
    assert classify_response('<RESPONSE><LASTVCHID>42</LASTVCHID></RESPONSE>').success


def test_line_error_message_is_extracted():
    result = classify_response(
        "<RESPONSE><LINEERROR>Ledger &apos;Ghost&apos; does not exist!</LINEERROR></RESPONSE>"
    )
    assert result.success is False
    assert result.message == "Ledger 'Ghost' does not exist!"
    assert is_missing_on_remote(result.message)


def test_empty_line_error_uses_default():
    assert classify_response('<RESPONSE><LINEERROR></LINEERROR></RESPONSE>').message == 'TDL Line error'


def test_error_block():
    result = classify_response('<ENVELOPE><ERROR>Could not set SVCURRENTCOMPANY</ERROR></ENVELOPE>')
    assert result.success is False
    assert result.message == 'Could not set SVCURRENTCOMPANY'
    assert classify_response('<RESPONSE><ERROR></ERROR></RESPONSE>').message == 'Tally error'


def test_short_response_is_invalid():
    assert classify_response('<RESPONSE/>').message == 'Invalid Tally response'


def test_unknown_response_is_logged(caplog):
    body = '<ENVELOPE><HEADER><STATUS>0</STATUS></HEADER><BODY><DATA>nothing useful here</DATA></BODY></ENVELOPE>'
    with caplog.at_level(logging.WARNING):
        result = classify_response(body)
    assert result.success is False
    assert result.message == 'Unknown Tally response'
    assert 'nothing useful here' in caplog.text


def test_is_missing_on_remote():
    assert is_missing_on_remote('Voucher NOT FOUND')
    assert not is_missing_on_remote('Could not set company')
    assert not is_missing_on_remote(None)


def test_to_dict_shapes():
    ok = classify_response('<RESPONSE><CREATED>1</CREATED></RESPONSE>')
    ok.data['ledgerName'] = 'Acme'
    assert ok.to_dict() == {'success': True, 'message': ok.message, 'ledgerName': 'Acme'}

    failed = classify_response('<RESPONSE/>').to_dict()
    assert failed['success'] is False
    assert failed['error'] == 'Invalid Tally response'


def test_parse_ledger_list_blocks():
    body = """<ENVELOPE><BODY><DATA><COLLECTION>
      <LEDGER NAME="Acme Corp" RESERVEDNAME="">
        <GUID>abc-1</GUID>
        <PARENT>Sundry Debtors</PARENT>
        <OPENINGBALANCE>-500.00</OPENINGBALANCE>
        <CLOSINGBALANCE>1,500.00</CLOSINGBALANCE>
      </LEDGER>
      <LEDGER NAME="Cash">
        <PARENT>Cash-in-Hand</PARENT>
      </LEDGER>
      <LEDGER NAME="Tom &amp; Jerry"><PARENT>Sundry Creditors</PARENT></LEDGER>
    </COLLECTION></DATA></BODY></ENVELOPE>"""
    ledgers = parse_ledger_list(body)

    assert [l['name'] for l in ledgers] == ['Acme Corp', 'Cash', 'Tom & Jerry']
    acme = ledgers[0]
    assert acme['guid'] == 'abc-1'
    assert acme['opening_balance'] == Decimal('-500.00')
    assert acme['closing_balance'] == Decimal('1500.00')
    assert ledgers[1]['guid'] == 'Cash'
    assert ledgers[1]['parent'] == 'Cash-in-Hand'
    assert ledgers[1]['closing_balance'] == Decimal('0')


def test_parse_ledger_list_name_fallback():
    ledgers = parse_ledger_list('<LIST><NAME>Alpha</NAME><NAME>Beta</NAME><NAME>Alpha</NAME></LIST>')
    assert [l['name'] for l in ledgers] == ['Alpha', 'Beta']
    assert ledgers[0]['parent'] == 'Sundry Debtors'
    assert parse_ledger_list('') == []


def test_parse_ledger_list_reads_nested_name_and_declaration():
    body = """<?xml version="1.0" encoding="UTF-8"?>
    <ENVELOPE><BODY><DATA><COLLECTION>
      <LEDGER><NAME.LIST><NAME>Globex</NAME></NAME.LIST>
        <GUID>g-1</GUID><CLOSINGBALANCE>250.00 Dr</CLOSINGBALANCE>
      </LEDGER>
    </COLLECTION></DATA></BODY></ENVELOPE>"""

    ledgers = parse_ledger_list(body)

    assert ledgers == [{
        'name': 'Globex', 'guid': 'g-1', 'parent': 'Sundry Debtors',
        'opening_balance': Decimal('0'), 'closing_balance': Decimal('250.00'),
    }]


def test_parse_ledger_list_falls_back_on_malformed_export(caplog):
    # Tally kadang mengirim entity karakter kontrol yang bukan XML valid
    body = '<ENVELOPE><LEDGER NAME="Acme &#4; Corp"><GUID>a-1</GUID></LEDGER><LEDGER NAME="Cash"></LEDGER>'

    with caplog.at_level(logging.WARNING):
        ledgers = parse_ledger_list(body)

    assert [l['name'] for l in ledgers] == ['Acme &#4; Corp', 'Cash']
    assert ledgers[0]['guid'] == 'a-1'
    assert 'not well-formed' in caplog.text


def test_classified_errors_carry_remote_error():
    assert classify_response('<RESPONSE><ERROR>Ledger not found</ERROR></RESPONSE>').remote_error == 'Ledger not found'
    assert classify_response('<RESPONSE/>').remote_error is None


def test_extract_remote_error_ignores_non_tally_bodies():
    assert extract_remote_error('<html><h1>Not Found</h1></html>') is None
    assert extract_remote_error(None) is None
    assert extract_remote_error('<RESPONSE><LINEERROR>Voucher does not exist</LINEERROR></RESPONSE>') == \
        'Voucher does not exist'
