import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from tally_dashboard.models import SyncLog, TallyLedger
from tally_dashboard.services import LedgerService
from tally_dashboard.services.exceptions import ConflictError, NotFoundError, TallyHTTPError

MISSING_RESPONSE = "<RESPONSE><LINEERROR>Ledger &apos;Acme Corp&apos; does not exist!</LINEERROR></RESPONSE>"
REJECTED_RESPONSE = "<RESPONSE><LINEERROR>Group &apos;Nope&apos; does not belong</LINEERROR></RESPONSE>"


async def all_logs(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(SyncLog).order_by(SyncLog.id))
        return result.unique().scalars().all()


async def find_ledger(session_factory, name):
    async with session_factory() as session:
        result = await session.execute(select(TallyLedger).filter(TallyLedger.ledger_name == name))
        return result.scalars().first()


def run_with_service(session_factory, tally, scenario):
    async def runner():
        async with session_factory() as session:
            return await scenario(LedgerService(session, tally))
    return asyncio.run(runner())


def test_create_ledger_syncs_to_tally(session_factory, make_tally, fake_transport):
    transport = fake_transport()
    tally = make_tally(transport)

    result = run_with_service(session_factory, tally, lambda service: service.create_ledger({
        'ledger_name': 'Acme Corp', 'opening_balance': -500
    }))

    assert result['tallySync']['success'] is True
    assert result['message'] == 'Ledger created and synced to Tally'
    assert result['ledger']['tally_guid'] == 'Acme Corp'
    assert result['ledger']['synced_at'] is not None
    assert result['ledger']['opening_balance'] == -500.0
    assert transport.probes == 1
    assert len(transport.sent) == 1
    assert '<OPENINGBALANCETYPE>Cr</OPENINGBALANCETYPE>' in transport.sent[0]
    assert '<OPENINGBALANCE>500.00</OPENINGBALANCE>' in transport.sent[0]

    logs = asyncio.run(all_logs(session_factory))
    assert [(log.sync_type, log.status, log.records_processed) for log in logs] == [
        ('tally_ledger', 'success', 1)
    ]


def test_unreachable_tally_still_creates_locally(session_factory, make_tally, fake_transport):
    transport = fake_transport(reachable=False)
    tally = make_tally(transport)

    result = run_with_service(session_factory, tally, lambda service: service.create_ledger({
        'ledger_name': 'Offline Co'
    }))

    assert result['tallySync']['success'] is False
    assert 'localhost:9000' in result['tallySync']['error']
    assert result['message'] == 'Ledger created locally but Tally sync failed'
    assert transport.sent == []

    ledger = asyncio.run(find_ledger(session_factory, 'Offline Co'))
    assert ledger is not None
    assert ledger.synced_at is None
    assert 'localhost:9000' in ledger.error_message

    logs = asyncio.run(all_logs(session_factory))
    assert logs[0].status == 'failed'
    assert 'localhost:9000' in logs[0].error_message


def test_rejected_ledger_keeps_error_message(session_factory, make_tally, fake_transport):
    tally = make_tally(fake_transport([REJECTED_RESPONSE]))

    result = run_with_service(session_factory, tally, lambda service: service.create_ledger({
        'ledger_name': 'Bad Group', 'parent_group': 'Nope'
    }))

    assert result['tallySync']['success'] is False
    assert result['ledger']['error_message'] == "Group 'Nope' does not belong"
    assert result['ledger']['synced_at'] is None


def test_duplicate_ledger_name_conflicts(session_factory, make_tally, fake_transport):
    transport = fake_transport()
    tally = make_tally(transport)

    async def scenario(service):
        await service.create_ledger({'ledger_name': 'Acme Corp'})
        with pytest.raises(ConflictError):
            await service.create_ledger({'ledger_name': 'Acme Corp'})

    run_with_service(session_factory, tally, scenario)
    assert len(transport.sent) == 1


def test_delete_never_synced_ledger_makes_no_remote_call(session_factory, make_tally, fake_transport):
    setup = fake_transport(reachable=False)

    async def create(service):
        return await service.create_ledger({'ledger_name': 'Local Only'})

    created = run_with_service(session_factory, make_tally(setup), create)

    transport = fake_transport()
    result = run_with_service(
        session_factory, make_tally(transport),
        lambda service: service.delete_ledger(created['ledger']['id'])
    )

    assert transport.calls == 0
    assert result['tallySync']['success'] is True
    assert 'was never synced to Tally' in result['tallySync']['message']
    assert 'warning' not in result
    assert asyncio.run(find_ledger(session_factory, 'Local Only')) is None

    delete_log = asyncio.run(all_logs(session_factory))[-1]
    assert delete_log.sync_type == 'tally_ledger_delete'
    assert delete_log.status == 'success'
    assert delete_log.records_processed == 0


def test_delete_ledger_missing_on_tally_is_soft_success(session_factory, make_tally, fake_transport):
    transport = fake_transport()
    tally = make_tally(transport)

    async def scenario(service):
        created = await service.create_ledger({'ledger_name': 'Acme Corp'})
        transport.responses.append(MISSING_RESPONSE)
        return await service.delete_ledger(created['ledger']['id'])

    result = run_with_service(session_factory, tally, scenario)

    assert result['tallySync']['success'] is True
    assert 'warning' not in result
    assert result['deletedLedger'] == 'Acme Corp'
    assert 'ACTION="Delete"' in transport.sent[-1]
    assert asyncio.run(find_ledger(session_factory, 'Acme Corp')) is None
    assert asyncio.run(all_logs(session_factory))[-1].status == 'success'


def test_delete_ledger_remote_error_becomes_warning(session_factory, make_tally, fake_transport):
    transport = fake_transport()
    tally = make_tally(transport)

    async def scenario(service):
        created = await service.create_ledger({'ledger_name': 'Acme Corp'})
        transport.responses.append('<RESPONSE><ERROR>Voucher entries exist</ERROR></RESPONSE>')
        return await service.delete_ledger(created['ledger']['id'])

    result = run_with_service(session_factory, tally, scenario)

    assert result['tallySync']['success'] is False
    assert 'Voucher entries exist' in result['warning']
    assert asyncio.run(find_ledger(session_factory, 'Acme Corp')) is None

    delete_log = asyncio.run(all_logs(session_factory))[-1]
    assert delete_log.status == 'failed'
    assert delete_log.error_message == 'Voucher entries exist'


def test_delete_ledger_http_404_becomes_warning(session_factory, make_tally, fake_transport):
    transport = fake_transport()
    tally = make_tally(transport)

    async def scenario(service):
        created = await service.create_ledger({'ledger_name': 'Acme Corp'})
        transport.responses.append(TallyHTTPError(404, '<html><h1>Not Found</h1></html>'))
        return await service.delete_ledger(created['ledger']['id'])

    result = run_with_service(session_factory, tally, scenario)

    assert result['tallySync']['success'] is False
    assert 'Tally returned 404' in result['warning']
    assert asyncio.run(find_ledger(session_factory, 'Acme Corp')) is None

    delete_log = asyncio.run(all_logs(session_factory))[-1]
    assert (delete_log.status, delete_log.records_processed) == ('failed', 0)


def test_delete_missing_ledger_raises_not_found(session_factory, make_tally, fake_transport):
    transport = fake_transport()

    async def scenario(service):
        with pytest.raises(NotFoundError):
            await service.delete_ledger(999)

    run_with_service(session_factory, make_tally(transport), scenario)
    assert transport.calls == 0


def test_list_and_get_ledgers(session_factory, make_tally, fake_transport):
    tally = make_tally(fake_transport())

    async def scenario(service):
        await service.create_ledger({'ledger_name': 'Alpha Traders'})
        created = await service.create_ledger({'ledger_name': 'Beta Stores', 'parent_group': 'Sundry Creditors'})
        listing = await service.list_ledgers(search='alpha')
        creditors = await service.list_ledgers(parent_group='Sundry Creditors')
        single = await service.get_ledger(created['ledger']['id'])
        return listing, creditors, single

    listing, creditors, single = run_with_service(session_factory, tally, scenario)

    assert [l['ledger_name'] for l in listing['items']] == ['Alpha Traders']
    assert listing['pagination']['total'] == 1
    assert [l['ledger_name'] for l in creditors['items']] == ['Beta Stores']
    assert single['parent_group'] == 'Sundry Creditors'


def test_is_synced_follows_synced_at():
    ledger = TallyLedger(ledger_name='Acme Corp')
    assert ledger.is_synced is False
    ledger.synced_at = datetime.now(timezone.utc)
    assert ledger.is_synced is True
