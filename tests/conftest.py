import asyncio
import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('TALLY_HOST', 'http://localhost:9000')

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from tally_dashboard.database import Base
from tally_dashboard import models  # noqa: F401
from tally_dashboard.services.integration import TallyService, TallyXMLBuilder, SyncLogRecorder
from tally_dashboard.services.exceptions import TallyConnectionRefusedError

CREATED_RESPONSE = (
    "<RESPONSE><CREATED>1</CREATED><ALTERED>0</ALTERED><DELETED>0</DELETED>"
    "<LASTVCHID>0</LASTVCHID><ERRORS>0</ERRORS></RESPONSE>"
)
DELETED_RESPONSE = (
    "<RESPONSE><CREATED>0</CREATED><ALTERED>0</ALTERED><DELETED>1</DELETED>"
    "<ERRORS>0</ERRORS></RESPONSE>"
)


class FakeTransport:
    """
    Pengganti TallyTransport: tanpa network, semua request dicatat.

    reachable=False membuat probe raise connection refused; exception
    instance dipakai apa adanya sebagai error probe.
    """

    def __init__(self, responses=None, reachable=True, base_url='http://localhost:9000'):
        self.base_url = base_url
        self.responses = list(responses or [])
        self.reachable = reachable
        self.sent = []
        self.probes = 0
        self.closed = False

    def send(self, xml, timeout=None):
        self.sent.append(xml)
        if not self.responses:
            return CREATED_RESPONSE
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def probe(self, xml=None):
        self.probes += 1
        if isinstance(self.reachable, Exception):
            raise self.reachable
        if not self.reachable:
            raise TallyConnectionRefusedError(self.base_url)
        return True

    def close(self):
        self.closed = True

    @property
    def calls(self):
        return self.probes + len(self.sent)


@pytest.fixture
def session_factory(tmp_path):
    """SQLite file per test; NullPool supaya aman dipakai lintas event loop"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool
    )

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_all())
    factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )
    yield factory
    asyncio.run(engine.dispose())


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def make_tally(session_factory):
    def factory(transport, max_attempts=1, retry_backoff=0):
        return TallyService(
            transport,
            TallyXMLBuilder('DevCompany', 'Sales'),
            SyncLogRecorder(session_factory),
            max_attempts=max_attempts,
            retry_backoff=retry_backoff
        )
    return factory
