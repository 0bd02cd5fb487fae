"""
Shared test fixtures.
"""

import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RESULT_SINK", "memory")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models.database import Base
from app.storage.memory_sink import MemoryResultSink
from app.storage.sql_sink import SqlResultSink


@pytest.fixture
def fir_text():
    """An FIR that mentions every required section."""
    return (
        "FIR No. 245/2024 registered at Police Station Andheri.\n"
        "Case details: theft of a motorcycle.\n"
        "Parties: complainant R. Sharma, accused unknown.\n"
        "Evidence: CCTV footage.\n"
        "Charges: Section 379 IPC.\n"
        "Date of incident: 2024-03-14."
    )


@pytest.fixture
def risky_text():
    """Text that trips every detector."""
    return (
        "The accused was seen around 10pm, possibly near the gate, maybe armed. "
        "The sequence is unclear. He claims he is innocent but a witness says guilty. "
        "He left before the alarm and returned after it. "
        "Incident recorded on 25/13/2024."
    )


@pytest.fixture
def memory_sink():
    return MemoryResultSink()


async def _sqlite_sink():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    return engine, SqlResultSink(session_factory=factory)


@pytest_asyncio.fixture
async def sql_sink():
    """SqlResultSink over a fresh in-memory SQLite database."""
    engine, sink = await _sqlite_sink()
    yield sink
    await engine.dispose()


@pytest_asyncio.fixture
async def tableless_sql_sink():
    """SqlResultSink whose database has no tables, so every query fails."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    yield SqlResultSink(session_factory=factory)
    await engine.dispose()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def sink(request):
    """Every ResultSink implementation, for contract tests."""
    if request.param == "memory":
        yield MemoryResultSink()
        return
    engine, sql = await _sqlite_sink()
    yield sql
    await engine.dispose()


@pytest_asyncio.fixture
async def api_client(memory_sink):
    """HTTP client against the app with the memory sink injected."""
    from app.dependencies import get_result_sink
    from app.main import app

    app.dependency_overrides[get_result_sink] = lambda: memory_sink

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
