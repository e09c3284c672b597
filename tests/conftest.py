"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PAYCOM__USERNAME", "test-user")
os.environ.setdefault("PAYCOM__KEY", "secret-key")
os.environ.setdefault("PAYCOM__KEY_ID", "key-1")
os.environ.setdefault("PAYCOM__PROCESSOR_ID", "proc-9")

from decimal import Decimal  # noqa: E402
from functools import partial  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from application.dtos.payments import CardDetails  # noqa: E402
from domain.payment.entity import Payment  # noqa: E402
from infrastructure.models import Base  # noqa: E402
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork  # noqa: E402
from tests.fakes import FakePaycom  # noqa: E402


@pytest.fixture
def fake_paycom() -> FakePaycom:
    return FakePaycom()


@pytest.fixture
def card() -> CardDetails:
    return CardDetails(
        type="visa",
        number="4111 1111 1111 1111",
        expiration={"month": 9, "year": 2030},
        security_code="123",
    )


@pytest.fixture
def new_payment() -> Payment:
    return Payment(id=1, order_id="order-1", amount=Decimal("100.00"), currency="USD")


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uow_factory(session_factory):
    return partial(SQLAlchemyUnitOfWork, session_factory)
