"""
Test Configuration and Fixtures

This module provides:
- Test environment (sqlite+aiosqlite database file, test log directory)
- Fresh schema per test for integration tests
- Catalog, principal and Midtrans fixtures
- An httpx client bound to the ASGI app, with the payment gateway's HTTP
  layer replaced by httpx.MockTransport

Architecture:
- Unit tests (test/**/unit/): AsyncMock unit of work, no database
- Integration tests (test/**/integration/): real repositories on SQLite
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings is instantiated at import time (src.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_dir = Path(__file__).parent

    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_file = test_dir / f'test_concert_ticketing_{worker_id}.db'
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{db_file}'

    test_log_dir = test_dir / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('DEBUG', 'false')
    os.environ['MAINTENANCE_ENABLED'] = 'false'
    os.environ['SECRET_KEY'] = 'test_secret_key'
    os.environ['MIDTRANS_SERVER_KEY'] = 'SB-Mid-server-test-key'
    os.environ['ORDER_TTL_MINUTES'] = '15'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from typing import Any  # noqa: E402

from dependency_injector import providers  # noqa: E402
from fastapi import FastAPI  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402

from src.platform.app_factory import create_app  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import (  # noqa: E402
    create_db_and_tables,
    drop_db_and_tables,
    engine_manager,
    get_session_maker,
)
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity  # noqa: E402
from src.service.concert_ticketing.driven_adapter.model.concert_model import (  # noqa: E402
    ConcertModel,
    TicketTypeModel,
)
from src.service.concert_ticketing.driven_adapter.payment_gateway.midtrans_payment_gateway import (  # noqa: E402
    MidtransPaymentGateway,
)
from src.service.concert_ticketing.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)
from test.fake_midtrans import FakeMidtrans  # noqa: E402
from test.test_constants import (  # noqa: E402
    ADMIN,
    ANOTHER_BUYER,
    BUYER,
    FESTIVAL_PRICE,
    MIDTRANS_API_BASE_URL,
    MIDTRANS_SNAP_BASE_URL,
    SERVER_KEY,
    VIP_PRICE,
)


# =============================================================================
# Database
# =============================================================================
@pytest.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema for every integration test."""
    await drop_db_and_tables()
    await create_db_and_tables()
    yield
    await engine_manager.dispose()


@pytest.fixture
def session_scope(database: None) -> Callable[[], Any]:
    """`async with session_scope() as session:` opens a short-lived session."""

    @asynccontextmanager
    async def _scope() -> AsyncGenerator[Any, None]:
        async with get_session_maker()() as session:
            yield session

    return _scope


@pytest.fixture
async def uow(database: None) -> AsyncGenerator[SqlAlchemyUnitOfWork, None]:
    async with get_session_maker()() as session:
        yield SqlAlchemyUnitOfWork(session)


@pytest.fixture
async def catalog(session_scope: Callable[[], Any]) -> dict[str, int]:
    """
    One concert with two ticket types:
    - VIP      2,500,000 (quota 10)
    - Festival   750,000 (quota 100)
    """
    async with session_scope() as session:
        concert = ConcertModel(title='Sheila on 7', venue='Gelora Bung Karno')
        session.add(concert)
        await session.flush()

        vip = TicketTypeModel(
            concert_id=concert.id, name='VIP', price=VIP_PRICE, quota_total=10, quota_sold=0
        )
        festival = TicketTypeModel(
            concert_id=concert.id,
            name='Festival',
            price=FESTIVAL_PRICE,
            quota_total=100,
            quota_sold=0,
        )
        other_concert = ConcertModel(title='Jazz Night', venue='Sabuga')
        session.add_all([vip, festival, other_concert])
        await session.flush()

        other_type = TicketTypeModel(
            concert_id=other_concert.id, name='Regular', price=350_000, quota_total=50
        )
        session.add(other_type)
        await session.commit()

        return {
            'concert_id': concert.id,
            'vip_id': vip.id,
            'festival_id': festival.id,
            'other_concert_id': other_concert.id,
            'other_type_id': other_type.id,
        }


# =============================================================================
# Midtrans
# =============================================================================
@pytest.fixture
def fake_midtrans() -> FakeMidtrans:
    return FakeMidtrans(server_key=SERVER_KEY)


@pytest.fixture
def payment_gateway(fake_midtrans: FakeMidtrans) -> MidtransPaymentGateway:
    return MidtransPaymentGateway(
        server_key=SERVER_KEY,
        snap_base_url=MIDTRANS_SNAP_BASE_URL,
        api_base_url=MIDTRANS_API_BASE_URL,
        timeout_seconds=5,
        transport=httpx.MockTransport(fake_midtrans.handle),
    )


# =============================================================================
# HTTP
# =============================================================================
@asynccontextmanager
async def _test_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield


@pytest.fixture
async def client(
    database: None, payment_gateway: MidtransPaymentGateway
) -> AsyncGenerator[httpx.AsyncClient, None]:
    container.wire(modules=WIRE_MODULES)
    container.payment_gateway.override(providers.Object(payment_gateway))
    app = create_app(lifespan=_test_lifespan, title_suffix=' (Test)')
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url='http://test'
        ) as async_client:
            yield async_client
    finally:
        container.payment_gateway.reset_override()
        container.unwire()


def _auth_headers(user: UserEntity) -> dict[str, str]:
    return {'Authorization': f'Bearer {JwtAuth().create_jwt_token(user)}'}


@pytest.fixture
def buyer_headers() -> dict[str, str]:
    return _auth_headers(BUYER)


@pytest.fixture
def another_buyer_headers() -> dict[str, str]:
    return _auth_headers(ANOTHER_BUYER)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _auth_headers(ADMIN)

