"""
Test Configuration and Fixtures

This module provides:
- Test environment variables (set before any application import)
- A fresh SQLite database per test (aiosqlite, temp file) for integration tests
- Unit of work factory bound to that database
- HTTP client against the FastAPI app with container overrides

Architecture:
- Unit tests (test/**/unit/): pure, AsyncMock ports, marked ``unit``
- Integration tests: real repositories on SQLite, marked ``integration``
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['LOG_DIR'] = str(test_log_dir)

    os.environ['DATABASE_URL_ASYNC'] = f'sqlite+aiosqlite:///{test_log_dir / "default.db"}'
    os.environ['PAYMENT_GATEWAY'] = 'mock'
    os.environ['EMAIL_BACKEND'] = 'mock'
    os.environ['REAPER_INTERVAL_SECONDS'] = '0'
    os.environ['SECRET_KEY'] = 'test_secret_key_with_enough_length_for_hs256'
    os.environ['OTEL_EXPORTER_OTLP_ENDPOINT'] = ''


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable  # noqa: E402

from dependency_injector import providers  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.platform.database.unit_of_work import (  # noqa: E402
    AbstractUnitOfWork,
    SqlAlchemyUnitOfWork,
)
from src.service.ticketing.driven_adapter.notification.mock_email_notifier_impl import (  # noqa: E402
    MockEmailNotifier,
)
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway_impl import (  # noqa: E402
    MockPaymentGateway,
)


UowFactory = Callable[[], AbstractUnitOfWork]


# =============================================================================
# Database Fixtures
# =============================================================================
@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "joki_events_test.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UowFactory:
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session)


# =============================================================================
# Adapter Fixtures
# =============================================================================
@pytest.fixture
def payment_gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def notifier() -> MockEmailNotifier:
    return MockEmailNotifier()


# =============================================================================
# HTTP Client
# =============================================================================
@pytest.fixture
async def client(
    database: Database, payment_gateway: MockPaymentGateway, notifier: MockEmailNotifier
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """The app without its lifespan: no reaper, tables already created by ``database``."""
    from src.main import app

    container.wire(modules=WIRE_MODULES)
    with (
        container.database.override(providers.Object(database)),
        container.payment_gateway.override(providers.Object(payment_gateway)),
        container.notifier.override(providers.Object(notifier)),
    ):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url='http://test') as http:
            yield http
    container.unwire()
