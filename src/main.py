"""
Production FastAPI Application

HTTP API plus the payment expiration reaper running as a background task.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from granian import Granian
from granian.constants import Interfaces

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.ticketing.driving_adapter.background.payment_expiration_reaper import (
    PaymentExpirationReaper,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Joki Events] Starting up...')

    tracing = TracingConfig(service_name=settings.SERVICE_NAME)
    if tracing.enabled:
        tracing.setup()
        Logger.base.info('📊 [Joki Events] OpenTelemetry tracing configured')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Joki Events] Dependency injection wired')

    database = container.database()
    if tracing.enabled:
        tracing.instrument_sqlalchemy(engine=database.engine)
    await database.create_tables()
    Logger.base.info('🗄️  [Joki Events] Database ready')

    async with anyio.create_task_group() as tg:
        if settings.REAPER_INTERVAL_SECONDS > 0:
            reaper = PaymentExpirationReaper(
                uow_factory=container.unit_of_work,
                interval_seconds=settings.REAPER_INTERVAL_SECONDS,
            )
            await reaper.start(task_group=tg)

        Logger.base.info('✅ [Joki Events] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Joki Events] Shutting down...')
        tg.cancel_scope.cancel()

    await database.dispose()
    Logger.base.info('🗄️  [Joki Events] Database engine disposed')

    # Shutdown tracing (flush remaining spans)
    tracing.shutdown()

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [Joki Events] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')


def run() -> None:
    """Serve the app with granian, same as `granian src.main:app --interface asgi`."""
    Granian(
        'src.main:app',
        address=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        interface=Interfaces.ASGI,
    ).serve()


if __name__ == '__main__':
    run()
