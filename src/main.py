"""
Production FastAPI Application

granian --interface asgi src.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, engine_manager
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.driving_adapter.background.maintenance_loop import (
    MaintenanceLoop,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Concert Ticketing] Starting up...')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Concert Ticketing] Dependency injection wired')

    await create_db_and_tables()

    async with anyio.create_task_group() as tg:
        if settings.MAINTENANCE_ENABLED:
            maintenance_loop = MaintenanceLoop(
                database=container.database(),
                payment_gateway=container.payment_gateway(),
                settlement_reconciler=container.settlement_reconciler(),
                ticket_issuer=container.ticket_issuer(),
                interval_seconds=settings.MAINTENANCE_INTERVAL_SECONDS,
            )
            await maintenance_loop.start(task_group=tg)

        Logger.base.info('✅ [Concert Ticketing] Ready to serve requests')
        yield

        Logger.base.info('🛑 [Concert Ticketing] Shutting down...')
        tg.cancel_scope.cancel()

    await engine_manager.dispose()
    container.unwire()
    Logger.base.info('👋 [Concert Ticketing] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
