"""
Production FastAPI Application

HTTP API plus the expiry sweeper background task.
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
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info(f'🚀 [Seat Booking] Starting up (STATE_BACKEND={settings.STATE_BACKEND})...')

    # Setup OpenTelemetry tracing
    tracing = TracingConfig(service_name='seat-booking')
    tracing.setup()
    Logger.base.info('📊 [Seat Booking] OpenTelemetry tracing configured')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Seat Booking] Dependency injection wired')

    if settings.STATE_BACKEND == 'kvrocks':
        tracing.instrument_redis()

        # Initialize Kvrocks connection pool (fail-fast)
        client = await kvrocks_client.initialize()
        Logger.base.info('📡 [Seat Booking] Kvrocks initialized')

        await lua_script_executor.initialize(client=client)
        Logger.base.info('🔥 [Seat Booking] Lua scripts loaded')

    async with anyio.create_task_group() as tg:
        if settings.SWEEPER_ENABLED:
            tg.start_soon(container.expiry_sweeper().run_forever)
        else:
            Logger.base.info('⏭️  [Seat Booking] Expiry sweeper disabled (SWEEPER_ENABLED=false)')

        Logger.base.info('✅ [Seat Booking] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Seat Booking] Shutting down...')
        tg.cancel_scope.cancel()

    if settings.STATE_BACKEND == 'kvrocks':
        await kvrocks_client.disconnect()
        lua_script_executor.reset()
        Logger.base.info('📡 [Seat Booking] Kvrocks disconnected')

    # Shutdown tracing (flush remaining spans)
    tracing.shutdown()

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [Seat Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
