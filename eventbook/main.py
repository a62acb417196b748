"""
EventBook - Main Application
Serves event creation, booking, cancellation and booking queries.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from eventbook.platform.app_factory import create_app
from eventbook.platform.config.di import cleanup, container, setup
from eventbook.platform.config.wire_modules import WIRE_MODULES
from eventbook.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [EventBook] Starting up...')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [EventBook] Dependency injection wired')

    # TODO: replace with migrations once the schema needs to evolve in place
    await container.database().create_tables()
    Logger.base.info('🗄️ [EventBook] Database tables ready')

    yield

    Logger.base.info('🛑 [EventBook] Shutting down...')
    await cleanup()
    container.unwire()
    Logger.base.info('👋 [EventBook] Shutdown complete')


app = create_app(lifespan=lifespan)
