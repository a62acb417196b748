"""
Builds the ASGI app.

Production (`eventbook.main`) and the test suite (`test_main`) share this wiring
and differ only in their lifespan.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from eventbook.platform.config.core_setting import settings
from eventbook.platform.exception.exception_handlers import register_exception_handlers
from eventbook.service.booking.driving_adapter.http_controller.booking_controller import (
    router as booking_router,
)
from eventbook.service.booking.driving_adapter.http_controller.event_controller import (
    router as event_router,
)


Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[Any]]

# (router, prefix, tag)
API_ROUTERS: tuple[tuple[APIRouter, str, str], ...] = (
    (event_router, '/api/event', 'event'),
    (booking_router, '/api/booking', 'booking'),
)


def create_app(
    *,
    lifespan: Lifespan,
    title_suffix: str = '',
    description: str = 'Event booking ledger',
) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME + title_suffix,
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    for router, prefix, tag in API_ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])
    app.include_router(_ops_router())

    return app


def _ops_router() -> APIRouter:
    """Docs redirect, health check and the Prometheus scrape target."""
    ops = APIRouter(tags=['ops'])

    @ops.get('/', include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(url='/docs')

    @ops.get('/health')
    async def health_check() -> dict[str, str]:
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}

    @ops.get('/metrics')
    async def metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return ops
