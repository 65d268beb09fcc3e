"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.logging.request_context import (
    REQUEST_ID_HEADER,
    bind_request_id,
    current_request_id,
    reset_request_id,
)
from src.platform.observability.tracing import TracingConfig
from src.service.ticketing.driving_adapter.http_controller.admin_controller import (
    router as admin_router,
)
from src.service.ticketing.driving_adapter.http_controller.auth_controller import (
    router as auth_router,
)
from src.service.ticketing.driving_adapter.http_controller.cart_controller import (
    router as cart_router,
)
from src.service.ticketing.driving_adapter.http_controller.client_controller import (
    router as client_router,
)
from src.service.ticketing.driving_adapter.http_controller.event_controller import (
    router as event_router,
)
from src.service.ticketing.driving_adapter.http_controller.payment_controller import (
    router as payment_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Event ticketing: inventory, carts, coupons and payments',
    service_name: str = settings.SERVICE_NAME,
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    tracing_config = TracingConfig(service_name=service_name)
    if tracing_config.enabled:
        tracing_config.instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    _register_request_id_middleware(app)
    register_exception_handlers(app)

    app.include_router(auth_router, prefix='/auth', tags=['auth'])
    app.include_router(client_router, prefix='/client', tags=['client'])
    app.include_router(cart_router, prefix='/cart', tags=['cart'])
    app.include_router(event_router, prefix='/events', tags=['event'])
    app.include_router(admin_router, prefix='/admin', tags=['admin'])
    app.include_router(payment_router, prefix='/payments', tags=['payment'])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    """Register health and metrics endpoints."""

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def _register_request_id_middleware(app: FastAPI) -> None:
    """Bind the caller's X-Request-ID (or a fresh uuid7) to every log line of the request."""

    @app.middleware('http')
    async def request_id_middleware(request: Request, call_next: Callable[..., Any]) -> Response:
        token = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = current_request_id() or ''
            return response
        finally:
            reset_request_id(token)
