"""
Order Query Service application.

Serves the order graph through the versioned read endpoints. Startup
creates missing tables and, when ``SEED_SAMPLE_DATA`` is set, inserts the
sample orders.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.health import router as health_router
from .api.v1.orders import router as orders_router
from .api.v1.simple_orders import router as simple_orders_router
from .core.database import database_manager
from .core.init_db import seed_sample_data
from .core.setting import get_settings
from .middleware.error import setup_order_query_error_handling
from .middleware.logging import setup_request_logging
from .utils.logging import setup_order_query_logging as setup_logging

settings = get_settings()

logger = setup_logging(
    "order_query_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENVIRONMENT.lower() in ("production", "staging"),
)


def _elapsed_ms(since: float) -> int:
    return int((time.perf_counter() - since) * 1000)


@asynccontextmanager
async def lifespan(app: FastAPI):
    started = time.perf_counter()
    logger.info(
        "Starting order query service",
        extra={
            "environment": settings.ENVIRONMENT,
            "service_version": settings.APP_VERSION,
            "database_backend": database_manager.async_engine.url.get_backend_name(),
        },
    )

    try:
        await database_manager.create_tables()
        seeded = 0
        if settings.SEED_SAMPLE_DATA:
            async with database_manager.async_session_maker() as session:
                seeded = await seed_sample_data(session)
    except Exception as e:
        logger.error(
            "Order store initialization failed",
            exc_info=True,
            extra={"startup_duration_ms": _elapsed_ms(started), "error_type": type(e).__name__},
        )
        raise

    logger.info(
        "Order query service started",
        extra={"startup_duration_ms": _elapsed_ms(started), "seeded_orders": seeded},
    )

    yield

    await database_manager.close()
    logger.info("Order query service stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )
    # Outermost middleware, so the correlation ID exists before any handler runs
    setup_request_logging(app)
    setup_order_query_error_handling(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(orders_router, tags=["Order Queries"])
    app.include_router(simple_orders_router, tags=["Order Queries"])
    logger.info(
        "API routes configured",
        extra={"routes": ["/health", "/api/{version}/orders", "/api/{version}/simple-orders"]},
    )
    return app


app = create_app()
