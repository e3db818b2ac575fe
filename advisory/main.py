"""FastAPI application instance and startup hooks."""
from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from advisory import __version__
from advisory.core import get_logger, get_settings
from advisory.core.error_handlers import register_error_handlers
from advisory.core.logger import init_logging, shutdown_logging
from advisory.core.security import get_security_provider
from advisory.db.session import get_engine, get_sessionmaker
from advisory.middleware.auth import AuthMiddleware
from advisory.middleware.request_context import RequestContextMiddleware
from advisory.models import Base
from advisory.routers import (
    admin_router,
    auth_router,
    clients_router,
    employees_router,
    guests_router,
    health_router,
    investments_router,
    users_router,
)
from advisory.services.bootstrap import seed_reference_data

LOGGER = get_logger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the schema and reference data before serving requests."""

    settings = get_settings()
    init_logging(settings.logging)
    Base.metadata.create_all(get_engine())
    session = get_sessionmaker()()
    try:
        seed_reference_data(session, settings.auth)
    except Exception:  # pragma: no cover - fail fast on startup issues
        LOGGER.exception("Failed to seed reference data")
        raise
    finally:
        session.close()
    yield
    LOGGER.info("Shutting down")
    shutdown_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Advisory Platform", version=__version__, lifespan=lifespan)
    security_provider = get_security_provider()
    app.add_middleware(
        AuthMiddleware,
        security_provider=security_provider,
    )
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    for router in (
        auth_router,
        users_router,
        clients_router,
        employees_router,
        guests_router,
        investments_router,
        admin_router,
        health_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    LOGGER.info("FastAPI application initialised")
    return app


app = create_app()
