import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from barulogix.auth.providers import get_identity_provider
from barulogix.core.errors import install_error_handlers
from barulogix.core.logging import RequestIdMiddleware, setup_logging
from barulogix.core.settings import Settings, settings as default_settings
from barulogix.db import Database

from barulogix.api.auth import router as auth_router
from barulogix.api.admin import router as admin_router
from barulogix.api.conductors import router as conductors_router
from barulogix.api.deliveries import router as deliveries_router
from barulogix.api.reports import router as reports_router

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, identity_transport: httpx.BaseTransport | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    database = Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_DB:
            database.create_all()
        logger.info("%s started env=%s auth_provider=%s", settings.APP_NAME, settings.ENV, settings.AUTH_PROVIDER)
        yield
        database.dispose()

    app = FastAPI(title=settings.APP_NAME, version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.identity_provider = get_identity_provider(settings, transport=identity_transport)

    app.add_middleware(RequestIdMiddleware)
    install_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(conductors_router)
    app.include_router(deliveries_router)
    app.include_router(reports_router)

    @app.get("/health")
    def health():
        return {
            "ok": True,
            "service": "barulogix",
            "env": settings.ENV,
            "version": VERSION,
            "auth_provider": settings.AUTH_PROVIDER,
        }

    return app


app = create_app()
