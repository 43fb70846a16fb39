import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from shopledger.config import Settings, get_settings
from shopledger.core.errors import setup_exception_handlers
from shopledger.database import create_db_engine, create_session_factory, init_db
from shopledger.routers import (
    auth_router,
    cash_router,
    customers_router,
    exchange_rate_router,
    expenses_router,
    health_router,
    products_router,
    reports_router,
    sales_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
        try:
            yield
        finally:
            engine.dispose()
            logger.info("%s stopped", settings.APP_NAME)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    if settings.AUTH_REQUIRED and not settings.SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; sessions will not survive a restart.")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET or secrets.token_urlsafe(32),
        session_cookie=settings.SESSION_COOKIE,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.ENVIRONMENT.lower() != "local",
    )
    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(customers_router)
    app.include_router(products_router)
    app.include_router(sales_router)
    app.include_router(cash_router)
    app.include_router(expenses_router)
    app.include_router(exchange_rate_router)
    app.include_router(reports_router)

    return app


__all__ = ["create_app"]
