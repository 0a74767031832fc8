import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import config
from db import Database
from middleware.security_headers import SecurityHeadersMiddleware
from services.payment_gateway import PaymentGateway, StripePaymentGateway
from utils.error_handler import register_exception_handlers
from web.admin_router import admin_router
from web.catalog_router import catalog_router
from web.order_router import order_router
from web.price_router import price_router
from web.upload_router import upload_router
from web.webhook_router import webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the storage handle and payment gateway at startup, release them at shutdown."""
    owns_db = app.state.db is None
    owns_gateway = app.state.payment_gateway is None

    if owns_db:
        app.state.db = Database(config.DB_URL, echo=config.DB_ECHO)
    if config.DB_AUTO_CREATE:
        await app.state.db.create_all()
    if owns_gateway:
        app.state.payment_gateway = StripePaymentGateway()
    logger.info(f"[Startup] Shop API ready ({config.RUNTIME_ENVIRONMENT.value})")

    yield

    logger.warning("Shutting down..")
    if owns_gateway:
        await app.state.payment_gateway.close()
        app.state.payment_gateway = None
    if owns_db:
        await app.state.db.dispose()
        app.state.db = None
    logger.warning("Bye!")


def create_app(database: Database | None = None, payment_gateway: PaymentGateway | None = None) -> FastAPI:
    """
    Build the HTTP application.

    Resources passed in are used as-is and left open; anything omitted is
    created by the lifespan handler from config.
    """
    app = FastAPI(title="Custom Apparel Shop API", lifespan=lifespan)
    app.state.db = database
    app.state.payment_gateway = payment_gateway

    if config.SECURITY_HEADERS_ENABLED:
        app.add_middleware(SecurityHeadersMiddleware)
        logger.info("[Startup] Security headers middleware enabled")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    app.include_router(catalog_router)
    app.include_router(price_router)
    app.include_router(order_router)
    app.include_router(upload_router)
    app.include_router(admin_router)
    app.include_router(webhook_router)

    upload_dir = Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container monitoring."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app
