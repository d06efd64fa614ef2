import json
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from src.infra.config.settings import settings
from src.infra.config.redis import close_redis
from src.infra.database import get_record_store
from src.core.logger.logger import logger
from src.core.dependencies import close_shared_clients
from src.api.router import health, webapp, nbmon
from src.api.middleware.logging.request_logging import RequestLoggingMiddleware
from src.core.exceptions.handler import ServiceError, GlobalErrorHandler


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(json.dumps({
        "message": "Starting Realm Hunter API",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }))

    record_store = get_record_store()
    try:
        await record_store.ensure_schema()
    except Exception as e:
        # Catalog and effectiveness endpoints still work without the record store
        logger.error(f"Failed to initialize database on startup: {str(e)}")

    yield

    logger.info(json.dumps({
        "message": "Shutting down Realm Hunter API",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }))
    await close_shared_clients()
    await close_redis()
    await record_store.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Realm Hunter web app backend.

## Services
- **Web App**: membership tiers, claim/deposit eligibility, currency claims and deposits
- **NBMon**: type effectiveness, genus data and Genesis hatch randomization
        """,
        version=settings.APP_VERSION,
        docs_url="/",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
        max_age=600,  # 10 minutes
    )

    # Request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Add centralized error handlers
    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(webapp.router, prefix="/api/v1")
    app.include_router(nbmon.router, prefix="/api/v1")

    return app
