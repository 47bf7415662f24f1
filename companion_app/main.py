import sys
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from loguru import logger
from companion_app.core.config import settings
from companion_app.core.exceptions import (
    CompanionAppError,
    companion_app_error_handler,
    request_validation_error_handler,
)
from companion_app.core.llm_client import init_chat_llm
from companion_app.api.router import api_router
from companion_app.core.database import init_db, dispose_db
from companion_app.core.redis_client import init_redis_client, close_redis_client


def configure_logging():
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles startup and shutdown events for the FastAPI application.
    Initializes and closes connections to external services.
    """
    configure_logging()
    logger.info("Companion service starting up...")

    # The chat model is optional at startup; chat requests fail cleanly without it
    init_chat_llm()

    # The database is not optional: init_db raises once its retries run out
    await init_db()
    logger.info("Database startup initialization complete.")

    await init_redis_client()

    yield

    logger.info("Companion service shutting down...")
    await close_redis_client()
    await dispose_db()


def create_app() -> FastAPI:
    app=FastAPI(
        title="AI Companion",
        description="Create, edit and chat with AI companions.",
        version="1.0.0",
        lifespan=lifespan
    )
    app.add_exception_handler(CompanionAppError, companion_app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(api_router,prefix="/api")
    return app


app=create_app()
