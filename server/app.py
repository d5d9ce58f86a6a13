"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.config import Config
from server.dependencies import close_dispatcher
from server.errors import register_exception_handlers
from server.middleware import RequestIDMiddleware
from server.routes import digest, health, news, quora, reddit
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    missing = Config().missing_credentials()
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    await close_dispatcher()
    logger.info("FastAPI server shutting down")


def create_app(config: Config | None = None) -> FastAPI:
    """Factory function to create FastAPI application."""
    config = config or Config()

    app = FastAPI(
        title="Content Aggregation API",
        description="Discussion and news search across Reddit, Quora and NewsAPI",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(reddit.router)
    app.include_router(quora.router)
    app.include_router(news.router)
    app.include_router(digest.router)

    return app
