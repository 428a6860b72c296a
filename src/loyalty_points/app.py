from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from loyalty_points.core.settings import settings
from loyalty_points.db.session import create_schema, get_engine
from .api.routes import api_router
from .core.logging import configure_logging
from .services.loyalty.factory import build_loyalty_service


APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    sql_backend = settings.loyalty_store_backend == "sql"
    if sql_backend:
        await create_schema(get_engine())
        logger.info("Loyalty store backend ready", backend="sql")
    else:
        logger.info("Loyalty store backend ready", backend="memory")

    try:
        yield
    finally:
        if sql_backend:
            await get_engine().dispose()


def create_app() -> FastAPI:
    """Application factory for the loyalty points service."""
    configure_logging(
        service_name="loyalty-points",
        environment=settings.environment,
        version=APP_VERSION,
    )

    app = FastAPI(
        title="Loyalty Points API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.loyalty_service = build_loyalty_service(settings)

    app.include_router(api_router)

    @app.get("/healthz", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": APP_VERSION,
        }

    return app
