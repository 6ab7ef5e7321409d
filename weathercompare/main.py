from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from prometheus_fastapi_instrumentator import Instrumentator

from .api.routes import api_router
from .api.services.forecast_service import build_forecast_service
from .api.services.provider_factory import ProviderClientFactory
from .config.logging_config import setup_logging
from .config.settings import Settings, get_settings


def create_application(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service, clients = build_forecast_service(settings)
        app.state.forecast_service = service
        logger.info(
            f"{settings.app_name} {settings.version} started "
            f"({settings.environment}, demo_mode={settings.demo_mode})"
        )
        try:
            yield
        finally:
            await service.close()
            await ProviderClientFactory.close_all(clients)
            logger.info(f"{settings.app_name} stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    if settings.metrics_enabled:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    @app.get("/")
    async def root():
        return {
            "message": f"{settings.app_name} API",
            "docs": f"{settings.api_prefix}/docs",
        }

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        json_logs=settings.json_logs,
    )
    uvicorn.run(
        "weathercompare.main:create_application",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
