"""Service status, cache control and liveness."""

from fastapi import APIRouter, Depends
from pydantic import Field

from ...config.settings import Settings
from ...core.models import CamelModel, SourceKind
from ..dependencies import get_app_settings, get_forecast_service
from ..services.forecast_service import ForecastComparisonService

router = APIRouter(tags=["System"])


class StatusResponse(CamelModel):
    demo_mode: bool = Field(..., description="Mock data instead of APIs")
    version: str
    environment: str
    sources: list[SourceKind]


class CacheClearResponse(CamelModel):
    success: bool
    message: str


@router.get("/status", response_model=StatusResponse)
async def get_status(settings: Settings = Depends(get_app_settings)):
    """
    **Response:**
    ```json
    {"demoMode": false, "version": "1.0.0", "environment": "production",
     "sources": ["google_weather", "azure_maps", "foreca", "open_meteo"]}
    ```
    """
    return StatusResponse(
        demo_mode=settings.demo_mode,
        version=settings.version,
        environment=settings.environment,
        sources=settings.enabled_sources,
    )


@router.post("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(
    service: ForecastComparisonService = Depends(get_forecast_service),
):
    removed = await service.clear_cache()
    return CacheClearResponse(
        success=True, message=f"Cache cleared ({removed} entries removed)"
    )


@router.get("/health")
async def health():
    return {"status": "ok"}
