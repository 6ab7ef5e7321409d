from fastapi import APIRouter

from .system_routes import router as system_router
from .weather_routes import router as weather_router

api_router = APIRouter()

# Forecasts + comparison (3 endpoints)
api_router.include_router(weather_router)

# Status, cache, health (3 endpoints)
api_router.include_router(system_router)
