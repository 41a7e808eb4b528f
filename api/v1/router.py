# server/api/v1/router.py
from fastapi import APIRouter
from .endpoints import health, irrigation, weather, crops, soils, regional, farms

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(irrigation.router, prefix="/irrigation", tags=["irrigation"])
api_router.include_router(weather.router, prefix="/weather", tags=["weather"])
api_router.include_router(crops.router, prefix="/crops", tags=["crops"])
api_router.include_router(soils.router, prefix="/soil-types", tags=["soils"])
api_router.include_router(regional.router, tags=["regional"])
api_router.include_router(farms.router, tags=["farms"])
