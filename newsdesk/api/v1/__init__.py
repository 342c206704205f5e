from fastapi import APIRouter

from .endpoints import admin, devices, health, news

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(news.router, prefix="/news", tags=["news"])
api_router.include_router(devices.router, tags=["devices"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
