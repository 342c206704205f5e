from .news_repository import NewsRepository
from .device_repository import DeviceRepository

__all__ = ["NewsRepository", "DeviceRepository"]
