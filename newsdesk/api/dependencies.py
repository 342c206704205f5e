import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..core.database import get_db
from ..core.rate_limiter import RateLimiter
from ..news.services.news_service import NewsService
from ..repositories.device_repository import DeviceRepository

_settings = get_settings()

interaction_limiter = RateLimiter(
    max_requests=_settings.interaction_rate_limit,
    window_seconds=_settings.interaction_rate_window_seconds,
)


def get_news_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> NewsService:
    return NewsService(db, settings)


def get_device_repository(db: Session = Depends(get_db)) -> DeviceRepository:
    return DeviceRepository(db)


async def require_admin_key(
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    if not settings.admin_api_key:
        raise HTTPException(status_code=403, detail="Admin endpoints are disabled")
    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.admin_api_key):
        raise HTTPException(status_code=401, detail="Invalid admin key")
