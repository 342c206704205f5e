from datetime import datetime
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_news_service, interaction_limiter
from ....news.schemas.requests import InteractionRequest
from ....news.schemas.responses import (
    BreakingNewsResponse,
    InteractionResponse,
    NewsArticleDetailResponse,
    NewsCategoriesListResponse,
    NewsListResponse,
    TrendingArticleResponse,
)
from ....news.services.news_service import NewsService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=NewsListResponse)
async def get_news_feed(
    limit: Optional[int] = Query(None, ge=1, description="Number of articles, clamped to the configured maximum"),
    category: Optional[str] = Query(None, description="Category filter, 'All' for every category"),
    language: Optional[str] = Query(None, description="Language code filter"),
    last_timestamp: Optional[datetime] = Query(None, description="Cursor: last_timestamp of the previous page"),
    last_id: Optional[int] = Query(None, description="Cursor: last_id of the previous page"),
    last_timestamp_camel: Optional[datetime] = Query(None, alias="lastTimestamp", include_in_schema=False),
    last_id_camel: Optional[int] = Query(None, alias="lastId", include_in_schema=False),
    news_service: NewsService = Depends(get_news_service)
):
    """Newest-first news feed with cursor pagination. lastTimestamp/lastId are accepted for older clients."""
    return news_service.get_news_feed(
        limit=limit,
        category=category,
        language=language,
        last_timestamp=last_timestamp or last_timestamp_camel,
        last_id=last_id if last_id is not None else last_id_camel,
    )


@router.get("/trending", response_model=List[TrendingArticleResponse])
async def get_trending_news(
    language: Optional[str] = Query(None, description="Language code filter"),
    news_service: NewsService = Depends(get_news_service)
):
    """Recent articles ranked by freshness, likes and views"""
    return news_service.get_trending(language=language)


@router.get("/breaking", response_model=BreakingNewsResponse)
async def get_breaking_news(
    limit: Optional[int] = Query(None, ge=1),
    language: Optional[str] = Query(None),
    news_service: NewsService = Depends(get_news_service)
):
    return news_service.get_breaking(limit=limit, language=language)


@router.get("/categories", response_model=NewsCategoriesListResponse)
async def get_news_categories(news_service: NewsService = Depends(get_news_service)):
    """Configured categories with article counts"""
    return news_service.get_news_categories()


@router.get("/{news_id}", response_model=NewsArticleDetailResponse)
async def get_news_detail(
    news_id: int,
    news_service: NewsService = Depends(get_news_service)
):
    result = news_service.get_news_detail(news_id)
    if not result:
        raise HTTPException(status_code=404, detail="News article not found")
    return result


@router.post("/{news_id}/like", response_model=InteractionResponse, dependencies=[Depends(interaction_limiter)])
async def like_news(
    news_id: int,
    request: InteractionRequest,
    news_service: NewsService = Depends(get_news_service)
):
    """Count one like per device"""
    if not request.device_id or not request.device_id.strip():
        raise HTTPException(status_code=400, detail="Device ID required")

    result = news_service.like(news_id, request.device_id.strip())
    if result is None:
        raise HTTPException(status_code=404, detail="News article not found")

    logger.info("Like recorded", news_id=news_id, counted=result.success)
    return result


@router.post("/{news_id}/view", response_model=InteractionResponse, dependencies=[Depends(interaction_limiter)])
async def view_news(
    news_id: int,
    request: InteractionRequest,
    news_service: NewsService = Depends(get_news_service)
):
    """Count one view per device"""
    if not request.device_id or not request.device_id.strip():
        raise HTTPException(status_code=400, detail="Device ID required")

    result = news_service.view(news_id, request.device_id.strip())
    if result is None:
        raise HTTPException(status_code=404, detail="News article not found")
    return result
