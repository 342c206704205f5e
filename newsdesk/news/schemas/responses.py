"""News API response schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ArticleSourceResponse(BaseModel):
    """An outlet that reported the story"""
    model_config = ConfigDict(from_attributes=True)

    name: str
    url: str


class NewsArticleResponse(BaseModel):
    """Article as shown in feeds"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    source: str
    category: str
    language: str
    summary: Optional[str] = None
    image_url: Optional[str] = None
    is_breaking: bool = False
    source_count: int = 1
    likes: int = 0
    views: int = 0
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class NewsArticleDetailResponse(NewsArticleResponse):
    """Single article with every outlet merged into it"""
    sources: List[ArticleSourceResponse] = []


class TrendingArticleResponse(NewsArticleResponse):
    trending_score: float


class NewsListResponse(BaseModel):
    """
    One page of the feed. Pass last_timestamp and last_id back to get the next page.
    Both are null when the page is empty.
    """
    articles: List[NewsArticleResponse]
    last_timestamp: Optional[str] = None
    last_id: Optional[int] = None
    has_more: bool = False


class BreakingNewsResponse(BaseModel):
    articles: List[NewsArticleResponse]
    total: int


class NewsCategoryResponse(BaseModel):
    """Response for news categories endpoint"""
    name: str
    count: int


class NewsCategoriesListResponse(BaseModel):
    """Response for news categories list endpoint"""
    categories: List[NewsCategoryResponse]
    total_categories: int


class InteractionResponse(BaseModel):
    success: bool
    message: Optional[str] = None


class DeviceRegistrationResponse(BaseModel):
    success: bool
