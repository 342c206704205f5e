"""
News Service for API endpoints
Feed pagination, trending ranking, breaking list and like/view counters
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from ...config import Settings
from ...models.interaction import InteractionKind
from ...models.news_article import NewsArticle
from ...repositories.news_repository import NewsRepository
from ...utils.date_utils import isoformat_utc, to_naive_utc, utcnow
from ..schemas.responses import (
    BreakingNewsResponse,
    InteractionResponse,
    NewsArticleDetailResponse,
    NewsArticleResponse,
    NewsCategoriesListResponse,
    NewsCategoryResponse,
    NewsListResponse,
    TrendingArticleResponse,
)

ALL_CATEGORIES = "All"


class NewsService:
    """News reads and per-device interactions"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repository = NewsRepository(db)

    def get_news_feed(
        self,
        limit: Optional[int] = None,
        category: Optional[str] = None,
        language: Optional[str] = None,
        last_timestamp: Optional[datetime] = None,
        last_id: Optional[int] = None,
    ) -> NewsListResponse:
        """
        Newest-first feed with cursor pagination on (created_at, id).
        "All" or an empty category means no category filter.
        """
        limit = self._clamp_limit(limit)
        if category == ALL_CATEGORIES:
            category = None

        rows = self.repository.get_feed_page(
            limit=limit,
            category=category or None,
            language=language or None,
            before=to_naive_utc(last_timestamp),
            before_id=last_id,
        )
        has_more = len(rows) > limit
        articles = rows[:limit]

        response = NewsListResponse(
            articles=[NewsArticleResponse.model_validate(a) for a in articles],
            has_more=has_more,
        )
        if articles:
            response.last_timestamp = isoformat_utc(articles[-1].created_at)
            response.last_id = articles[-1].id
        return response

    def get_trending(self, language: Optional[str] = None) -> List[TrendingArticleResponse]:
        """
        Articles from the trending window ranked by
        freshness_hours * 5 + likes * 3 + views, highest first.
        """
        now = utcnow()
        window = self.settings.trending_window_hours
        candidates = self.repository.get_created_since(now - timedelta(hours=window), language=language)

        scored = [
            (self.trending_score(article, now), article)
            for article in candidates
        ]
        scored.sort(key=lambda pair: (pair[0], pair[1].created_at, pair[1].id), reverse=True)

        return [
            TrendingArticleResponse(
                **NewsArticleResponse.model_validate(article).model_dump(),
                trending_score=round(score, 3),
            )
            for score, article in scored[:self.settings.trending_limit]
        ]

    def trending_score(self, article: NewsArticle, now: Optional[datetime] = None) -> float:
        now = now or utcnow()
        age_hours = (now - article.created_at).total_seconds() / 3600 if article.created_at else 0.0
        freshness = max(self.settings.trending_window_hours - age_hours, 0)
        return (
            freshness * self.settings.trending_freshness_weight
            + (article.likes or 0) * self.settings.trending_like_weight
            + (article.views or 0) * self.settings.trending_view_weight
        )

    def get_breaking(self, limit: Optional[int] = None, language: Optional[str] = None) -> BreakingNewsResponse:
        since = utcnow() - timedelta(hours=self.settings.breaking_ttl_hours)
        articles = self.repository.get_breaking_since(since, self._clamp_limit(limit), language=language)
        return BreakingNewsResponse(
            articles=[NewsArticleResponse.model_validate(a) for a in articles],
            total=len(articles),
        )

    def get_news_categories(self) -> NewsCategoriesListResponse:
        counts = self.repository.count_by_category()
        names = list(self.settings.categories)
        names.extend(sorted(name for name in counts if name not in names))

        categories = [NewsCategoryResponse(name=name, count=counts.get(name, 0)) for name in names]
        return NewsCategoriesListResponse(categories=categories, total_categories=len(categories))

    def get_news_detail(self, news_id: int) -> Optional[NewsArticleDetailResponse]:
        article = self.repository.get_by_id(news_id, with_sources=True)
        if not article:
            return None
        return NewsArticleDetailResponse.model_validate(article)

    def like(self, news_id: int, device_id: str) -> Optional[InteractionResponse]:
        return self._interact(news_id, device_id, InteractionKind.LIKE, "Already liked")

    def view(self, news_id: int, device_id: str) -> Optional[InteractionResponse]:
        return self._interact(news_id, device_id, InteractionKind.VIEW, "Already viewed")

    def _interact(self, news_id: int, device_id: str, kind: str, repeat_message: str) -> Optional[InteractionResponse]:
        if self.repository.get_by_id(news_id) is None:
            return None

        if self.repository.record_interaction(news_id, device_id, kind):
            return InteractionResponse(success=True)
        return InteractionResponse(success=False, message=repeat_message)

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if not limit or limit < 1:
            return self.settings.default_page_size
        return min(limit, self.settings.max_page_size)
