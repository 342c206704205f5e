from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..models.interaction import ArticleInteraction, InteractionKind
from ..models.news_article import ArticleSource, NewsArticle


class NewsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, article_id: int, with_sources: bool = False) -> Optional[NewsArticle]:
        query = self.db.query(NewsArticle)
        if with_sources:
            query = query.options(selectinload(NewsArticle.sources))
        return query.filter(NewsArticle.id == article_id).first()

    def url_exists(self, url: str) -> bool:
        return self.db.query(ArticleSource.id).filter(ArticleSource.url == url).first() is not None \
            or self.db.query(NewsArticle.id).filter(NewsArticle.url == url).first() is not None

    def title_exists(self, title: str) -> bool:
        return self.db.query(NewsArticle.id).filter(NewsArticle.title == title).first() is not None

    def add_article(self, article: NewsArticle) -> NewsArticle:
        article.sources.append(ArticleSource(name=article.source, url=article.url))
        self.db.add(article)
        self.db.flush()
        return article

    def add_source(self, article: NewsArticle, name: str, url: str) -> ArticleSource:
        source = ArticleSource(name=name, url=url)
        article.sources.append(source)
        self.db.flush()
        return source

    def distinct_source_names(self, article_id: int) -> int:
        return self.db.query(func.count(func.distinct(ArticleSource.name))).filter(
            ArticleSource.article_id == article_id
        ).scalar() or 0

    def get_feed_page(
        self,
        limit: int,
        category: Optional[str] = None,
        language: Optional[str] = None,
        before: Optional[datetime] = None,
        before_id: Optional[int] = None,
    ) -> List[NewsArticle]:
        """Newest first by ingestion time. Returns up to limit + 1 rows so callers can tell if more exist."""
        query = self.db.query(NewsArticle)

        if category:
            query = query.filter(NewsArticle.category == category)
        if language:
            query = query.filter(NewsArticle.language == language)

        if before is not None:
            if before_id is not None:
                query = query.filter(or_(
                    NewsArticle.created_at < before,
                    and_(NewsArticle.created_at == before, NewsArticle.id < before_id)
                ))
            else:
                query = query.filter(NewsArticle.created_at < before)

        return query.order_by(
            NewsArticle.created_at.desc(), NewsArticle.id.desc()
        ).limit(limit + 1).all()

    def get_created_since(self, since: datetime, language: Optional[str] = None) -> List[NewsArticle]:
        query = self.db.query(NewsArticle).filter(NewsArticle.created_at > since)
        if language:
            query = query.filter(NewsArticle.language == language)
        return query.all()

    def get_breaking_since(self, since: datetime, limit: int, language: Optional[str] = None) -> List[NewsArticle]:
        query = self.db.query(NewsArticle).filter(
            NewsArticle.is_breaking.is_(True),
            NewsArticle.breaking_at >= since
        )
        if language:
            query = query.filter(NewsArticle.language == language)
        return query.order_by(NewsArticle.breaking_at.desc(), NewsArticle.id.desc()).limit(limit).all()

    def count_by_category(self) -> Dict[str, int]:
        rows = self.db.query(NewsArticle.category, func.count(NewsArticle.id)).group_by(NewsArticle.category).all()
        return {category: count for category, count in rows}

    def count(self, **filters) -> int:
        query = self.db.query(func.count(NewsArticle.id))
        for field, value in filters.items():
            query = query.filter(getattr(NewsArticle, field) == value)
        return query.scalar() or 0

    def record_interaction(self, article_id: int, device_id: str, kind: str) -> bool:
        """
        Record a like or view once per device and bump the matching counter.
        Returns False when this device already interacted.
        """
        already = self.db.query(ArticleInteraction.id).filter(
            ArticleInteraction.article_id == article_id,
            ArticleInteraction.device_id == device_id,
            ArticleInteraction.kind == kind,
        ).first()
        if already:
            return False

        counter = NewsArticle.likes if kind == InteractionKind.LIKE else NewsArticle.views
        try:
            self.db.add(ArticleInteraction(article_id=article_id, device_id=device_id, kind=kind))
            self.db.execute(
                update(NewsArticle)
                .where(NewsArticle.id == article_id)
                .values({counter.key: counter + 1})
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except IntegrityError:
            # A concurrent request from the same device won the insert
            self.db.rollback()
            return False
        return True
