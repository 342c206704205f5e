"""
News Ingestion Service
One pass of the background pipeline:
1. Fetch from every configured source
2. Clean the title and trim the summary
3. Classify the category and detect breaking news
4. Match against recent articles (Jaccard over title tokens)
5. Merge into the matching story or store a new one
6. Push newly breaking stories to subscribed devices
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, List, Optional

import structlog
from sqlalchemy.orm import Session

from ...config import Settings
from ...core.database import SessionLocal
from ...exceptions import NotificationError
from ...models.news_article import NewsArticle
from ...repositories.device_repository import DeviceRepository
from ...repositories.news_repository import NewsRepository
from ...utils.date_utils import utcnow
from .classifier import BreakingNewsDetector, build_classifier
from .content_cleaner import ContentCleaner
from .deduplicator import NearDuplicateIndex, normalize_title
from .notifier import PushNotifier, build_notifier
from .sources.base import RawArticle
from .sources.manager import NewsSourceManager

logger = structlog.get_logger(__name__)

STORED = "stored"
MERGED = "merged"
DUPLICATE = "duplicates"
SKIPPED = "skipped"


@dataclass
class ArticleOutcome:
    status: str
    article: Optional[NewsArticle] = None
    tokens: FrozenSet[str] = frozenset()
    notify: bool = False


class IngestionService:
    """Fetch, clean, classify, deduplicate and store news articles"""

    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], Session] = SessionLocal,
        source_manager: Optional[NewsSourceManager] = None,
        classifier=None,
        breaking_detector: Optional[BreakingNewsDetector] = None,
        notifier: Optional[PushNotifier] = None,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.source_manager = source_manager or NewsSourceManager(settings)
        self.classifier = classifier or build_classifier(settings)
        self.breaking_detector = breaking_detector or BreakingNewsDetector(
            settings.breaking_keywords, settings.breaking_source_threshold
        )
        self.notifier = notifier

    def run(self) -> Dict[str, Any]:
        """
        Run one ingestion pass. Never raises: failures are logged and reported in the stats.

        Returns:
            Dict with pipeline statistics
        """
        pipeline_start = datetime.now()
        logger.info("Starting ingestion run")

        stats: Dict[str, Any] = {
            "pipeline_start": pipeline_start.isoformat(),
            "fetched": 0,
            STORED: 0,
            MERGED: 0,
            DUPLICATE: 0,
            SKIPPED: 0,
            "errors": 0,
            "notified": 0,
            "sources": {},
            "success": True,
            "error_messages": [],
        }

        try:
            raw_articles, source_report = self.source_manager.fetch_all_news()
            stats["fetched"] = len(raw_articles)
            stats["sources"] = source_report

            to_notify = self._store_articles(raw_articles, stats)
            if to_notify:
                stats["notified"] = self._notify(to_notify)

        except Exception as e:
            logger.error("Ingestion run failed", error=str(e), exc_info=e)
            stats["success"] = False
            stats["error_messages"].append(str(e))

        stats["total_processing_time"] = (datetime.now() - pipeline_start).total_seconds()
        logger.info(
            "Ingestion run finished",
            fetched=stats["fetched"],
            stored=stats[STORED],
            merged=stats[MERGED],
            duplicates=stats[DUPLICATE],
            errors=stats["errors"],
            notified=stats["notified"],
            seconds=round(stats["total_processing_time"], 2),
        )
        return stats

    def _store_articles(self, raw_articles: List[RawArticle], stats: Dict[str, Any]) -> List[int]:
        to_notify: List[int] = []
        db = self.session_factory()
        try:
            index = NearDuplicateIndex.load(
                db,
                threshold=self.settings.dedup_similarity_threshold,
                window_hours=self.settings.dedup_window_hours,
                max_size=self.settings.dedup_window_size,
            )
            repository = NewsRepository(db)

            for raw in raw_articles:
                try:
                    outcome = self._process_article(repository, index, raw)
                    db.commit()
                except Exception as e:
                    db.rollback()
                    logger.error("Failed to store article", title=(raw.title or "")[:80], url=raw.url, error=str(e))
                    stats["errors"] += 1
                    continue

                stats[outcome.status] += 1
                if outcome.status == STORED:
                    index.add(outcome.article.id, outcome.article.language, outcome.tokens, outcome.article.created_at)
                if outcome.notify and outcome.article.id not in to_notify:
                    to_notify.append(outcome.article.id)
        finally:
            db.close()
        return to_notify

    def _process_article(self, repository: NewsRepository, index: NearDuplicateIndex, raw: RawArticle) -> ArticleOutcome:
        title = ContentCleaner.clean_title(raw.title, raw.source)
        url = (raw.url or "").strip()
        if not title or not url:
            return ArticleOutcome(SKIPPED)

        if repository.url_exists(url) or repository.title_exists(title):
            return ArticleOutcome(DUPLICATE)

        summary = ContentCleaner.build_summary(raw.summary, self.settings.summary_max_chars)
        tokens = normalize_title(title)
        breaking = self.breaking_detector.is_breaking(title, summary)

        match = index.find_match(tokens, raw.language)
        if match is not None:
            existing = repository.get_by_id(match.article_id)
            if existing is not None:
                logger.info("Merging near-duplicate", article_id=existing.id, score=round(match.score, 3), source=raw.source)
                return self._merge(repository, existing, raw, url, summary, breaking)

        category = self.classifier.classify(title, summary)
        now = utcnow()
        article = NewsArticle(
            title=title,
            url=url,
            source=raw.source or "News",
            category=category,
            language=raw.language,
            summary=summary,
            image_url=raw.image_url or None,
            title_tokens=sorted(tokens),
            is_breaking=breaking,
            breaking_at=now if breaking else None,
            source_count=1,
            likes=0,
            views=0,
            published_at=raw.published_at,
            created_at=now,
            updated_at=now,
        )
        repository.add_article(article)
        return ArticleOutcome(STORED, article, tokens, notify=breaking)

    def _merge(
        self,
        repository: NewsRepository,
        article: NewsArticle,
        raw: RawArticle,
        url: str,
        summary: str,
        breaking: bool,
    ) -> ArticleOutcome:
        repository.add_source(article, raw.source or "News", url)
        article.source_count = repository.distinct_source_names(article.id)

        if not article.summary and summary:
            article.summary = summary
        if not article.image_url and raw.image_url:
            article.image_url = raw.image_url

        now = utcnow()
        if not article.is_breaking and (breaking or self.breaking_detector.reaches_source_threshold(article.source_count)):
            article.is_breaking = True
            article.breaking_at = now
        article.updated_at = now

        return ArticleOutcome(MERGED, article, notify=article.is_breaking and article.notified_at is None)

    def _notify(self, article_ids: List[int]) -> int:
        if self.notifier is None:
            return 0

        notified = 0
        db = self.session_factory()
        try:
            repository = NewsRepository(db)
            for article_id in article_ids:
                article = repository.get_by_id(article_id)
                if article is None or article.notified_at is not None:
                    continue
                try:
                    delivered = self.notifier.notify_breaking(db, article)
                except NotificationError as e:
                    logger.error("Breaking news push failed", article_id=article_id, error=str(e))
                    db.rollback()
                    continue
                if delivered is None:
                    logger.info("Push disabled, breaking news not sent", article_id=article_id)
                    break
                # Stamped even when no device was subscribed
                article.notified_at = utcnow()
                db.commit()
                if delivered:
                    notified += 1
        finally:
            db.close()
        return notified

    def pipeline_health(self, include_sources: bool = False) -> Dict[str, Any]:
        db = self.session_factory()
        try:
            repository = NewsRepository(db)
            health: Dict[str, Any] = {
                "total_articles": repository.count(),
                "breaking_articles": repository.count(is_breaking=True),
                "articles_by_category": repository.count_by_category(),
                "registered_devices": DeviceRepository(db).count(),
                "sources": self.source_manager.get_available_sources(),
            }
            if include_sources:
                source_health = self.source_manager.health_check()
                health["source_health"] = source_health
                healthy = sum(1 for status in source_health.values() if status.get("status") == "healthy")
                health["overall_health"] = "healthy" if healthy == len(source_health) else "needs_attention"
            return health
        finally:
            db.close()


def create_ingestion_service(settings: Settings) -> IngestionService:
    return IngestionService(settings, notifier=build_notifier(settings))
