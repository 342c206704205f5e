"""
News Sources Manager - builds the configured sources and fetches from all of them
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog

from .base import NewsSourceAdapter, RawArticle
from .news_api_adapter import NewsApiAdapter
from .rss_adapter import RSSFeedAdapter
from ....config import Settings
from ....exceptions import SourceFetchError

logger = structlog.get_logger(__name__)


class NewsSourceManager:
    """
    Owns the ordered list of source adapters used by the ingestion job.
    A failing source is logged and skipped so the rest of the run continues.
    """

    def __init__(self, settings: Settings, sources: Optional[Dict[str, NewsSourceAdapter]] = None):
        self.settings = settings
        self.sources = sources if sources is not None else self._initialize_sources()

    def _initialize_sources(self) -> Dict[str, NewsSourceAdapter]:
        sources: Dict[str, NewsSourceAdapter] = {}

        for feed in self.settings.rss_feeds:
            sources[f"rss:{feed.url}"] = RSSFeedAdapter(
                feed_url=feed.url,
                language=feed.language,
                name=feed.name,
                timeout=self.settings.source_timeout_seconds,
            )

        if self.settings.news_api_key:
            sources["newsapi"] = NewsApiAdapter(
                api_key=self.settings.news_api_key,
                api_url=self.settings.news_api_url,
                languages=self.settings.news_api_languages,
                timeout=self.settings.source_timeout_seconds,
            )
        else:
            logger.info("NewsAPI key not set, REST ingestion disabled")

        logger.info("Loaded news sources", count=len(sources))
        return sources

    def fetch_all_news(self) -> Tuple[List[RawArticle], Dict[str, Any]]:
        """
        Fetch from every source in configuration order.

        Returns:
            The fetched articles and a per-source report of counts or errors
        """
        all_articles: List[RawArticle] = []
        report: Dict[str, Any] = {}

        for source_key, adapter in self.sources.items():
            try:
                articles = adapter.fetch_news(self.settings.items_per_feed)
            except SourceFetchError as e:
                logger.error("Source fetch failed", source=source_key, error=str(e))
                report[source_key] = {"fetched": 0, "error": str(e)}
                continue
            except Exception as e:
                logger.error("Unexpected source failure", source=source_key, error=str(e), exc_info=e)
                report[source_key] = {"fetched": 0, "error": str(e)}
                continue

            all_articles.extend(articles)
            report[source_key] = {"fetched": len(articles)}

        logger.info("Fetched articles from sources", total=len(all_articles), sources=len(self.sources))
        return all_articles, report

    def get_available_sources(self) -> List[str]:
        return list(self.sources.keys())

    def health_check(self) -> Dict[str, Dict[str, Any]]:
        return {key: adapter.health_check() for key, adapter in self.sources.items()}
