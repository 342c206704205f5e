"""
RSS feed adapter
"""

from datetime import datetime
from typing import List, Optional

import feedparser
import structlog

from .base import NewsSourceAdapter, RawArticle

logger = structlog.get_logger(__name__)


class RSSFeedAdapter(NewsSourceAdapter):
    """Adapter for a single RSS or Atom feed"""

    def __init__(self, feed_url: str, language: str = "en", name: Optional[str] = None, timeout: int = 15):
        super().__init__(name or feed_url, feed_url, timeout=timeout)
        self.feed_url = feed_url
        self.language = language
        self.display_name = name

    def fetch_news(self, limit: int = 10) -> List[RawArticle]:
        response = self.get(self.feed_url)
        feed = feedparser.parse(response.content)

        if feed.bozo:
            logger.warning("RSS feed parsed with issues", feed_url=self.feed_url, error=str(feed.bozo_exception))

        source_name = self.display_name or feed.feed.get("title") or "News"

        articles = []
        for entry in feed.entries[:limit]:
            title = (entry.get("title") or "").strip()
            link = (entry.get("link") or "").strip()
            if not title or not link:
                continue

            articles.append(RawArticle(
                title=title,
                url=link,
                source=source_name,
                summary=entry.get("summary") or entry.get("description") or "",
                language=self.language,
                published_at=self._published_at(entry),
                image_url=self._image_url(entry),
            ))

        logger.info("Fetched RSS feed", source=source_name, entries=len(feed.entries), articles=len(articles))
        return articles

    @staticmethod
    def _published_at(entry) -> Optional[datetime]:
        for key in ("published_parsed", "updated_parsed"):
            parsed = entry.get(key)
            if parsed:
                try:
                    return datetime(*parsed[:6])
                except (TypeError, ValueError):
                    continue
        return None

    @staticmethod
    def _image_url(entry) -> Optional[str]:
        for enclosure in entry.get("enclosures") or []:
            href = enclosure.get("href") or enclosure.get("url")
            if href and (enclosure.get("type") or "image").startswith("image"):
                return href

        for key in ("media_content", "media_thumbnail"):
            for media in entry.get(key) or []:
                if media.get("url"):
                    return media["url"]

        return None
