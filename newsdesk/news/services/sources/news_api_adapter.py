"""
NewsAPI REST adapter
Pulls top headlines for each configured language
"""

from datetime import datetime
from typing import List, Optional

import structlog

from .base import NewsSourceAdapter, RawArticle
from ....exceptions import SourceFetchError
from ....utils.date_utils import to_naive_utc

logger = structlog.get_logger(__name__)

REMOVED_PLACEHOLDER = "[Removed]"
# NewsAPI rejects larger pages
MAX_PAGE_SIZE = 100


class NewsApiAdapter(NewsSourceAdapter):

    def __init__(self, api_key: str, api_url: str, languages: List[str], timeout: int = 15):
        super().__init__("NewsAPI", api_url, timeout=timeout)
        self.api_key = api_key
        self.api_url = api_url
        self.languages = languages or ["en"]

    def fetch_news(self, limit: int = 20) -> List[RawArticle]:
        articles = []
        for language in self.languages:
            articles.extend(self._fetch_language(language, max(1, min(limit, MAX_PAGE_SIZE))))
        return articles

    def _fetch_language(self, language: str, page_size: int) -> List[RawArticle]:
        response = self.get(self.api_url, params={
            "apiKey": self.api_key,
            "language": language,
            "pageSize": page_size,
        })
        payload = response.json()

        if payload.get("status") != "ok":
            raise SourceFetchError(self.name, payload.get("message") or "Unexpected response")

        articles = []
        for item in payload.get("articles", []):
            title = (item.get("title") or "").strip()
            url = (item.get("url") or "").strip()
            if not title or not url or title == REMOVED_PLACEHOLDER:
                continue

            articles.append(RawArticle(
                title=title,
                url=url,
                source=(item.get("source") or {}).get("name") or self.name,
                summary=item.get("description") or item.get("content") or "",
                language=language,
                published_at=self._parse_date(item.get("publishedAt")),
                image_url=item.get("urlToImage"),
            ))

        logger.info("Fetched NewsAPI headlines", language=language, articles=len(articles))
        return articles

    @staticmethod
    def _parse_date(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return to_naive_utc(parsed)
