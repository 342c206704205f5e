"""
Base class for news source adapters
Every source hands the pipeline the same RawArticle shape
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
import structlog

from ....exceptions import SourceFetchError

logger = structlog.get_logger(__name__)


@dataclass
class RawArticle:
    """Article as delivered by a source, before cleaning and classification"""
    title: str
    url: str
    source: str
    summary: str = ""
    language: str = "en"
    published_at: Optional[datetime] = None
    image_url: Optional[str] = None


class NewsSourceAdapter(ABC):
    """Base adapter for news sources"""

    def __init__(self, name: str, base_url: str, timeout: int = 15):
        self.name = name
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'Mozilla/5.0 (compatible; newsdesk/0.1; +https://github.com/newsdesk)'
        })

    @abstractmethod
    def fetch_news(self, limit: int = 10) -> List[RawArticle]:
        """Fetch news from source and return standardized format"""
        pass

    def get(self, url: str, **kwargs) -> requests.Response:
        """GET with the adapter timeout, raising SourceFetchError on any failure"""
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise SourceFetchError(self.name, str(e)) from e

    def health_check(self) -> Dict[str, Any]:
        try:
            articles = self.fetch_news(1)
        except SourceFetchError as e:
            return {"status": "unhealthy", "message": str(e)}

        if not articles:
            return {"status": "degraded", "message": "No articles returned"}
        return {"status": "healthy", "message": f"Latest: {articles[0].title[:80]}"}
