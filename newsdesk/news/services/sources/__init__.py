from .base import NewsSourceAdapter, RawArticle
from .manager import NewsSourceManager
from .news_api_adapter import NewsApiAdapter
from .rss_adapter import RSSFeedAdapter

__all__ = ["NewsSourceAdapter", "RawArticle", "NewsSourceManager", "NewsApiAdapter", "RSSFeedAdapter"]
