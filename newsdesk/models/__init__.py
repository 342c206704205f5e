from .news_article import NewsArticle, ArticleSource
from .interaction import ArticleInteraction, InteractionKind
from .device import Device

__all__ = ["NewsArticle", "ArticleSource", "ArticleInteraction", "InteractionKind", "Device"]
