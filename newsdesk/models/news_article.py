from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.date_utils import utcnow


class NewsArticle(Base):
    """
    One story in the feed. Near-duplicate reports of the same story from other
    outlets are merged into it as additional ArticleSource rows.
    """
    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(String(500), nullable=False)
    url = Column(String(1000), nullable=False, unique=True)
    source = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    language = Column(String(10), nullable=False, default="en", index=True)

    summary = Column(Text)
    image_url = Column(String(1000))
    title_tokens = Column(JSON)  # Normalized title tokens used for near-duplicate matching

    # Breaking news state
    is_breaking = Column(Boolean, nullable=False, default=False)
    breaking_at = Column(DateTime)
    notified_at = Column(DateTime)

    # Counters
    source_count = Column(Integer, nullable=False, default=1)
    likes = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)

    published_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    sources = relationship(
        "ArticleSource",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleSource.id",
    )

    __table_args__ = (
        Index("idx_news_articles_created_at_id", "created_at", "id"),
    )

    def __repr__(self):
        return f"<NewsArticle(id={self.id}, title='{self.title[:50]}...', source='{self.source}')>"


class ArticleSource(Base):
    """Every outlet URL that reported an article, the primary one included."""
    __tablename__ = "article_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("news_articles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    url = Column(String(1000), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    article = relationship("NewsArticle", back_populates="sources")
