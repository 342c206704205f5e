from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from ..core.database import Base
from ..utils.date_utils import utcnow


class InteractionKind:
    LIKE = "like"
    VIEW = "view"


class ArticleInteraction(Base):
    __tablename__ = "article_interactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("news_articles.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(255), nullable=False)
    kind = Column(String(10), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("article_id", "device_id", "kind", name="uq_article_interaction"),
    )
