from sqlalchemy import Column, String, DateTime, JSON

from ..core.database import Base
from ..utils.date_utils import utcnow


class Device(Base):
    __tablename__ = "devices"

    token = Column(String(512), primary_key=True)
    categories = Column(JSON, nullable=False, default=list)  # Empty list means every category
    platform = Column(String(50), nullable=False, default="web")
    language = Column(String(10))
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def wants(self, category: str) -> bool:
        return not self.categories or category in self.categories
