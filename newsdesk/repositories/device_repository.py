from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.device import Device


class DeviceRepository:
    def __init__(self, db: Session):
        self.db = db

    def upsert(self, token: str, categories: List[str], platform: str, language: Optional[str] = None) -> Device:
        device = self.db.get(Device, token)
        if device is None:
            device = Device(token=token)
            self.db.add(device)

        device.categories = list(categories)
        device.platform = platform
        device.language = language
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(device)
        return device

    def get(self, token: str) -> Optional[Device]:
        return self.db.get(Device, token)

    def delete(self, token: str) -> bool:
        device = self.get(token)
        if device:
            self.db.delete(device)
            self.db.commit()
            return True
        return False

    def delete_tokens(self, tokens: Iterable[str]) -> int:
        tokens = list(tokens)
        if not tokens:
            return 0
        deleted = self.db.query(Device).filter(Device.token.in_(tokens)).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def find_subscribers(self, category: str, language: Optional[str] = None) -> List[Device]:
        """Devices subscribed to the category. Category filtering happens in Python since it lives in a JSON list."""
        query = self.db.query(Device)
        if language:
            query = query.filter((Device.language.is_(None)) | (Device.language == language))
        return [device for device in query.all() if device.wants(category)]

    def count(self) -> int:
        return self.db.query(func.count(Device.token)).scalar() or 0
