"""
Breaking news push notifications over Firebase Cloud Messaging
"""

from typing import List, Optional

import structlog
from firebase_admin import messaging
from sqlalchemy.orm import Session

from ...config import Settings
from ...core.firebase import initialize_firebase
from ...exceptions import NotificationError
from ...models.news_article import NewsArticle
from ...repositories.device_repository import DeviceRepository

logger = structlog.get_logger(__name__)

# FCM accepts at most 500 tokens per multicast
MULTICAST_BATCH_SIZE = 500

STALE_TOKEN_ERRORS = (messaging.UnregisteredError, messaging.SenderIdMismatchError)


class PushNotifier:

    def __init__(self, settings: Settings, app=None):
        self.settings = settings
        self.app = app
        self._initialized = app is not None

    @property
    def enabled(self) -> bool:
        if not self.settings.push_enabled:
            return False
        if not self._initialized:
            self.app = initialize_firebase(self.settings)
            self._initialized = True
        return self.app is not None

    def notify_breaking(self, db: Session, article: NewsArticle) -> Optional[int]:
        """
        Push a breaking story to every device subscribed to its category.

        Returns:
            Number of devices the message was delivered to, or None when push is disabled
        """
        if not self.enabled:
            return None

        repository = DeviceRepository(db)
        devices = repository.find_subscribers(article.category, article.language)
        tokens = [device.token for device in devices]
        if not tokens:
            return 0

        delivered = 0
        stale: List[str] = []
        for start in range(0, len(tokens), MULTICAST_BATCH_SIZE):
            batch = tokens[start:start + MULTICAST_BATCH_SIZE]
            try:
                response = messaging.send_each_for_multicast(self._build_message(article, batch), app=self.app)
            except Exception as e:
                raise NotificationError(f"FCM multicast failed: {e}") from e

            delivered += response.success_count
            for token, result in zip(batch, response.responses):
                if not result.success and isinstance(result.exception, STALE_TOKEN_ERRORS):
                    stale.append(token)

        if stale:
            removed = repository.delete_tokens(stale)
            logger.info("Removed stale device tokens", count=removed)

        logger.info("Breaking news pushed", article_id=article.id, devices=len(tokens), delivered=delivered)
        return delivered

    @staticmethod
    def _build_message(article: NewsArticle, tokens: List[str]) -> messaging.MulticastMessage:
        return messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(
                title=f"Breaking: {article.title}"[:200],
                body=(article.summary or article.source or "")[:240],
                image=article.image_url or None,
            ),
            data={
                "article_id": str(article.id),
                "category": article.category,
                "url": article.url,
            },
        )


def build_notifier(settings: Settings) -> Optional[PushNotifier]:
    if not settings.push_enabled:
        return None
    return PushNotifier(settings)
