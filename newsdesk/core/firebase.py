import os
from typing import Optional

import firebase_admin
import structlog
from firebase_admin import credentials

from ..config import Settings

logger = structlog.get_logger(__name__)

_firebase_app = None


def _load_credentials(settings: Settings) -> credentials.Certificate:
    if settings.firebase_project_id and settings.firebase_client_email and settings.firebase_private_key:
        return credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "client_email": settings.firebase_client_email,
            # Env files usually carry the PEM with literal \n sequences
            "private_key": settings.firebase_private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        })

    if settings.firebase_service_account_path and os.path.exists(settings.firebase_service_account_path):
        return credentials.Certificate(settings.firebase_service_account_path)

    raise ValueError("Firebase credentials are not configured")


def initialize_firebase(settings: Settings) -> Optional[firebase_admin.App]:
    """Initialize the Firebase Admin app once. Returns None when push cannot be used."""
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app

    if not settings.firebase_configured:
        logger.warning("Firebase credentials missing, push notifications disabled")
        return None

    try:
        cred = _load_credentials(settings)
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
        _firebase_app = firebase_admin.initialize_app(cred, options)
        logger.info("Firebase initialized", project_id=settings.firebase_project_id)
    except Exception as e:
        logger.error("Firebase initialization failed", error=str(e))
        return None
    return _firebase_app
