import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from newsdesk.config import Settings
from newsdesk.utils.date_utils import utcnow


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        rss_feeds=[],
        news_api_key=None,
        push_enabled=False,
        ai_classification_enabled=False,
        ingest_enabled=False,
        admin_api_key="test-admin-key",
    )


@pytest.fixture
def session_factory():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from newsdesk.core.database import Base
    from newsdesk import models  # noqa: F401

    # One shared in-memory SQLite connection so every session sees the same data
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield TestingSessionLocal

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_article(test_db):
    from newsdesk.models import ArticleSource, NewsArticle
    from newsdesk.news.services.deduplicator import normalize_title

    counter = {"n": 0}

    def _make(title=None, hours_ago=0.0, **fields):
        counter["n"] += 1
        n = counter["n"]
        title = title or f"Test headline number {n}"
        created_at = fields.pop("created_at", utcnow() - timedelta(hours=hours_ago))
        url = fields.pop("url", f"https://example.com/articles/{n}")
        article = NewsArticle(
            title=title,
            url=url,
            source=fields.pop("source", "Example News"),
            category=fields.pop("category", "India"),
            language=fields.pop("language", "en"),
            summary=fields.pop("summary", "Summary text"),
            title_tokens=sorted(normalize_title(title)),
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        article.sources.append(ArticleSource(name=article.source, url=url))
        test_db.add(article)
        test_db.commit()
        test_db.refresh(article)
        return article

    return _make


@pytest.fixture
async def async_client(test_db, test_settings):
    from httpx import AsyncClient, ASGITransport
    from newsdesk.main import app
    from newsdesk.config import get_settings
    from newsdesk.core.database import get_db
    from newsdesk.api.dependencies import interaction_limiter

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    interaction_limiter.reset()

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.notify_breaking = MagicMock(return_value=1)
    return notifier
