from datetime import timedelta

import pytest

from newsdesk.utils.date_utils import utcnow


@pytest.mark.asyncio
async def test_feed_returns_newest_first(async_client, make_article):
    older = make_article("Council approves new park", hours_ago=3)
    newer = make_article("Metro line opens to public", hours_ago=1)

    response = await async_client.get("/api/v1/news")

    assert response.status_code == 200
    data = response.json()
    assert [a["id"] for a in data["articles"]] == [newer.id, older.id]
    assert data["has_more"] is False
    assert data["last_id"] == older.id
    assert data["last_timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_feed_cursor_pages_through_equal_timestamps(async_client, make_article):
    created_at = utcnow() - timedelta(minutes=5)
    ids = [make_article(created_at=created_at).id for _ in range(3)]

    first = (await async_client.get("/api/v1/news", params={"limit": 2})).json()
    assert [a["id"] for a in first["articles"]] == [ids[2], ids[1]]
    assert first["has_more"] is True

    second = (await async_client.get("/api/v1/news", params={
        "limit": 2,
        "last_timestamp": first["last_timestamp"],
        "last_id": first["last_id"],
    })).json()
    assert [a["id"] for a in second["articles"]] == [ids[0]]
    assert second["has_more"] is False


@pytest.mark.asyncio
async def test_feed_accepts_camel_case_cursor(async_client, make_article):
    older = make_article("Council approves new park", hours_ago=3)
    newer = make_article("Metro line opens to public", hours_ago=1)

    first = (await async_client.get("/api/v1/news", params={"limit": 1})).json()
    assert [a["id"] for a in first["articles"]] == [newer.id]

    second = (await async_client.get("/api/v1/news", params={
        "limit": 1,
        "lastTimestamp": first["last_timestamp"],
        "lastId": first["last_id"],
    })).json()
    assert [a["id"] for a in second["articles"]] == [older.id]


@pytest.mark.asyncio
async def test_feed_filters_by_category_and_language(async_client, make_article):
    sports = make_article(category="Sports")
    make_article(category="Business")
    make_article(category="Sports", language="hi")

    data = (await async_client.get("/api/v1/news", params={"category": "Sports", "language": "en"})).json()
    assert [a["id"] for a in data["articles"]] == [sports.id]

    everything = (await async_client.get("/api/v1/news", params={"category": "All"})).json()
    assert len(everything["articles"]) == 3


@pytest.mark.asyncio
async def test_empty_feed(async_client):
    data = (await async_client.get("/api/v1/news")).json()
    assert data == {"articles": [], "last_timestamp": None, "last_id": None, "has_more": False}


@pytest.mark.asyncio
async def test_feed_limit_is_clamped(async_client, make_article, test_settings):
    test_settings.max_page_size = 2
    for _ in range(3):
        make_article()

    data = (await async_client.get("/api/v1/news", params={"limit": 100})).json()

    assert len(data["articles"]) == 2
    assert data["has_more"] is True


@pytest.mark.asyncio
async def test_trending_ranking(async_client, make_article):
    fresh = make_article("Fresh story without reactions", hours_ago=1)
    liked = make_article("Older story with some likes", hours_ago=20, likes=10, views=5)
    popular = make_article("Popular story from this morning", hours_ago=2, likes=20)
    make_article("Story from two days ago", hours_ago=30, likes=100)

    response = await async_client.get("/api/v1/news/trending")

    assert response.status_code == 200
    data = response.json()
    assert [a["id"] for a in data] == [popular.id, fresh.id, liked.id]
    assert data[0]["trending_score"] == pytest.approx(22 * 5 + 20 * 3, abs=0.1)
    assert data[2]["trending_score"] == pytest.approx(4 * 5 + 10 * 3 + 5, abs=0.1)


@pytest.mark.asyncio
async def test_breaking_lists_recent_breaking_stories(async_client, make_article):
    now = utcnow()
    current = make_article("Bridge collapses in Pune", is_breaking=True, breaking_at=now)
    make_article("Old breaking story", is_breaking=True, breaking_at=now - timedelta(hours=10))
    make_article("Ordinary story")

    data = (await async_client.get("/api/v1/news/breaking")).json()

    assert data["total"] == 1
    assert data["articles"][0]["id"] == current.id
    assert data["articles"][0]["is_breaking"] is True


@pytest.mark.asyncio
async def test_categories_include_counts(async_client, make_article):
    make_article(category="Sports")
    make_article(category="Sports")
    make_article(category="Entertainment")

    data = (await async_client.get("/api/v1/news/categories")).json()
    counts = {c["name"]: c["count"] for c in data["categories"]}

    assert [c["name"] for c in data["categories"]][:6] == [
        "India", "World", "Business", "Sports", "Health", "Technology",
    ]
    assert counts["Sports"] == 2
    assert counts["India"] == 0
    assert counts["Entertainment"] == 1
    assert data["total_categories"] == 7


@pytest.mark.asyncio
async def test_news_detail_includes_sources(async_client, make_article):
    article = make_article("Metro line opens to public")

    response = await async_client.get(f"/api/v1/news/{article.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Metro line opens to public"
    assert data["sources"] == [{"name": "Example News", "url": article.url}]


@pytest.mark.asyncio
async def test_news_detail_not_found(async_client):
    response = await async_client.get("/api/v1/news/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_like_counts_once_per_device(async_client, make_article):
    article = make_article()
    url = f"/api/v1/news/{article.id}/like"

    first = await async_client.post(url, json={"deviceId": "device-1"})
    again = await async_client.post(url, json={"device_id": "device-1"})
    other = await async_client.post(url, json={"deviceId": "device-2"})

    assert first.json() == {"success": True, "message": None}
    assert again.json() == {"success": False, "message": "Already liked"}
    assert other.json()["success"] is True
    assert first.headers["RateLimit-Limit"] == "300"

    detail = (await async_client.get(f"/api/v1/news/{article.id}")).json()
    assert detail["likes"] == 2
    assert detail["views"] == 0


@pytest.mark.asyncio
async def test_view_counts_once_per_device(async_client, make_article):
    article = make_article()
    url = f"/api/v1/news/{article.id}/view"

    assert (await async_client.post(url, json={"deviceId": "device-1"})).json()["success"] is True
    repeat = (await async_client.post(url, json={"deviceId": "device-1"})).json()

    assert repeat == {"success": False, "message": "Already viewed"}
    detail = (await async_client.get(f"/api/v1/news/{article.id}")).json()
    assert detail["views"] == 1


@pytest.mark.asyncio
async def test_interaction_requires_device_id(async_client, make_article):
    article = make_article()

    response = await async_client.post(f"/api/v1/news/{article.id}/like", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Device ID required"


@pytest.mark.asyncio
async def test_interaction_on_missing_article(async_client):
    response = await async_client.post("/api/v1/news/9999/view", json={"deviceId": "device-1"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_interactions_are_rate_limited(async_client, make_article, monkeypatch):
    from newsdesk.api.dependencies import interaction_limiter

    monkeypatch.setattr(interaction_limiter, "max_requests", 2)
    article = make_article()
    url = f"/api/v1/news/{article.id}/view"

    for device in ("device-1", "device-2"):
        assert (await async_client.post(url, json={"deviceId": device})).status_code == 200

    blocked = await async_client.post(url, json={"deviceId": "device-3"})

    assert blocked.status_code == 429
    assert int(blocked.headers["Retry-After"]) > 0
    assert blocked.headers["RateLimit-Remaining"] == "0"
