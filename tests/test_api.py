from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from blogcore.api.analytics.engine import AnalyticsEngine
from blogcore.api.categories.cache import CategoryCache
from blogcore.db.session import get_session
from blogcore.main import app


_MISSING = object()
STATE_KEYS = ("category_cache", "analytics")


@asynccontextmanager
async def serving(session_factory):
    """Wire the module-level app to the test database, then put everything back."""

    async def override_session():
        async with session_factory() as s:
            yield s

    saved_state = {key: getattr(app.state, key, _MISSING) for key in STATE_KEYS}
    saved_overrides = dict(app.dependency_overrides)

    # the lifespan does not run under ASGITransport
    app.dependency_overrides[get_session] = override_session
    app.state.category_cache = CategoryCache()
    app.state.analytics = AnalyticsEngine()
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.dependency_overrides.update(saved_overrides)
        for key, value in saved_state.items():
            if value is _MISSING:
                delattr(app.state, key)
            else:
                setattr(app.state, key, value)


@pytest.fixture
async def client(session_factory):
    async with serving(session_factory) as c:
        yield c


async def test_serving_restores_app_state(session_factory):
    outer_cache = CategoryCache()
    app.state.category_cache = outer_cache
    try:
        async with serving(session_factory):
            assert app.state.category_cache is not outer_cache
            assert get_session in app.dependency_overrides
        assert app.state.category_cache is outer_cache
        assert getattr(app.state, "analytics", None) is None
        assert get_session not in app.dependency_overrides
    finally:
        delattr(app.state, "category_cache")


async def test_health(client):
    assert (await client.get("/health")).json() == {"ok": True}
    assert (await client.get("/api/health/z")).json() == {"ok": True}


async def test_list_articles(client, add_article):
    await add_article(title_ar="عنوان")
    await add_article()

    res = await client.get("/api/articles", params={"language": "ar", "limit": 1})
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert body["has_next"] is True
    assert [a["id"] for a in body["articles"]] == [2]

    res = await client.get("/api/articles", params={"cursor": body["next_cursor"], "language": "ar"})
    assert [a["title"] for a in res.json()["articles"]] == ["عنوان"]


async def test_bad_category_id_is_a_400(client):
    res = await client.get("/api/articles", params={"category_id": "news"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["path"] == "/api/articles"


async def test_unknown_slug_is_a_404(client):
    res = await client.get("/api/articles/missing")
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


async def test_viewing_with_session_records_a_view(client, add_article):
    art = await add_article(slug="hello")
    res = await client.get("/api/articles/hello", params={"session_id": "abc"})
    assert res.status_code == 200
    assert res.json()["content"] == "Body of article 1"

    perf = (await client.get(f"/api/analytics/performance/{art.id}")).json()
    assert perf[0]["views"] == 1


async def test_article_admin_roundtrip(client):
    res = await client.post(
        "/api/articles",
        json={"slug": "new", "title_en": "New", "content_en": "Body", "author_name": "Sara"},
    )
    assert res.status_code == 201
    article_id = res.json()["id"]

    res = await client.put(f"/api/articles/{article_id}", json={"publish_now": True})
    assert res.json()["published"] is True

    assert (await client.get(f"/api/articles/id/{article_id}")).json()["slug"] == "new"
    assert (await client.delete(f"/api/articles/{article_id}")).status_code == 204
    assert (await client.get(f"/api/articles/id/{article_id}")).status_code == 404


async def test_search(client, add_article):
    await add_article(title_en="Ramadan recipes")
    res = await client.get("/api/articles/search", params={"q": "ramadan"})
    assert res.json()["total"] == 1


async def test_categories_are_cached_until_a_write(client, add_category):
    await add_category("news")
    await client.get("/api/categories")
    await client.get("/api/categories")
    assert (await client.get("/api/health/cache")).json()["hits"] == 1

    res = await client.post("/api/categories", json={"slug": "tech", "name_en": "Tech", "name_ar": "تقنية"})
    assert res.status_code == 201
    items = (await client.get("/api/categories", params={"language": "ar"})).json()["items"]
    assert [c["name"] for c in items] == ["news-ar", "تقنية"]


async def test_track_and_read_analytics(client, add_article):
    art = await add_article()
    res = await client.post(
        "/api/analytics/track",
        json={
            "session_id": "abc",
            "article_id": art.id,
            "action": "scroll",
            "timestamp": "2024-03-01T09:00:00Z",
            "metadata": {"time_spent": 90},
        },
    )
    assert res.status_code == 202
    assert res.json() == {"success": True}

    perf = (await client.get("/api/analytics/performance")).json()
    assert perf[0]["avg_time_spent"] == 90.0
    assert (await client.get("/api/analytics/trending")).json() == []

    insights = (await client.get("/api/analytics/insights/abc")).json()
    assert insights["reading_pattern"]["preferred_length"] == "short"

    recs = (await client.get("/api/analytics/recommendations/abc")).json()
    assert recs == [art.id]


async def test_unknown_action_gets_the_validation_envelope(client):
    res = await client.post(
        "/api/analytics/track", json={"session_id": "abc", "article_id": 1, "action": "teleport"}
    )
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0]["field"] == "body.action"


@pytest.mark.parametrize(
    "params", [{"limit": "ten"}, {"featured": "abc"}, {"offset": "-x"}]
)
async def test_unparseable_query_params_get_the_validation_envelope(client, params):
    res = await client.get("/api/articles", params=params)
    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["path"] == "/api/articles"
    assert "detail" not in body


async def test_malformed_article_body_gets_the_validation_envelope(client):
    res = await client.post("/api/articles", json={"slug": "no-title"})
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"
