"""
Shared fixtures: a throwaway SQLite database per test plus seeding helpers.
"""
from datetime import datetime, timedelta

import pytest

from blogcore.api.articles.service import ArticleService
from blogcore.api.categories.cache import CategoryCache
from blogcore.api.categories.service import CategoryService
from blogcore.db.models import Article, Category
from blogcore.db.session import (
    build_engine,
    build_sessionmaker,
    create_db_and_tables,
    dispose_engine,
)

T0 = datetime(2024, 1, 1, 12, 0, 0)


class FakeClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, delta):
        self.current = self.current + delta


@pytest.fixture
def fake_clock():
    return FakeClock


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await create_db_and_tables(eng)
    yield eng
    await dispose_engine(eng)


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def category_cache():
    return CategoryCache(ttl_seconds=300)


@pytest.fixture
def category_service(session, category_cache):
    return CategoryService(session, category_cache)


@pytest.fixture
def article_service(session, category_service):
    return ArticleService(session, category_service)


@pytest.fixture
def add_category(session):
    async def _add(slug, name_en=None, name_ar=None, **kw):
        row = Category(
            slug=slug,
            name_en=name_en or slug.title(),
            name_ar=name_ar or f"{slug}-ar",
            **kw,
        )
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row

    return _add


@pytest.fixture
def add_article(session):
    counter = {"n": 0}

    async def _add(**kw):
        counter["n"] += 1
        n = counter["n"]
        values = dict(
            slug=f"article-{n}",
            title_en=f"Article {n}",
            content_en=f"Body of article {n}",
            author_name="Layla Haddad",
            published=True,
            published_at=T0 + timedelta(hours=n),
            created_at=T0 + timedelta(hours=n),
        )
        values.update(kw)
        row = Article(**values)
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row

    return _add
