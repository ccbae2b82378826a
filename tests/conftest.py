"""Shared pytest fixtures for ASO_Scores tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from aso.keywords.extractor import KeywordExtractor
from aso.schemas import AppRecord, CollectionQuery
from aso.stores.base import average_popularity, prefix_suggest_score


def make_app(
    app_id: str,
    title: str = "Some App",
    description: Optional[str] = "",
    installs: int = 0,
    reviews: int = 0,
    rating: Optional[float] = None,
    updated: Any = None,
    genre_id: Optional[str] = "6007",
    free: bool = True,
) -> AppRecord:
    return AppRecord(
        id=app_id,
        title=title,
        description=description,
        installs=installs,
        reviews=reviews,
        rating=rating,
        updated=updated,
        genre_id=genre_id,
        free=free,
    )


def make_store(
    search: Optional[dict[str, list[AppRecord]]] = None,
    lists: Optional[dict[tuple[str, Optional[str]], list[AppRecord]]] = None,
    apps: Optional[dict[str, AppRecord]] = None,
    suggestions: Optional[dict[str, list[str]]] = None,
    similar: Optional[list[AppRecord]] = None,
) -> MagicMock:
    """Return a mock MarketplaceStore backed by in-memory data.

    Popularity (installs, ceiling 1,000,000), collection queries and the
    prefix suggest search use the real shared helpers.
    """
    search = search or {}
    lists = lists or {}
    apps = apps or {}
    suggestions = suggestions or {}

    store = MagicMock()
    store.MAX_SEARCH = 200
    store.MAX_LIST = 100

    async def _search(term: str, num: int = 10, full_detail: bool = False):
        return list(search.get(term, []))[:num]

    async def _list(query: CollectionQuery, full_detail: bool = False):
        return list(lists.get((query.collection, query.category), []))

    async def _app(app_id: str):
        return apps[str(app_id)]

    async def _suggest(term: str):
        return list(suggestions.get(term, []))

    store.search = AsyncMock(side_effect=_search)
    store.list = AsyncMock(side_effect=_list)
    store.app = AsyncMock(side_effect=_app)
    store.similar = AsyncMock(return_value=list(similar or []))
    store.suggest = AsyncMock(side_effect=_suggest)
    store.get_installs_score = MagicMock(
        side_effect=lambda records: average_popularity(
            [r.installs for r in records], 1_000_000,
        ),
    )
    async def _suggest_score(keyword: str):
        return await prefix_suggest_score(_suggest, keyword)

    store.get_suggest_score = AsyncMock(side_effect=_suggest_score)
    store.get_collection_query = MagicMock(
        side_effect=lambda app: CollectionQuery(
            collection="top_free" if app.free else "top_paid",
            category=app.genre_id,
            num=100,
        ),
    )
    store.aclose = AsyncMock()
    return store


@pytest.fixture
def extractor() -> KeywordExtractor:
    return KeywordExtractor()


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def todo_apps(now: datetime) -> list[AppRecord]:
    """Ten strong competitors for 'todo list'."""
    return [
        make_app(
            f"com.todo.app{i}",
            title=f"Todo List Planner {i}",
            description=(
                "Todo list for tasks and reminders. "
                "The simplest todo list to plan tasks."
            ),
            installs=1_000_000,
            rating=5,
            updated=now,
        )
        for i in range(10)
    ]
