"""Tests for suggestion strategies and frequency reduction."""

from __future__ import annotations

import random

import pytest

from aso.keywords.extractor import KeywordExtractor
from aso.schemas import AppRecord, Strategy, SuggestOptions
from aso.suggest.engine import get_suggestions, suggest
from aso.suggest.strategies import RESOLVERS, resolve_apps
from aso.utils.exceptions import InvalidInputError, InvalidStrategyError
from tests.conftest import make_app, make_store


@pytest.fixture
def fitness_apps() -> list[AppRecord]:
    return [
        make_app("a", title="Workout Tracker", description="Gym workout log"),
        make_app("b", title="Home Workout", description="Workout without gym"),
        make_app("c", title="Running Tracker", description="Run and track pace"),
        make_app("d", title="Yoga Daily", description="Yoga poses"),
    ]


class TestStrategyTable:
    def test_every_strategy_has_a_resolver(self):
        assert set(RESOLVERS) == set(Strategy)


class TestValidation:
    @pytest.mark.asyncio
    async def test_arbitrary_requires_list_before_any_call(
        self, extractor: KeywordExtractor,
    ):
        store = make_store()
        with pytest.raises(InvalidInputError):
            await suggest(store, extractor, "com.some.app", Strategy.ARBITRARY)
        assert store.mock_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", ["keywords", "search"])
    async def test_keyword_strategies_require_list(
        self, extractor: KeywordExtractor, strategy: str,
    ):
        store = make_store()
        with pytest.raises(InvalidInputError):
            await suggest(store, extractor, "fitness", strategy)
        assert store.mock_calls == []

    @pytest.mark.asyncio
    async def test_app_strategies_require_scalar(self, extractor: KeywordExtractor):
        store = make_store()
        with pytest.raises(InvalidInputError):
            await suggest(store, extractor, ["a", "b"], Strategy.SIMILAR)
        assert store.mock_calls == []

    @pytest.mark.asyncio
    async def test_unknown_strategy(self, extractor: KeywordExtractor):
        store = make_store()
        with pytest.raises(InvalidStrategyError):
            await suggest(store, extractor, "a", "telepathy")
        assert store.mock_calls == []


class TestResolvers:
    @pytest.mark.asyncio
    async def test_similar(self, extractor, fitness_apps):
        store = make_store(similar=fitness_apps)
        apps = await resolve_apps(store, extractor, "a", Strategy.SIMILAR)
        store.similar.assert_awaited_once_with("a")
        assert apps == fitness_apps

    @pytest.mark.asyncio
    async def test_category_excludes_seed(self, extractor, fitness_apps):
        seed = fitness_apps[0]
        store = make_store(
            apps={"a": seed},
            lists={("top_free", seed.genre_id): fitness_apps},
        )
        apps = await resolve_apps(store, extractor, "a", Strategy.CATEGORY)
        assert [app.id for app in apps] == ["b", "c", "d"]

    @pytest.mark.asyncio
    async def test_competition_searches_seed_keywords(self, extractor, fitness_apps):
        seed = fitness_apps[0]
        store = make_store(
            apps={"a": seed},
            search={
                "workout": [fitness_apps[0], fitness_apps[1]],
                "tracker": [fitness_apps[2], fitness_apps[0]],
            },
        )
        apps = await resolve_apps(store, extractor, "a", Strategy.COMPETITION)

        assert [app.id for app in apps] == ["b", "c"]
        searched = [call.args[0] for call in store.search.await_args_list]
        assert searched[:2] == ["workout", "tracker"]
        assert all(call.kwargs["num"] == 10 for call in store.search.await_args_list)

    @pytest.mark.asyncio
    async def test_arbitrary(self, extractor, fitness_apps):
        store = make_store(apps={app.id: app for app in fitness_apps})
        apps = await resolve_apps(store, extractor, ["c", "d"], Strategy.ARBITRARY)
        assert [app.id for app in apps] == ["c", "d"]

    @pytest.mark.asyncio
    async def test_keywords_union_dedupes(self, extractor, fitness_apps):
        store = make_store(search={
            "gym": fitness_apps[:2],
            "workout": fitness_apps[1:3],
        })
        apps = await resolve_apps(store, extractor, ["gym", "workout"], Strategy.KEYWORDS)
        assert [app.id for app in apps] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_search_uses_suggestion_keywords(self, extractor, fitness_apps):
        store = make_store(
            suggestions={"yoga": ["yoga poses", "yoga"]},
            search={"yoga": [fitness_apps[3]], "poses": [fitness_apps[3]]},
        )
        apps = await resolve_apps(store, extractor, ["yoga"], Strategy.SEARCH)

        searched = {call.args[0] for call in store.search.await_args_list}
        assert searched == {"yoga", "poses"}
        assert [app.id for app in apps] == ["d"]

    @pytest.mark.asyncio
    async def test_search_limits_suggestions_per_seed(self, extractor):
        store = make_store(suggestions={"x": [f"term{i}" for i in range(30)]})
        await resolve_apps(store, extractor, ["x"], Strategy.SEARCH)
        assert store.search.await_count == 15


class TestReduction:
    @pytest.mark.asyncio
    async def test_ranked_by_frequency(self, extractor, fitness_apps):
        result = await suggest(
            make_store(similar=fitness_apps), extractor, "z", Strategy.SIMILAR,
        )
        assert result.strategy is Strategy.SIMILAR
        assert result.keywords[0] == "workout"
        assert result.keywords[1] == "tracker"

    @pytest.mark.asyncio
    async def test_num_and_exclude(self, extractor, fitness_apps):
        options = SuggestOptions(num=2, exclude=["Workout"])
        result = await suggest(
            make_store(similar=fitness_apps), extractor, "z",
            Strategy.SIMILAR, options,
        )
        assert len(result.keywords) == 2
        assert "workout" not in result.keywords
        assert result.keywords[0] == "tracker"

    @pytest.mark.asyncio
    async def test_shuffle_keeps_top_set(self, extractor):
        apps = [
            make_app(str(i), title=title)
            for i, title in enumerate(
                ["alpha beta"] * 4 + ["alpha gamma"] * 3 + ["delta"] * 2
            )
        ]
        options = SuggestOptions(num=3)
        baseline = await get_suggestions(make_store(), extractor, apps, options)

        shuffled = list(apps)
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            again = await get_suggestions(make_store(), extractor, shuffled, options)
            assert set(again) == set(baseline)

        assert baseline == ["alpha", "beta", "gamma"]

    @pytest.mark.asyncio
    async def test_ties_keep_first_seen_order(self, extractor):
        apps = [
            make_app("1", title="Zebra Mango"),
            make_app("2", title="Mango Zebra"),
            make_app("3", title="Kiwi"),
        ]
        result = await get_suggestions(make_store(), extractor, apps, SuggestOptions())
        assert result == ["zebra", "mango", "kiwi"]

        reordered = [apps[1], apps[0], apps[2]]
        result = await get_suggestions(make_store(), extractor, reordered, SuggestOptions())
        assert result == ["mango", "zebra", "kiwi"]
