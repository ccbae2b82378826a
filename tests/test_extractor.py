"""Tests for keyword extraction and app keyword merging."""

from __future__ import annotations

import pytest

from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from tests.conftest import make_app, make_store


class TestKeywordExtractor:
    def test_lowercase_and_ranked_by_frequency(self, extractor: KeywordExtractor):
        kws = extractor.extract("Photo editor. Edit every PHOTO with filters, photo!")
        assert kws[0] == "photo"
        assert all(kw == kw.lower() for kw in kws)

    def test_stop_words_and_single_chars_removed(self, extractor: KeywordExtractor):
        kws = extractor.extract("I want a b c the and of recipes")
        assert "the" not in kws
        assert "b" not in kws
        assert "recipes" in kws

    def test_repeated_phrases_boosted(self, extractor: KeywordExtractor):
        text = (
            "Budget planner for money. Budget planner with charts. "
            "Money money money savings."
        )
        kws = extractor.extract(text)
        assert kws[0] == "budget planner"

    def test_contractions_stripped(self, extractor: KeywordExtractor):
        kws = extractor.extract("It's the app you'll love, don't miss it")
        assert not any("'" in kw for kw in kws)

    def test_empty_text(self, extractor: KeywordExtractor):
        assert extractor.extract("") == []
        assert extractor.extract("the and of") == []

    def test_deterministic(self, extractor: KeywordExtractor):
        text = "weather radar forecast weather alerts radar maps"
        assert extractor.extract(text) == extractor.extract(text)

    def test_equal_counts_keep_text_order(self, extractor: KeywordExtractor):
        assert extractor.extract("mango kiwi lemon") == ["mango", "kiwi", "lemon"]
        assert extractor.extract("lemon mango kiwi lemon") == ["lemon", "mango", "kiwi"]

    def test_maximum(self):
        text = " ".join(f"word{i}" for i in range(50))
        assert len(KeywordExtractor(maximum=5).extract(text)) == 5


class TestGetAppKeywords:
    @pytest.mark.asyncio
    async def test_title_keywords_first(self, extractor: KeywordExtractor):
        app = make_app(
            "1",
            title="Sleep Sounds",
            description="Relax with rain noise. Rain noise helps sleep.",
        )
        kws = await get_app_keywords(make_store(), extractor, app)

        title_kws = extractor.extract("Sleep Sounds")
        assert kws[: len(title_kws)] == title_kws
        assert kws.count("sleep") == 1
        assert "rain noise" in kws

    @pytest.mark.asyncio
    async def test_resolves_app_id(self, extractor: KeywordExtractor):
        app = make_app("42", title="Chess Trainer", description="Chess puzzles")
        store = make_store(apps={"42": app})

        kws = await get_app_keywords(store, extractor, "42")

        store.app.assert_awaited_once_with("42")
        assert "chess" in kws
