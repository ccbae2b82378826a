"""ASO_Scores - Public entry points bound to one marketplace store."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from aso.config import AppConfig
from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from aso.schemas import (
    AppRecord,
    DifficultyScore,
    KeywordScores,
    Strategy,
    SuggestionResult,
    SuggestOptions,
    TrafficScore,
    VisibilityScore,
)
from aso.scoring.difficulty import score_difficulty
from aso.scoring.keyword import score_keyword
from aso.scoring.traffic import score_traffic
from aso.scoring.visibility import score_visibility
from aso.stores.base import MarketplaceStore
from aso.stores.registry import get_store
from aso.suggest.engine import suggest
from aso.suggest.strategies import Seed

logger = logging.getLogger(__name__)


class AsoService:
    """Keyword scores, visibility and suggestions for one marketplace."""

    def __init__(
        self,
        store: MarketplaceStore,
        extractor: Optional[KeywordExtractor] = None,
        suggestion_count: int = 30,
    ) -> None:
        self.store = store
        self.extractor = extractor or KeywordExtractor()
        self._suggestion_count = suggestion_count

    @classmethod
    def from_config(cls, config: AppConfig) -> AsoService:
        logger.info("Using %s store (country=%s)", config.store, config.country)
        return cls(get_store(config), suggestion_count=config.suggestion_count)

    async def __aenter__(self) -> AsoService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.store.aclose()

    async def scores(self, keyword: str) -> KeywordScores:
        return await score_keyword(self.store, self.extractor, keyword)

    async def difficulty(
        self, keyword: str, apps: Sequence[AppRecord],
    ) -> DifficultyScore:
        return await score_difficulty(self.store, self.extractor, keyword, apps)

    async def traffic(
        self, keyword: str, apps: Sequence[AppRecord],
    ) -> TrafficScore:
        return await score_traffic(self.store, keyword, apps)

    async def visibility(self, app_id: str) -> VisibilityScore:
        return await score_visibility(self.store, self.extractor, app_id)

    async def app_keywords(self, app: Union[AppRecord, str]) -> list[str]:
        return await get_app_keywords(self.store, self.extractor, app)

    async def suggest(
        self,
        seed: Seed,
        strategy: Union[str, Strategy] = Strategy.CATEGORY,
        options: Optional[SuggestOptions] = None,
    ) -> SuggestionResult:
        options = options or SuggestOptions(num=self._suggestion_count)
        return await suggest(self.store, self.extractor, seed, strategy, options)
