"""ASO_Scores - Difficulty and traffic of one keyword from a single search."""

from __future__ import annotations

import asyncio
import logging

from aso.keywords.extractor import KeywordExtractor
from aso.schemas import KeywordScores
from aso.scoring.difficulty import score_difficulty
from aso.scoring.traffic import score_traffic
from aso.stores.base import MarketplaceStore
from aso.utils.exceptions import NoDataError

logger = logging.getLogger(__name__)

SEARCH_SIZE = 100


async def score_keyword(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    keyword: str,
) -> KeywordScores:
    """Search *keyword* once and score difficulty and traffic concurrently."""
    keyword = keyword.lower()
    apps = await store.search(keyword, num=SEARCH_SIZE, full_detail=True)
    if not apps:
        raise NoDataError(f"no search results for '{keyword}'")

    difficulty, traffic = await asyncio.gather(
        score_difficulty(store, extractor, keyword, apps),
        score_traffic(store, keyword, apps),
    )
    return KeywordScores(keyword=keyword, difficulty=difficulty, traffic=traffic)
