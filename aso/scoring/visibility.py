"""ASO_Scores - App visibility: how well one app ranks today.

Unlike difficulty and traffic this is a plain sum, unbounded above: every
keyword the app ranks for adds its traffic-weighted rank score, and the
global and category charts add up to 100 and 10 points respectively.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from aso.schemas import (
    AppRecord,
    CollectionRank,
    CollectionScores,
    KeywordVisibility,
    VisibilityScore,
)
from aso.scoring import calc
from aso.scoring.traffic import score_traffic
from aso.stores.base import MarketplaceStore, find_rank

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 20
GLOBAL_WEIGHT = 100
CATEGORY_WEIGHT = 10


def rank_score(weight: float, list_size: int, rank: Optional[int]) -> float:
    """Weighted inverted rank score; 0 when the app is not ranked."""
    if rank is None:
        return 0.0
    return calc.round2(weight * calc.i_score(1, list_size, rank))


async def get_keyword_scores(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    app: AppRecord,
) -> dict[str, KeywordVisibility]:
    """Score every top keyword the app currently ranks for."""
    keywords = (await get_app_keywords(store, extractor, app))[:MAX_KEYWORDS]
    results = await asyncio.gather(*[
        store.search(kw, num=store.MAX_SEARCH, full_detail=False)
        for kw in keywords
    ])

    ranked: list[tuple[str, int, Sequence[AppRecord]]] = [
        (kw, rank, apps)
        for kw, apps in zip(keywords, results)
        if (rank := find_rank(apps, app.id)) is not None
    ]
    traffic = await asyncio.gather(*[
        score_traffic(store, kw, apps) for kw, _, apps in ranked
    ])

    return {
        kw: KeywordVisibility(
            traffic=stats.score,
            rank=rank,
            score=rank_score(stats.score, store.MAX_SEARCH, rank),
        )
        for (kw, rank, _), stats in zip(ranked, traffic)
    }


async def get_collection_scores(
    store: MarketplaceStore,
    app: AppRecord,
) -> CollectionScores:
    """Rank the app in the global chart and in its category chart."""
    category_query = store.get_collection_query(app)
    global_query = category_query.without_category()

    global_list, category_list = await asyncio.gather(
        store.list(global_query),
        store.list(category_query),
    )
    global_rank = find_rank(global_list, app.id)
    category_rank = find_rank(category_list, app.id)

    return CollectionScores(
        global_=CollectionRank(
            rank=global_rank,
            score=rank_score(GLOBAL_WEIGHT, store.MAX_LIST, global_rank),
        ),
        category=CollectionRank(
            rank=category_rank,
            score=rank_score(CATEGORY_WEIGHT, store.MAX_LIST, category_rank),
        ),
    )


async def score_visibility(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    app_id: str,
) -> VisibilityScore:
    """Return the visibility breakdown and score of the app *app_id*."""
    app = await store.app(str(app_id))

    keywords, collections = await asyncio.gather(
        get_keyword_scores(store, extractor, app),
        get_collection_scores(store, app),
    )
    score = calc.round2(
        sum(kw.score for kw in keywords.values())
        + collections.global_.score
        + collections.category.score
    )

    logger.info("Visibility for %s: %.2f (%d keywords)", app.id, score, len(keywords))
    return VisibilityScore(
        app_id=app.id,
        keywords=keywords,
        collections=collections,
        score=score,
    )
