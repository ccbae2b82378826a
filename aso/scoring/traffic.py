"""ASO_Scores - Keyword traffic: how much search volume a keyword likely has."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from aso.schemas import AppRecord, LengthStats, RankedStats, TrafficScore
from aso.scoring import calc
from aso.stores.base import MAX_KEYWORD_LENGTH, MarketplaceStore, find_rank
from aso.utils.exceptions import NoDataError

logger = logging.getLogger(__name__)

TOP_APPS = 10
MAX_AVG_RANK = 100
# count, average rank
RANKED_WEIGHTS = (5, 1)


def get_keyword_length(keyword: str) -> LengthStats:
    """Shorter keywords are assumed to carry more traffic."""
    length = len(keyword)
    return LengthStats(
        length=length,
        score=calc.i_score(1, MAX_KEYWORD_LENGTH, length),
    )


async def get_ranked_apps(
    store: MarketplaceStore,
    apps: Sequence[AppRecord],
) -> RankedStats:
    """Rank each app inside its own (collection, category) chart.

    Identical chart queries are fetched once.
    """
    app_queries = [store.get_collection_query(app) for app in apps]
    queries = list(dict.fromkeys(app_queries))
    lists = await asyncio.gather(*[store.list(query) for query in queries])
    charts = dict(zip(queries, lists))

    ranks = [
        rank
        for app, query in zip(apps, app_queries)
        if (rank := find_rank(charts[query], app.id)) is not None
    ]
    if not ranks:
        return RankedStats(count=0, score=1.0)

    avg_rank = sum(ranks) / len(ranks)
    count_score = calc.z_score(TOP_APPS, len(ranks))
    avg_rank_score = calc.i_score(1, MAX_AVG_RANK, avg_rank)
    return RankedStats(
        count=len(ranks),
        avg_rank=avg_rank,
        score=calc.aggregate(RANKED_WEIGHTS, [count_score, avg_rank_score]),
    )


async def get_top_apps(
    store: MarketplaceStore,
    apps: Sequence[AppRecord],
) -> list[AppRecord]:
    """Return the top results with full detail, fetching it when missing."""
    top = list(apps[:TOP_APPS])
    if top and not top[0].has_detail:
        return list(await asyncio.gather(*[store.app(app.id) for app in top]))
    return top


async def score_traffic(
    store: MarketplaceStore,
    keyword: str,
    apps: Sequence[AppRecord],
) -> TrafficScore:
    """Return the traffic breakdown and score of *keyword*.

    *apps* are the keyword's search results, best ranked first.
    """
    keyword = keyword.lower()
    top_apps = await get_top_apps(store, apps)
    if not top_apps:
        raise NoDataError(f"no search results for '{keyword}'")

    ranked, suggest = await asyncio.gather(
        get_ranked_apps(store, top_apps),
        store.get_suggest_score(keyword),
    )
    length = get_keyword_length(keyword)
    installs = store.get_installs_score(top_apps)

    score = calc.aggregate(TrafficScore.WEIGHTS, [
        suggest.score, length.score, installs.score, ranked.score,
    ])

    logger.info("Traffic for '%s': %.2f", keyword, score)
    return TrafficScore(
        suggest=suggest,
        length=length,
        installs=installs,
        ranked=ranked,
        score=score,
    )
