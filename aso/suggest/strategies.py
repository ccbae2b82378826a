"""ASO_Scores - Candidate app resolution for each suggestion strategy.

Every :class:`Strategy` member maps to exactly one resolver; seeds are
validated before any marketplace call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, Union

from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from aso.schemas import AppRecord, Strategy
from aso.stores.base import MarketplaceStore, without_app
from aso.utils.exceptions import InvalidInputError, InvalidStrategyError

logger = logging.getLogger(__name__)

Seed = Union[str, int, Sequence[Union[str, int]]]
Resolver = Callable[
    [MarketplaceStore, KeywordExtractor, Seed], Awaitable[list[AppRecord]],
]

KEYWORD_SEARCH_SIZE = 10
COMPETITION_KEYWORDS = 10
SUGGESTIONS_PER_SEED = 15

LIST_SEEDS = frozenset({Strategy.ARBITRARY, Strategy.KEYWORDS, Strategy.SEARCH})


def parse_strategy(value: Union[str, Strategy]) -> Strategy:
    try:
        return Strategy(value)
    except ValueError:
        raise InvalidStrategyError(
            f"invalid suggestion strategy '{value}'",
        ) from None


def _is_list(seed: object) -> bool:
    return isinstance(seed, (list, tuple))


def validate_seed(strategy: Strategy, seed: Seed) -> None:
    """Fail on a seed of the wrong shape for *strategy*."""
    if strategy in LIST_SEEDS:
        if not _is_list(seed):
            raise InvalidInputError(
                f"strategy '{strategy.value}' requires a list seed",
            )
    elif _is_list(seed) or seed is None or seed == "":
        raise InvalidInputError(
            f"strategy '{strategy.value}' requires a single app id",
        )


def _unique(apps: Sequence[AppRecord]) -> list[AppRecord]:
    """Deduplicate by app id, keeping first occurrences."""
    unique: dict[str, AppRecord] = {}
    for app in apps:
        unique.setdefault(app.id, app)
    return list(unique.values())


async def get_apps_from_keywords(
    store: MarketplaceStore,
    keywords: Sequence[str],
) -> list[AppRecord]:
    """Top apps for each keyword, merged."""
    results = await asyncio.gather(*[
        store.search(kw, num=KEYWORD_SEARCH_SIZE, full_detail=True)
        for kw in keywords
    ])
    return _unique([app for apps in results for app in apps])


async def get_search_keywords(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    terms: Sequence[str],
) -> list[str]:
    """Break the autocomplete suggestions of *terms* into keywords."""
    results = await asyncio.gather(*[store.suggest(term) for term in terms])
    suggestions = [s for found in results for s in found[:SUGGESTIONS_PER_SEED]]
    keywords = [kw for s in suggestions for kw in extractor.extract(s)]
    return list(dict.fromkeys(keywords))


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------

async def similar(store, extractor, seed) -> list[AppRecord]:
    return await store.similar(str(seed))


async def category(store, extractor, seed) -> list[AppRecord]:
    app = await store.app(str(seed))
    apps = await store.list(store.get_collection_query(app), full_detail=True)
    return without_app(apps, str(seed))


async def competition(store, extractor, seed) -> list[AppRecord]:
    keywords = await get_app_keywords(store, extractor, str(seed))
    apps = await get_apps_from_keywords(store, keywords[:COMPETITION_KEYWORDS])
    return without_app(apps, str(seed))


async def arbitrary(store, extractor, seed) -> list[AppRecord]:
    return list(await asyncio.gather(*[store.app(str(i)) for i in seed]))


async def keywords(store, extractor, seed) -> list[AppRecord]:
    return await get_apps_from_keywords(store, [str(kw) for kw in seed])


async def search(store, extractor, seed) -> list[AppRecord]:
    derived = await get_search_keywords(store, extractor, [str(t) for t in seed])
    return await get_apps_from_keywords(store, derived)


RESOLVERS: dict[Strategy, Resolver] = {
    Strategy.SIMILAR: similar,
    Strategy.COMPETITION: competition,
    Strategy.CATEGORY: category,
    Strategy.ARBITRARY: arbitrary,
    Strategy.KEYWORDS: keywords,
    Strategy.SEARCH: search,
}

if set(RESOLVERS) != set(Strategy):  # every strategy needs a resolver
    raise RuntimeError("suggestion resolvers do not cover every strategy")


async def resolve_apps(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    seed: Seed,
    strategy: Union[str, Strategy],
) -> list[AppRecord]:
    """Validate and resolve the candidate apps for *seed*."""
    strategy = parse_strategy(strategy)
    validate_seed(strategy, seed)
    apps = await RESOLVERS[strategy](store, extractor, seed)
    logger.debug("Strategy %s resolved %d apps", strategy.value, len(apps))
    return apps
