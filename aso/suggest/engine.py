"""ASO_Scores - Keyword suggestions from a strategy-selected set of apps."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Optional, Sequence, Union

from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from aso.schemas import AppRecord, Strategy, SuggestionResult, SuggestOptions
from aso.stores.base import MarketplaceStore
from aso.suggest.strategies import Seed, parse_strategy, resolve_apps

logger = logging.getLogger(__name__)


async def get_suggestions(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    apps: Sequence[AppRecord],
    options: SuggestOptions,
) -> list[str]:
    """Return the most common keywords among *apps*.

    Ties keep first-seen order.
    """
    app_keywords = await asyncio.gather(*[
        get_app_keywords(store, extractor, app) for app in apps
    ])
    excluded = {kw.lower() for kw in options.exclude}
    counts = Counter(
        kw for kws in app_keywords for kw in kws if kw not in excluded
    )
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [kw for kw, _ in ranked[: options.num]]


async def suggest(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    seed: Seed,
    strategy: Union[str, Strategy] = Strategy.CATEGORY,
    options: Optional[SuggestOptions] = None,
) -> SuggestionResult:
    """Suggest keywords mined from the apps that *strategy* picks for *seed*."""
    strategy = parse_strategy(strategy)
    options = options or SuggestOptions()

    apps = await resolve_apps(store, extractor, seed, strategy)
    keywords = await get_suggestions(store, extractor, apps, options)

    logger.info(
        "Suggested %d keywords from %d apps (strategy=%s)",
        len(keywords), len(apps), strategy.value,
    )
    return SuggestionResult(strategy=strategy, keywords=keywords)
