"""ASO_Scores - Keyword difficulty: how hard is it to rank for a keyword.

Five statistics over the top search results, each on the 1-10 scale,
merged with fixed weights (title 4, competitors 3, installs 5, rating 2,
age 1).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Literal, Optional, Sequence

from aso.keywords.app_keywords import get_app_keywords
from aso.keywords.extractor import KeywordExtractor
from aso.schemas import (
    AgeStats,
    AppRecord,
    CompetitorStats,
    DifficultyScore,
    RatingStats,
    TitleMatchStats,
)
from aso.scoring import calc
from aso.stores.base import MarketplaceStore
from aso.utils.exceptions import NoDataError

logger = logging.getLogger(__name__)

TOP_APPS = 10
COMPETITOR_KEYWORDS = 10
MAX_AGE_DAYS = 500

MatchType = Literal["exact", "broad", "partial", "none"]


def get_match_type(keyword: str, title: str) -> MatchType:
    keyword = keyword.lower()
    title = title.lower()

    if keyword in title:
        return "exact"
    matches = [word in title for word in keyword.split(" ")]
    if all(matches):
        return "broad"
    if any(matches):
        return "partial"
    return "none"


def get_title_matches(keyword: str, apps: Sequence[AppRecord]) -> TitleMatchStats:
    """Count exact, broad, partial and missing keyword matches in titles."""
    counts = {"exact": 0, "broad": 0, "partial": 0, "none": 0}
    for app in apps:
        counts[get_match_type(keyword, app.title)] += 1

    score = (
        10 * counts["exact"] + 5 * counts["broad"] + 2.5 * counts["partial"]
    ) / TOP_APPS
    return TitleMatchStats(score=calc.round2(score), **counts)


async def get_competitors(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    keyword: str,
    apps: Sequence[AppRecord],
) -> CompetitorStats:
    """Count the apps that have *keyword* among their own top keywords."""
    app_keywords = await asyncio.gather(*[
        get_app_keywords(store, extractor, app) for app in apps
    ])
    count = sum(
        1 for kws in app_keywords if keyword in kws[:COMPETITOR_KEYWORDS]
    )
    return CompetitorStats(count=count, score=calc.z_score(TOP_APPS, count))


def get_rating(apps: Sequence[AppRecord]) -> RatingStats:
    if not apps:
        raise NoDataError("cannot average rating of an empty app list")
    avg = sum(app.rating or 0 for app in apps) / len(apps)
    return RatingStats(avg=avg, score=calc.round2(avg * 2))


def days_since(updated: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.now(timezone.utc)
    return (now - updated).days


def get_age(
    apps: Sequence[AppRecord],
    now: Optional[datetime] = None,
) -> AgeStats:
    """Score the average days since last update; fresher is harder."""
    if not apps:
        raise NoDataError("cannot average age of an empty app list")
    days = [days_since(app.updated, now) for app in apps if app.updated]
    if not days:
        return AgeStats(score=1.0)
    avg = sum(days) / len(days)
    return AgeStats(
        avg_days_since_updated=avg,
        score=calc.iz_score(MAX_AGE_DAYS, avg),
    )


async def score_difficulty(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    keyword: str,
    apps: Sequence[AppRecord],
) -> DifficultyScore:
    """Return the difficulty breakdown and score of *keyword*.

    *apps* are the keyword's search results, best ranked first.
    """
    keyword = keyword.lower()
    top_apps = list(apps[:TOP_APPS])
    if not top_apps:
        raise NoDataError(f"no search results for '{keyword}'")

    competitors = await get_competitors(store, extractor, keyword, top_apps)
    stats = {
        "title_matches": get_title_matches(keyword, top_apps),
        "competitors": competitors,
        "installs": store.get_installs_score(top_apps),
        "rating": get_rating(top_apps),
        "age": get_age(top_apps),
    }
    score = calc.aggregate(DifficultyScore.WEIGHTS, [
        stats["title_matches"].score,
        stats["competitors"].score,
        stats["installs"].score,
        stats["rating"].score,
        stats["age"].score,
    ])

    logger.info("Difficulty for '%s': %.2f", keyword, score)
    return DifficultyScore(score=score, **stats)
