"""ASO_Scores - Marketplace capability contract and shared helpers.

Each marketplace gets its own adapter class implementing
:class:`MarketplaceStore`; adapters share helpers by composition, never by
inheritance.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Protocol, Sequence, runtime_checkable

from aso.schemas import AppRecord, CollectionQuery, InstallsStats, SuggestStats
from aso.scoring import calc
from aso.utils.exceptions import NoDataError

logger = logging.getLogger(__name__)

MAX_KEYWORD_LENGTH = 25
MAX_SUGGEST_INDEX = 4
# length, index
SUGGEST_WEIGHTS = (10, 1)


@runtime_checkable
class MarketplaceStore(Protocol):
    """Everything the scorers and strategies need from a marketplace."""

    MAX_SEARCH: int
    MAX_LIST: int

    async def search(
        self, term: str, num: int = 10, full_detail: bool = False,
    ) -> list[AppRecord]: ...

    async def list(
        self, query: CollectionQuery, full_detail: bool = False,
    ) -> list[AppRecord]: ...

    async def app(self, app_id: str) -> AppRecord: ...

    async def similar(self, app_id: str) -> list[AppRecord]: ...

    async def suggest(self, term: str) -> list[str]: ...

    def get_installs_score(self, apps: Sequence[AppRecord]) -> InstallsStats: ...

    async def get_suggest_score(self, keyword: str) -> SuggestStats: ...

    def get_collection_query(self, app: AppRecord) -> CollectionQuery: ...

    async def aclose(self) -> None: ...


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def average_popularity(
    values: Sequence[float],
    ceiling: float,
) -> InstallsStats:
    """Average a popularity proxy and score it against *ceiling*."""
    if not values:
        raise NoDataError("cannot average popularity of an empty app list")
    avg = sum(values) / len(values)
    return InstallsStats(avg=avg, score=calc.z_score(ceiling, avg))


async def prefix_suggest_score(
    suggest: Callable[[str], Awaitable[list[str]]],
    keyword: str,
) -> SuggestStats:
    """Find the shortest prefix whose autocomplete list contains *keyword*.

    Prefixes grow one character at a time up to
    ``min(len(keyword), MAX_KEYWORD_LENGTH)``. A keyword never suggested
    gets the lowest score.
    """
    keyword = keyword.lower()
    limit = min(len(keyword), MAX_KEYWORD_LENGTH)

    for length in range(1, limit + 1):
        suggestions = [s.lower() for s in await suggest(keyword[:length])]
        if keyword in suggestions:
            index = suggestions.index(keyword)
            length_score = calc.i_score(1, MAX_KEYWORD_LENGTH, length)
            index_score = calc.iz_score(MAX_SUGGEST_INDEX, index)
            return SuggestStats(
                length=length,
                index=index,
                score=calc.aggregate(SUGGEST_WEIGHTS, [length_score, index_score]),
            )

    logger.debug("'%s' not found in suggestions up to length %d", keyword, limit)
    return SuggestStats(score=1.0)


def find_rank(apps: Sequence[AppRecord], app_id: str) -> Optional[int]:
    """Return the 1-based position of *app_id* in *apps*, None if absent."""
    for position, app in enumerate(apps, start=1):
        if app.id == app_id:
            return position
    return None


def without_app(apps: Sequence[AppRecord], app_id: str) -> list[AppRecord]:
    return [app for app in apps if app.id != str(app_id)]
