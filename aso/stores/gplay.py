"""ASO_Scores - Google Play adapter.

App details and search go through google-play-scraper; top charts and
autocomplete are fetched directly with httpx.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Optional, Sequence

import httpx
from google_play_scraper import app as gp_app
from google_play_scraper import search as gp_search

from aso.schemas import AppRecord, CollectionQuery, InstallsStats, SuggestStats
from aso.stores.base import average_popularity, prefix_suggest_score
from aso.utils.exceptions import UnsupportedOperationError, UpstreamError
from aso.utils.retries import retry_with_backoff

logger = logging.getLogger(__name__)

BASE_URL = "https://play.google.com"
SUGGEST_URL = "https://market.android.com/suggest/SuggRequest"
# Play Store web client RPC that backs the top charts
CHARTS_URL = f"{BASE_URL}/_/PlayStoreUi/data/batchexecute"
CHARTS_RPC = "vyAe2"

TOP_FREE = "TOP_FREE"
TOP_PAID = "TOP_PAID"
ALL_APPS = "APPLICATION"

# position of the app cluster inside the decoded RPC payload
CHART_APPS_PATH = (0, 1, 0, 28, 0)

INSTALLS_CEILING = 1_000_000
DETAIL_CONCURRENCY = 8


def _path(data: Any, keys: Sequence[int]) -> Any:
    """Follow *keys* through nested lists, None when any step is missing."""
    for key in keys:
        if not isinstance(data, list) or key >= len(data):
            return None
        data = data[key]
    return data


def _chart_request(query: CollectionQuery, num: int) -> str:
    """Build the ``f.req`` form value asking for one chart page."""
    payload = [
        [None, [[8, [20, num]], True, None, [96, 108, 72, 100, 27, 183]]],
        [2, query.collection, query.category or ALL_APPS],
    ]
    return json.dumps([[[CHARTS_RPC, json.dumps(payload), None, "generic"]]])


def _parse_chart(text: str) -> list[list[Any]]:
    """Extract the chart entries from a batchexecute answer.

    The body starts with an anti-XSSI guard followed by length-prefixed
    JSON chunks; the one tagged with the RPC id carries the payload as a
    JSON string.
    """
    for line in text.splitlines():
        if not line.startswith("["):
            continue
        for envelope in json.loads(line):
            if envelope[:2] == ["wrb.fr", CHARTS_RPC] and envelope[2]:
                entries = _path(json.loads(envelope[2]), CHART_APPS_PATH)
                return entries or []
    return []


def _chart_entry_to_record(entry: list[Any]) -> Optional[AppRecord]:
    """Map a chart entry onto a summary AppRecord (no description)."""
    item = _path(entry, (0,))
    app_id = _path(item, (0, 0))
    if not app_id:
        return None
    price = _path(item, (8, 1, 0, 0)) or 0
    url = _path(item, (10, 4, 2))
    return AppRecord(
        id=app_id,
        title=_path(item, (3,)) or "",
        free=price == 0,
        rating=_path(item, (4, 1)),
        url=f"{BASE_URL}{url}" if url else None,
    )


def _to_record(item: dict[str, Any], detailed: bool) -> AppRecord:
    """Map a google-play-scraper dict onto an AppRecord.

    Search hits carry no genre, installs count or update time, so they are
    kept as summary records (no description) unless *detailed*.
    """
    updated = item.get("updated")
    return AppRecord(
        id=item["appId"],
        title=item.get("title") or "",
        description=(item.get("description") or "") if detailed else None,
        summary=item.get("summary") if detailed else None,
        free=bool(item.get("free", True)),
        installs=item.get("minInstalls") or 0,
        reviews=item.get("reviews") or item.get("ratings") or 0,
        rating=item.get("score"),
        # the scraper reports epoch seconds
        updated=updated * 1000 if isinstance(updated, (int, float)) else updated,
        genre_id=item.get("genreId"),
        url=item.get("url"),
    )


class GooglePlayStore:
    """Marketplace adapter for Google Play.

    Similar apps are not exposed by any endpoint this adapter uses and
    raise :class:`UnsupportedOperationError`.
    """

    MAX_SEARCH = 250
    MAX_LIST = 120

    def __init__(
        self,
        country: str = "us",
        lang: str = "en",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._country = country.lower()
        self._lang = lang
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._details = asyncio.Semaphore(DETAIL_CONCURRENCY)

    async def __aenter__(self) -> GooglePlayStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _scrape(
        self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any,
    ) -> Any:
        """Run a blocking scraper call in a worker thread."""
        logger.debug("google-play-scraper %s %s %s", operation, args, kwargs)
        try:
            return await asyncio.to_thread(
                fn, *args, lang=self._lang, country=self._country, **kwargs,
            )
        except Exception as exc:
            raise UpstreamError(
                f"Google Play {operation} failed for {args}", exc,
            ) from exc

    @retry_with_backoff(max_attempts=3, initial_delay=0.5)
    async def _fetch_suggestions(self, term: str) -> httpx.Response:
        params = {
            "json": 1, "c": 3, "query": term,
            "hl": self._lang, "gl": self._country,
        }
        logger.debug("GET %s %s", SUGGEST_URL, params)
        response = await self._client.get(SUGGEST_URL, params=params)
        response.raise_for_status()
        return response

    @retry_with_backoff(max_attempts=3, initial_delay=0.5)
    async def _fetch_chart(self, query: CollectionQuery, num: int) -> httpx.Response:
        params = {
            "rpcids": CHARTS_RPC, "source-path": "/store/apps",
            "hl": self._lang, "gl": self._country, "rt": "c",
        }
        logger.debug("POST %s %s %s", CHARTS_URL, query.collection, query.category)
        response = await self._client.post(
            CHARTS_URL,
            params=params,
            data={"f.req": _chart_request(query, num)},
        )
        response.raise_for_status()
        return response

    async def _detail(self, app_id: str) -> AppRecord:
        async with self._details:
            return await self.app(app_id)

    # ------------------------------------------------------------------
    # Capability
    # ------------------------------------------------------------------

    async def search(
        self, term: str, num: int = 10, full_detail: bool = False,
    ) -> list[AppRecord]:
        hits = await self._scrape(
            "search", gp_search, term, n_hits=min(num, self.MAX_SEARCH),
        )
        if not full_detail:
            return [_to_record(hit, detailed=False) for hit in hits]
        return list(await asyncio.gather(*[self._detail(hit["appId"]) for hit in hits]))

    async def list(
        self, query: CollectionQuery, full_detail: bool = False,
    ) -> list[AppRecord]:
        try:
            response = await self._fetch_chart(query, min(query.num, self.MAX_LIST))
            entries = _parse_chart(response.text)
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            raise UpstreamError(
                f"Google Play chart request failed: {query.collection}", exc,
            ) from exc

        apps = [
            record for record in map(_chart_entry_to_record, entries)
            if record is not None
        ][: query.num]
        if not full_detail:
            return apps
        return list(await asyncio.gather(*[self._detail(app.id) for app in apps]))

    async def app(self, app_id: str) -> AppRecord:
        item = await self._scrape("app", gp_app, app_id)
        return _to_record(item, detailed=True)

    async def similar(self, app_id: str) -> list[AppRecord]:
        raise UnsupportedOperationError(
            "similar apps are not available from google-play-scraper",
        )

    async def suggest(self, term: str) -> list[str]:
        try:
            response = await self._fetch_suggestions(term)
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError("Google Play suggest request failed", exc) from exc
        return [item["s"] for item in payload if isinstance(item, dict) and "s" in item]

    def get_installs_score(self, apps: Sequence[AppRecord]) -> InstallsStats:
        return average_popularity([app.installs for app in apps], INSTALLS_CEILING)

    async def get_suggest_score(self, keyword: str) -> SuggestStats:
        return await prefix_suggest_score(self.suggest, keyword)

    def get_collection_query(self, app: AppRecord) -> CollectionQuery:
        return CollectionQuery(
            collection=TOP_FREE if app.free else TOP_PAID,
            category=app.genre_id,
            num=self.MAX_LIST,
        )
