"""ASO_Scores - App Store adapter (iTunes Search API, RSS charts, search hints)."""

from __future__ import annotations

import asyncio
import json
import logging
import plistlib
import re
from typing import Any, Optional, Sequence

import httpx

from aso.schemas import AppRecord, CollectionQuery, InstallsStats, SuggestStats
from aso.stores.base import average_popularity, prefix_suggest_score
from aso.utils.exceptions import UpstreamError
from aso.utils.retries import retry_with_backoff

logger = logging.getLogger(__name__)

SEARCH_URL = "https://itunes.apple.com/search"
LOOKUP_URL = "https://itunes.apple.com/lookup"
RSS_URL = "https://itunes.apple.com/{country}/rss/{collection}/limit={num}{genre}/json"
HINTS_URL = "https://search.itunes.apple.com/WebObjects/MZSearchHints.woa/wa/hints"
APP_PAGE_URL = "https://itunes.apple.com/{country}/app/app/id{app_id}"

TOP_FREE = "topfreeapplications"
TOP_PAID = "toppaidapplications"

# Review count is the popularity proxy; few apps go beyond this.
REVIEWS_CEILING = 100_000
LOOKUP_BATCH = 100

# related app ids embedded in the app page
_ALSO_BOUGHT = re.compile(r'"customersAlsoBoughtApps"\s*:\s*(\[.*?\])', re.DOTALL)

STOREFRONTS: dict[str, int] = {
    "us": 143441, "fr": 143442, "de": 143443, "gb": 143444, "it": 143450,
    "nl": 143452, "es": 143454, "ca": 143455, "se": 143456, "au": 143460,
    "jp": 143462, "cn": 143465, "kr": 143466, "in": 143467, "mx": 143468,
    "ru": 143469, "br": 143503,
}


def _to_record(item: dict[str, Any]) -> AppRecord:
    """Map an iTunes Search/Lookup result onto an AppRecord."""
    return AppRecord(
        id=item["trackId"],
        title=item.get("trackName", ""),
        description=item.get("description", ""),
        free=float(item.get("price") or 0) == 0,
        reviews=item.get("userRatingCount") or 0,
        rating=item.get("averageUserRating"),
        updated=item.get("currentVersionReleaseDate") or item.get("releaseDate"),
        genre_id=item.get("primaryGenreId"),
        url=item.get("trackViewUrl"),
    )


def _entry_to_record(entry: dict[str, Any]) -> AppRecord:
    """Map an RSS chart entry onto a summary AppRecord (no description)."""
    price = entry.get("im:price", {}).get("attributes", {}).get("amount", "0")
    return AppRecord(
        id=entry["id"]["attributes"]["im:id"],
        title=entry.get("im:name", {}).get("label", ""),
        free=float(price or 0) == 0,
        genre_id=entry.get("category", {}).get("attributes", {}).get("im:id"),
        url=entry["id"].get("label"),
    )


class ItunesStore:
    """Marketplace adapter for Apple's App Store."""

    MAX_SEARCH = 200
    MAX_LIST = 100

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

    async def __aenter__(self) -> ItunesStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    @retry_with_backoff(max_attempts=3, initial_delay=0.5)
    async def _fetch(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        logger.debug("GET %s %s", url, params)
        response = await self._client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response

    async def _get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            return await self._fetch(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"App Store request failed: {url}", exc) from exc

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await self._get(url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"App Store sent invalid JSON: {url}", exc) from exc

    async def _lookup(self, ids: Sequence[str]) -> list[AppRecord]:
        """Fetch full records for *ids*, preserving the given order."""
        batches = [ids[i:i + LOOKUP_BATCH] for i in range(0, len(ids), LOOKUP_BATCH)]
        payloads = await asyncio.gather(*[
            self._get_json(LOOKUP_URL, {
                "id": ",".join(batch),
                "country": self._country,
                "entity": "software",
            })
            for batch in batches
        ])
        by_id = {
            str(item["trackId"]): _to_record(item)
            for payload in payloads
            for item in payload.get("results", [])
            if "trackId" in item
        }
        return [by_id[i] for i in ids if i in by_id]

    # ------------------------------------------------------------------
    # Capability
    # ------------------------------------------------------------------

    async def search(
        self, term: str, num: int = 10, full_detail: bool = False,
    ) -> list[AppRecord]:
        """Search apps; the Search API always returns full detail."""
        payload = await self._get_json(SEARCH_URL, {
            "term": term,
            "country": self._country,
            "entity": "software",
            "limit": min(num, self.MAX_SEARCH),
            "lang": f"{self._lang}_{self._country}",
        })
        return [
            _to_record(item) for item in payload.get("results", [])
            if "trackId" in item
        ]

    async def list(
        self, query: CollectionQuery, full_detail: bool = False,
    ) -> list[AppRecord]:
        genre = f"/genre={query.category}" if query.category else ""
        url = RSS_URL.format(
            country=self._country,
            collection=query.collection,
            num=min(query.num, self.MAX_LIST),
            genre=genre,
        )
        payload = await self._get_json(url)
        entries = payload.get("feed", {}).get("entry", [])
        if isinstance(entries, dict):  # single entry feeds are not wrapped
            entries = [entries]
        apps = [_entry_to_record(entry) for entry in entries]
        if full_detail and apps:
            return await self._lookup([app.id for app in apps])
        return apps

    async def app(self, app_id: str) -> AppRecord:
        records = await self._lookup([str(app_id)])
        if not records:
            raise UpstreamError(f"App Store app not found: {app_id}")
        return records[0]

    async def similar(self, app_id: str) -> list[AppRecord]:
        """Apps listed as "customers also bought" on the app's store page."""
        response = await self._get(
            APP_PAGE_URL.format(country=self._country, app_id=app_id),
            headers={"X-Apple-Store-Front": f"{self._storefront},32"},
        )
        match = _ALSO_BOUGHT.search(response.text)
        if match is None:
            logger.debug("No related apps on the page of %s", app_id)
            return []
        try:
            ids = [str(i) for i in json.loads(match.group(1))]
        except ValueError as exc:
            raise UpstreamError(f"App Store page of {app_id} is malformed", exc) from exc
        return await self._lookup(ids) if ids else []

    @property
    def _storefront(self) -> int:
        return STOREFRONTS.get(self._country, STOREFRONTS["us"])

    async def suggest(self, term: str) -> list[str]:
        response = await self._get(
            HINTS_URL,
            params={"clientApplication": "Software", "term": term},
            headers={"X-Apple-Store-Front": f"{self._storefront},29"},
        )
        try:
            hints = plistlib.loads(response.content).get("hints", [])
        except (plistlib.InvalidFileException, ValueError) as exc:
            raise UpstreamError("App Store sent an invalid hints plist", exc) from exc
        return [hint["term"] for hint in hints if "term" in hint]

    def get_installs_score(self, apps: Sequence[AppRecord]) -> InstallsStats:
        return average_popularity([app.reviews for app in apps], REVIEWS_CEILING)

    async def get_suggest_score(self, keyword: str) -> SuggestStats:
        return await prefix_suggest_score(self.suggest, keyword)

    def get_collection_query(self, app: AppRecord) -> CollectionQuery:
        return CollectionQuery(
            collection=TOP_FREE if app.free else TOP_PAID,
            category=app.genre_id,
            num=self.MAX_LIST,
        )
