"""ASO_Scores - Keywords of a single app, title first."""

from __future__ import annotations

import logging
from typing import Union

from aso.keywords.extractor import KeywordExtractor
from aso.schemas import AppRecord
from aso.stores.base import MarketplaceStore

logger = logging.getLogger(__name__)


async def resolve_app(
    store: MarketplaceStore,
    app: Union[AppRecord, str, int],
) -> AppRecord:
    """Return *app* as a detailed record, fetching it by id when needed."""
    if isinstance(app, AppRecord):
        return app
    return await store.app(str(app))


async def get_app_keywords(
    store: MarketplaceStore,
    extractor: KeywordExtractor,
    app: Union[AppRecord, str, int],
) -> list[str]:
    """Return the ranked keywords of an app.

    Title keywords come first, followed by the summary/description keywords
    not already found in the title (in their own order).
    """
    record = await resolve_app(store, app)
    body = f"{record.summary or ''} {record.description or ''}"

    title_kws = extractor.extract(record.title)
    body_kws = extractor.extract(body)

    seen = set(title_kws)
    keywords = title_kws + [kw for kw in body_kws if kw not in seen]
    logger.debug("App %s: %d keywords", record.id, len(keywords))
    return keywords
