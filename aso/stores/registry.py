"""ASO_Scores - Marketplace adapter selection by configuration."""

from __future__ import annotations

from aso.config import AppConfig
from aso.stores.base import MarketplaceStore
from aso.stores.gplay import GooglePlayStore
from aso.stores.itunes import ItunesStore

STORES: dict[str, type] = {
    "itunes": ItunesStore,
    "gplay": GooglePlayStore,
}


def get_store(config: AppConfig) -> MarketplaceStore:
    """Build the adapter named by ``config.store``."""
    try:
        store_cls = STORES[config.store]
    except KeyError:
        raise ValueError(f"Unknown store '{config.store}'") from None
    return store_cls(
        country=config.country,
        lang=config.lang,
        timeout=config.request_timeout,
    )
