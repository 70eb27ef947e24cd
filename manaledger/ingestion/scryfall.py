"""Scryfall bulk-data source."""

from __future__ import annotations

from typing import Any, Collection, Dict, List, Optional

import httpx
from pydantic import BaseModel

from manaledger.core.config import settings
from manaledger.core.logging import get_logger
from .base import BaseSource
from .download import fetch_json
from .normalize import is_playable

log = get_logger("ingestion.scryfall")


class BulkDataNotFoundError(LookupError):
    """The bulk-data listing has no entry of the requested type."""


class BulkDataItem(BaseModel):
    type: str
    name: str
    size: int
    updated_at: str
    download_uri: str


async def fetch_bulk_metadata(
    client: httpx.AsyncClient,
    bulk_type: str = "unique_artwork",
    url: Optional[str] = None,
) -> BulkDataItem:
    """Resolve the current download location of a bulk dataset.

    The download URI rotates with every Scryfall release, so it is looked up
    from the bulk-data listing instead of being configured.
    """
    log.info("Fetching Scryfall bulk data metadata...")
    resp = await client.get(url or settings.SCRYFALL_BULK_API_URL)
    resp.raise_for_status()
    listing = resp.json()

    for entry in listing.get("data", []):
        if entry.get("type") == bulk_type:
            item = BulkDataItem.model_validate(entry)
            log.info(f"Found: {item.name}")
            log.info(f"Size: {item.size / 1024 / 1024:.2f} MB")
            log.info(f"Updated: {item.updated_at}")
            return item

    raise BulkDataNotFoundError(f"Could not find {bulk_type} bulk data")


class ScryfallBulkSource(BaseSource):
    """Downloads the Scryfall bulk card dataset, minus non-playable ephemera."""

    name = "scryfall"

    def __init__(
        self,
        bulk_type: Optional[str] = None,
        metadata_url: Optional[str] = None,
        excluded_set_types: Optional[Collection[str]] = None,
    ):
        self.bulk_type = bulk_type or settings.SCRYFALL_BULK_TYPE
        self.metadata_url = metadata_url or settings.SCRYFALL_BULK_API_URL
        self.excluded_set_types = frozenset(
            excluded_set_types if excluded_set_types is not None else settings.EXCLUDED_SET_TYPES
        )

    async def fetch(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        bulk = await fetch_bulk_metadata(client, self.bulk_type, self.metadata_url)
        cards = await fetch_json(client, bulk.download_uri, f"Scryfall {bulk.name}")
        if not isinstance(cards, list):
            raise ValueError(f"Scryfall bulk file {bulk.download_uri} is not a JSON array")

        playable = [card for card in cards if is_playable(card, self.excluded_set_types)]
        log.info(f"Fetched {len(cards)} cards from Scryfall ({len(cards) - len(playable)} ephemera skipped)")
        return playable
