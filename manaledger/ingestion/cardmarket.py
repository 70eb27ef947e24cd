"""CardMarket price guide source."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from manaledger.core.config import settings
from manaledger.core.logging import get_logger
from .base import BaseSource
from .download import fetch_json

log = get_logger("ingestion.cardmarket")


class CardMarketPriceSource(BaseSource):
    """Downloads the CardMarket price guide (``{"priceGuides": [...]}``)."""

    name = "cardmarket"

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.CARDMARKET_PRICE_GUIDE_URL

    async def fetch(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        payload = await fetch_json(client, self.url, "CardMarket Price Guide")
        if not isinstance(payload, dict) or not isinstance(payload.get("priceGuides"), list):
            raise ValueError("CardMarket price guide response has no 'priceGuides' list")

        prices = payload["priceGuides"]
        log.info(f"Fetched {len(prices)} price guide entries from CardMarket")
        return prices
