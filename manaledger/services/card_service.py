"""Card Service - Read-only queries over the synced card data."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from manaledger.core.logging import get_logger
from manaledger.models.card import CardData
from manaledger.schemas.cards import CanonicalCard, parse_card

log = get_logger("card_service")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def price_for(card: CanonicalCard, foil: bool = False) -> float:
    """Comparable price of a printing; unpriced printings sort last (+inf).

    Non-foil prefers ``low`` then ``avg``; foil prefers ``avgFoil`` then
    falls back to the non-foil series.
    """
    price = card.price
    if price is None:
        return math.inf

    candidates = (price.avg_foil, price.low, price.avg) if foil else (price.low, price.avg)
    for value in candidates:
        if value is not None:
            return value
    return math.inf


def cheapest(cards: Sequence[CanonicalCard], foil: bool = False) -> Optional[CanonicalCard]:
    """Lowest-priced printing; on ties the first one wins."""
    best: Optional[CanonicalCard] = None
    best_price = math.inf
    for card in cards:
        value = price_for(card, foil)
        if best is None or value < best_price:
            best, best_price = card, value
    return best


class CardService:
    """Handles card lookups - reads from DB only, no writes."""

    def __init__(self, db: Session):
        self.db = db

    def get_card(self, card_id: str) -> Optional[CanonicalCard]:
        row = self.db.get(CardData, card_id)
        return parse_card(row.data) if row else None

    def search_by_name(self, query: str, limit: int = 20, offset: int = 0) -> Tuple[List[CanonicalCard], int]:
        """Case-insensitive partial name match, with the total match count."""
        condition = CardData.name.ilike(f"%{escape_like(query)}%", escape="\\")

        total = self.db.execute(select(func.count()).select_from(CardData).where(condition)).scalar() or 0
        stmt = (
            select(CardData.data)
            .where(condition)
            .order_by(CardData.name.asc(), CardData.id.asc())
            .limit(limit)
            .offset(offset)
        )
        cards = [parse_card(data) for data in self.db.execute(stmt).scalars().all()]
        return cards, total

    def get_printings(self, card_id: str) -> List[CanonicalCard]:
        """All stored printings sharing the name of ``card_id``."""
        row = self.db.get(CardData, card_id)
        if not row or not row.name:
            return []

        stmt = select(CardData.data).where(CardData.name == row.name).order_by(CardData.id.asc())
        return [parse_card(data) for data in self.db.execute(stmt).scalars().all()]

    def get_cheapest_printing(self, card_id: str, foil: bool = False) -> Optional[CanonicalCard]:
        return cheapest(self.get_printings(card_id), foil=foil)

    def get_count(self) -> int:
        return self.db.execute(select(func.count()).select_from(CardData)).scalar() or 0
