"""Card routes - Read access to the synced card data."""

import time
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from manaledger.api.deps import get_db
from manaledger.schemas.api import CardSearchResponse
from manaledger.schemas.cards import dump_card
from manaledger.services.card_service import CardService

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("/search", response_model=CardSearchResponse)
def search_cards(
    name: str = Query(..., min_length=1, description="Card name (case-insensitive partial match)"),
    limit: int = Query(20, ge=1, le=100, description="Number of cards to return (max 100)"),
    offset: int = Query(0, ge=0, description="Number of cards to skip"),
    db: Session = Depends(get_db),
):
    """Search cards by name. Includes request metadata (request_id, latency_ms)."""
    start = time.perf_counter()
    request_id = str(uuid.uuid4())

    cards, total = CardService(db).search_by_name(name, limit=limit, offset=offset)

    return CardSearchResponse(
        request_id=request_id,
        api_latency_ms=int((time.perf_counter() - start) * 1000),
        total_count=total,
        data=[dump_card(card) for card in cards],
    )


@router.get("/count")
def get_card_count(db: Session = Depends(get_db)):
    """Get total count of stored cards."""
    return {"count": CardService(db).get_count()}


@router.get("/{card_id}")
def get_card(card_id: str, db: Session = Depends(get_db)):
    """Get a single card by its Scryfall ID."""
    card = CardService(db).get_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail=f"Card '{card_id}' not found")
    return dump_card(card)


@router.get("/{card_id}/printings")
def get_printings(card_id: str, db: Session = Depends(get_db)):
    """All printings sharing the card's name."""
    return [dump_card(card) for card in CardService(db).get_printings(card_id)]


@router.get("/{card_id}/cheapest")
def get_cheapest_printing(
    card_id: str,
    foil: bool = Query(False, description="Compare foil prices when available"),
    db: Session = Depends(get_db),
):
    """
    Cheapest printing of the card's name.

    Unpriced printings are only picked when no printing has a price.
    """
    card = CardService(db).get_cheapest_printing(card_id, foil=foil)
    if not card:
        raise HTTPException(status_code=404, detail=f"Card '{card_id}' not found")
    return dump_card(card)
