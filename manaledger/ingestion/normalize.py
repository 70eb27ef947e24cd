"""Scryfall/CardMarket record normalization and the card-price join."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Collection, Dict, Iterable, List, Mapping, Optional

from manaledger.ingestion.mappings import (
    CARD_FIELDS,
    DEFAULT_MULTIPLAYER_FORMAT,
    FACE_FIELDS,
    IMAGE_FIELDS,
    LIST_FIELDS,
    MULTI_FACE_FIELDS,
    PRICE_FIELDS,
    SET_FIELDS,
    SINGLE_FACE_FIELDS,
)
from manaledger.schemas.cards import (
    CanonicalCard,
    CardFace,
    CardPrice,
    ImageUris,
    MultiFacedCard,
    SetInfo,
    SingleFacedCard,
    dump_card,
)

DEFAULT_EXCLUDED_SET_TYPES = frozenset({"memorabilia", "token"})


def _remap(raw: Mapping[str, Any], fields: Mapping[str, str]) -> Dict[str, Any]:
    """Copy whitelisted provider keys onto canonical attribute names."""
    out: Dict[str, Any] = {}
    for source_key, attr in fields.items():
        value = raw.get(source_key)
        if value is None and attr in LIST_FIELDS:
            value = []
        out[attr] = value
    return out


def _image_uris(raw: Optional[Mapping[str, Any]]) -> Optional[ImageUris]:
    if not raw:
        return None
    return ImageUris(**_remap(raw, IMAGE_FIELDS))


def is_playable(raw: Mapping[str, Any], excluded_set_types: Collection[str] = DEFAULT_EXCLUDED_SET_TYPES) -> bool:
    """False for memorabilia/token style printings that never enter the pipeline."""
    return raw.get("set_type") not in excluded_set_types


def normalize_face(raw_face: Mapping[str, Any]) -> CardFace:
    fields = _remap(raw_face, FACE_FIELDS)
    fields["image_uris"] = _image_uris(raw_face.get("image_uris"))
    return CardFace(**fields)


def normalize_card(raw: Mapping[str, Any]) -> CanonicalCard:
    """Map one raw Scryfall card onto the single- or multi-faced canonical shape."""
    base = _remap(raw, CARD_FIELDS)
    base["set"] = SetInfo(**_remap(raw, SET_FIELDS))
    base["edhrec_uri"] = (raw.get("related_uris") or {}).get("edhrec")

    faces = raw.get("card_faces")
    if isinstance(faces, list) and faces:
        return MultiFacedCard(
            **base,
            **_remap(raw, MULTI_FACE_FIELDS),
            faces=[normalize_face(face) for face in faces],
        )

    legalities = raw.get("legalities") or {}
    return SingleFacedCard(
        **base,
        **_remap(raw, SINGLE_FACE_FIELDS),
        image_uris=_image_uris(raw.get("image_uris")),
        is_legal_in_commander=legalities.get(DEFAULT_MULTIPLAYER_FORMAT) == "legal",
    )


def normalize_price(raw: Mapping[str, Any]) -> CardPrice:
    return CardPrice(**_remap(raw, PRICE_FIELDS))


def build_price_index(prices: Iterable[Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    """Index price guide entries by stringified idProduct; later duplicates win."""
    index: Dict[str, Mapping[str, Any]] = {}
    for price in prices:
        product_id = price.get("idProduct")
        if product_id is None:
            continue
        index[str(product_id)] = price
    return index


def merge_with_prices(
    cards: Iterable[CanonicalCard],
    prices: Iterable[Mapping[str, Any]],
) -> List[CanonicalCard]:
    """Left join cards to price guide entries on cardmarket_id.

    Every card survives, in input order. Cards without a cardmarket_id or
    without a matching entry get ``price=None``; unmatched price entries are
    dropped.
    """
    index = build_price_index(prices)

    merged: List[CanonicalCard] = []
    for card in cards:
        raw_price = index.get(str(card.cardmarket_id)) if card.cardmarket_id is not None else None
        price = normalize_price(raw_price) if raw_price is not None else None
        merged.append(card.model_copy(update={"price": price}))
    return merged


def to_storage_row(card: CanonicalCard, now: datetime) -> Dict[str, Any]:
    """Shape an enriched card as a ``card_data`` row."""
    return {
        "id": card.id,
        "name": card.name,
        "cardmarket_id": card.cardmarket_id,
        "data": dump_card(card),
        "created_at": now,
        "updated_at": now,
    }
