"""Canonical card shapes.

A card is either single-faced or multi-faced, never both. The two shapes are
separate models so that single-face attributes (mana cost, power, ...) cannot
be read off a multi-faced card by accident. Serialized output (storage and
API) uses camelCase keys.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CanonicalModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ImageUris(CanonicalModel):
    small: Optional[str] = None
    normal: Optional[str] = None
    large: Optional[str] = None
    png: Optional[str] = None
    art_crop: Optional[str] = None
    border_crop: Optional[str] = None


class SetInfo(CanonicalModel):
    id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


class CardPrice(CanonicalModel):
    """CardMarket price guide entry, regular and foil series."""

    avg: Optional[float] = None
    low: Optional[float] = None
    avg1: Optional[float] = None
    avg7: Optional[float] = None
    avg30: Optional[float] = None
    trend: Optional[float] = None

    avg_foil: Optional[float] = None
    low_foil: Optional[float] = None
    avg1_foil: Optional[float] = None
    avg7_foil: Optional[float] = None
    avg30_foil: Optional[float] = None
    trend_foil: Optional[float] = None

    id_product: Optional[int] = None
    id_category: Optional[int] = None


class CardFace(CanonicalModel):
    name: Optional[str] = None
    mana_cost: Optional[str] = None
    type_line: Optional[str] = None
    oracle_text: Optional[str] = None
    power: Optional[str] = None
    toughness: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    image_uris: Optional[ImageUris] = None


class BaseCard(CanonicalModel):
    id: str
    cardmarket_id: Optional[int] = None
    name: Optional[str] = None
    lang: Optional[str] = None
    released_at: Optional[str] = None
    scryfall_uri: Optional[str] = None
    layout: Optional[str] = None
    color_identity: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    set: SetInfo = Field(default_factory=SetInfo)
    rarity: Optional[str] = None

    games: List[str] = Field(default_factory=list)
    finishes: List[str] = Field(default_factory=list)
    produced_mana: List[str] = Field(default_factory=list)
    collector_number: Optional[str] = None
    artist: Optional[str] = None
    edhrec_rank: Optional[int] = None
    edhrec_uri: Optional[str] = None

    price: Optional[CardPrice] = None


class SingleFacedCard(BaseCard):
    image_uris: Optional[ImageUris] = None
    mana_cost: Optional[str] = None
    type_line: Optional[str] = None
    oracle_text: Optional[str] = None
    flavor_text: Optional[str] = None
    power: Optional[str] = None
    toughness: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    is_legal_in_commander: bool = False


class MultiFacedCard(BaseCard):
    type_line: Optional[str] = None
    faces: List[CardFace] = Field(min_length=1)


CanonicalCard = Union[SingleFacedCard, MultiFacedCard]


def parse_card(data: Dict[str, Any]) -> CanonicalCard:
    """Rebuild a canonical card from its serialized (stored) form."""
    if data.get("faces"):
        return MultiFacedCard.model_validate(data)
    return SingleFacedCard.model_validate(data)


def dump_card(card: CanonicalCard) -> Dict[str, Any]:
    """Serialize a card to its camelCase JSON document."""
    return card.model_dump(mode="json", by_alias=True)
