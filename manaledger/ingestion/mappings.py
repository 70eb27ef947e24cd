"""
Field mapping constants.

Maps provider field names (Scryfall snake_case, CardMarket hyphenated) to the
attribute names of the canonical models in ``manaledger.schemas.cards``.
Provider fields missing from these tables are dropped on purpose.
"""

from __future__ import annotations

from typing import Final

# Scryfall card -> BaseCard (both shapes)
CARD_FIELDS: Final[dict[str, str]] = {
    "id": "id",
    "cardmarket_id": "cardmarket_id",
    "name": "name",
    "lang": "lang",
    "released_at": "released_at",
    "scryfall_uri": "scryfall_uri",
    "layout": "layout",
    "color_identity": "color_identity",
    "keywords": "keywords",
    "rarity": "rarity",
    "games": "games",
    "finishes": "finishes",
    "produced_mana": "produced_mana",
    "collector_number": "collector_number",
    "artist": "artist",
    "edhrec_rank": "edhrec_rank",
}

# Scryfall card -> SingleFacedCard only
SINGLE_FACE_FIELDS: Final[dict[str, str]] = {
    "mana_cost": "mana_cost",
    "type_line": "type_line",
    "oracle_text": "oracle_text",
    "flavor_text": "flavor_text",
    "power": "power",
    "toughness": "toughness",
    "colors": "colors",
}

# Scryfall card -> MultiFacedCard only (the faces share one type line)
MULTI_FACE_FIELDS: Final[dict[str, str]] = {
    "type_line": "type_line",
}

# Scryfall card_faces[] entry -> CardFace
FACE_FIELDS: Final[dict[str, str]] = {
    "name": "name",
    "mana_cost": "mana_cost",
    "type_line": "type_line",
    "oracle_text": "oracle_text",
    "power": "power",
    "toughness": "toughness",
    "colors": "colors",
}

# Scryfall top-level set_* keys -> SetInfo
SET_FIELDS: Final[dict[str, str]] = {
    "set_id": "id",
    "set": "code",
    "set_name": "name",
    "set_type": "type",
}

# Scryfall image_uris -> ImageUris
IMAGE_FIELDS: Final[dict[str, str]] = {
    "small": "small",
    "normal": "normal",
    "large": "large",
    "png": "png",
    "art_crop": "art_crop",
    "border_crop": "border_crop",
}

# CardMarket price guide entry -> CardPrice
PRICE_FIELDS: Final[dict[str, str]] = {
    "avg": "avg",
    "low": "low",
    "avg1": "avg1",
    "avg7": "avg7",
    "avg30": "avg30",
    "trend": "trend",
    "avg-foil": "avg_foil",
    "low-foil": "low_foil",
    "avg1-foil": "avg1_foil",
    "avg7-foil": "avg7_foil",
    "avg30-foil": "avg30_foil",
    "trend-foil": "trend_foil",
    "idProduct": "id_product",
    "idCategory": "id_category",
}

# Model attributes that are lists; a missing or null provider value becomes []
LIST_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "color_identity",
        "keywords",
        "colors",
        "finishes",
        "games",
        "produced_mana",
    }
)

# Scryfall legality format used for the single-face "legal in commander" flag
DEFAULT_MULTIPLAYER_FORMAT: Final[str] = "commander"
