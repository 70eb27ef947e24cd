"""Raw provider records and HTTP mock helpers shared by the tests."""

from typing import Any, AsyncIterator, Dict, Optional

import httpx


def scryfall_card(card_id: str = "c1", **overrides: Any) -> Dict[str, Any]:
    card = {
        "id": card_id,
        "name": "Lightning Bolt",
        "lang": "en",
        "released_at": "1993-08-05",
        "scryfall_uri": f"https://scryfall.com/card/lea/{card_id}",
        "layout": "normal",
        "cardmarket_id": 100,
        "mana_cost": "{R}",
        "type_line": "Instant",
        "oracle_text": "Lightning Bolt deals 3 damage to any target.",
        "colors": ["R"],
        "color_identity": ["R"],
        "keywords": [],
        "legalities": {"commander": "legal", "standard": "not_legal"},
        "games": ["paper"],
        "finishes": ["nonfoil"],
        "set_id": "s-lea",
        "set": "lea",
        "set_name": "Limited Edition Alpha",
        "set_type": "core",
        "rarity": "common",
        "collector_number": "161",
        "artist": "Christopher Rush",
        "edhrec_rank": 5,
        "related_uris": {"edhrec": "https://edhrec.com/route/?cc=Lightning+Bolt"},
        "image_uris": {"small": "https://img/s.jpg", "normal": "https://img/n.jpg"},
    }
    card.update(overrides)
    return card


def double_faced_card(card_id: str = "d1", **overrides: Any) -> Dict[str, Any]:
    card = scryfall_card(
        card_id,
        name="Delver of Secrets // Insectile Aberration",
        layout="transform",
        type_line="Creature — Human Wizard // Creature — Human Insect",
        card_faces=[
            {"name": "Delver of Secrets", "mana_cost": "{U}", "type_line": "Creature — Human Wizard",
             "power": "1", "toughness": "1", "colors": ["U"]},
            {"name": "Insectile Aberration", "mana_cost": "", "type_line": "Creature — Human Insect",
             "power": "3", "toughness": "2", "colors": None},
        ],
    )
    card.pop("image_uris")
    card.update(overrides)
    return card


def price_entry(product_id: int = 100, **overrides: Any) -> Dict[str, Any]:
    entry = {
        "idProduct": product_id,
        "idCategory": 1,
        "avg": 2.5,
        "low": 1.2,
        "trend": 2.1,
        "avg1": 2.0,
        "avg7": 2.2,
        "avg30": 2.4,
        "avg-foil": 9.5,
        "low-foil": 7.0,
        "trend-foil": 8.8,
    }
    entry.update(overrides)
    return entry


class ChunkedBody(httpx.AsyncByteStream):
    """Response body served lazily in small chunks, like a real socket."""

    def __init__(self, body: bytes, chunk_size: int = 16):
        self.body = body
        self.chunk_size = chunk_size

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for offset in range(0, len(self.body), self.chunk_size):
            yield self.body[offset:offset + self.chunk_size]


def streamed_response(body: bytes, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
    """Mock response whose raw bytes reach ``aiter_raw`` undecoded."""
    all_headers = {"Content-Length": str(len(body))}
    all_headers.update(headers or {})
    return httpx.Response(status_code, headers=all_headers, stream=ChunkedBody(body))
