"""Cheapest-printing selection tests"""

import math

from sqlalchemy.dialects import postgresql

from manaledger.ingestion.normalize import merge_with_prices, normalize_card
from manaledger.services.card_service import CardService, cheapest, escape_like, price_for
from manaledger.tests.fakes import FakeResult, FakeSessionFactory
from manaledger.tests.factories import scryfall_card


def priced(card_id, **price):
    card = normalize_card(scryfall_card(card_id, cardmarket_id=1))
    return merge_with_prices([card], [{"idProduct": 1, **price}])[0]


class TestPriceFor:
    def test_non_foil_prefers_low_then_avg(self):
        assert price_for(priced("a", low=1.0, avg=2.0)) == 1.0
        assert price_for(priced("a", avg=2.0)) == 2.0

    def test_foil_prefers_avg_foil(self):
        assert price_for(priced("a", low=1.0, **{"avg-foil": 5.0}), foil=True) == 5.0
        assert price_for(priced("a", low=1.0), foil=True) == 1.0

    def test_unpriced_is_infinite(self):
        assert price_for(normalize_card(scryfall_card())) == math.inf
        assert price_for(priced("a", trend=3.0)) == math.inf


class TestCheapest:
    def test_picks_lowest(self):
        cards = [priced("a", low=3.0), priced("b", low=0.5), priced("c", low=1.0)]
        assert cheapest(cards).id == "b"

    def test_unpriced_sorted_last(self):
        cards = [normalize_card(scryfall_card("u")), priced("p", low=50.0)]
        assert cheapest(cards).id == "p"

    def test_first_wins_on_tie(self):
        cards = [priced("a", low=1.0), priced("b", low=1.0)]
        assert cheapest(cards).id == "a"

    def test_all_unpriced_returns_first(self):
        cards = [normalize_card(scryfall_card("x")), normalize_card(scryfall_card("y"))]
        assert cheapest(cards).id == "x"

    def test_empty(self):
        assert cheapest([]) is None

    def test_foil_comparison(self):
        cards = [priced("a", low=1.0, **{"avg-foil": 9.0}), priced("b", low=2.0, **{"avg-foil": 4.0})]
        assert cheapest(cards).id == "a"
        assert cheapest(cards, foil=True).id == "b"


class TestNameSearch:
    def test_wildcards_escaped(self):
        assert escape_like("100%_off") == "100\\%\\_off"
        assert escape_like("a\\b") == "a\\\\b"

    def test_search_matches_literally(self):
        sessions = FakeSessionFactory(results={0: FakeResult(scalar=0), 1: FakeResult(rows=[])})

        cards, total = CardService(sessions()).search_by_name("50%", limit=5)

        assert cards == []
        assert total == 0
        compiled = sessions.statements[1].compile(dialect=postgresql.dialect())
        assert "ESCAPE" in str(compiled)
        assert "%50\\%%" in compiled.params.values()
