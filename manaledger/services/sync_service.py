"""End-to-end card sync: clear, fetch cards and prices, merge, load."""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

import httpx

from manaledger.core.config import settings
from manaledger.core.logging import get_logger
from manaledger.ingestion.base import BaseSource
from manaledger.ingestion.cardmarket import CardMarketPriceSource
from manaledger.ingestion.normalize import merge_with_prices, normalize_card, to_storage_row
from manaledger.ingestion.scryfall import ScryfallBulkSource
from manaledger.models.card import CardData
from manaledger.schemas.sync import SyncResult, SyncState
from manaledger.services.loader import BatchLoader
from manaledger.services.run_status import RunStatusStore
from manaledger.services.store import CardStore

log = get_logger("sync_service")

CARD_TABLE = CardData.__tablename__


class SyncService:
    """Runs one sync, strictly sequentially.

    State sequence: idle -> [clearing] -> fetching_cards -> fetching_prices
    -> merging -> loading -> completed | failed. Any exception is fatal for
    the run: it is recorded on the run and re-raised unchanged. Batch-level
    failures only show up in the result's error counts.
    """

    def __init__(
        self,
        store: CardStore,
        status_store: RunStatusStore,
        loader: Optional[BatchLoader] = None,
        card_source: Optional[BaseSource] = None,
        price_source: Optional[BaseSource] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.store = store
        self.status_store = status_store
        self.loader = loader or BatchLoader(store)
        self.card_source = card_source or ScryfallBulkSource()
        self.price_source = price_source or CardMarketPriceSource()
        self.client = client

    async def run(self, run_id: Optional[uuid.UUID] = None, clear_first: bool = True) -> SyncResult:
        if run_id is None:
            run_id = self.status_store.create_run(clear_first=clear_first)

        start = time.perf_counter()
        log.info(f"Starting card sync {run_id} ({'full replace' if clear_first else 'upsert only'})")

        try:
            # Unconfigured store fails here, before any download starts
            self.store.verify()

            if clear_first:
                self._transition(run_id, SyncState.CLEARING, "Clearing existing data...")
                self.store.clear_all()

            if self.client is not None:
                raw_cards, raw_prices = await self._fetch_all(run_id, self.client)
            else:
                async with httpx.AsyncClient(
                    timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True
                ) as client:
                    raw_cards, raw_prices = await self._fetch_all(run_id, client)

            self._transition(run_id, SyncState.MERGING, "Merging cards with prices...")
            cards = [normalize_card(raw) for raw in raw_cards]
            merged = merge_with_prices(cards, raw_prices)
            priced = sum(1 for card in merged if card.price is not None)
            log.info(f"Merged {len(merged)} cards, {priced} with prices")

            now = datetime.now(timezone.utc)
            rows = [to_storage_row(card, now) for card in merged]

            self._transition(run_id, SyncState.LOADING, f"Importing 0/{len(rows)}")
            import_result = await self.loader.load(
                CARD_TABLE,
                rows,
                on_conflict="id",
                ignore_duplicates=False,
                on_progress=lambda imported, total, errors: self.status_store.update_progress(
                    run_id, f"Importing {imported}/{total} | Errors: {errors}"
                ),
            )

            result = SyncResult(
                results={CARD_TABLE: import_result},
                duration=round(time.perf_counter() - start, 2),
                total_errors=import_result.errors,
            )
        except Exception as exc:
            duration = round(time.perf_counter() - start, 2)
            log.error(f"Fatal sync error after {duration:.2f}s: {exc}")
            self.status_store.fail(run_id, str(exc), duration)
            raise

        self.status_store.complete(run_id, result)
        self._log_summary(result)
        return result

    async def _fetch_all(self, run_id: uuid.UUID, client: httpx.AsyncClient):
        self._transition(run_id, SyncState.FETCHING_CARDS, "Fetching Scryfall card data...")
        raw_cards = await self.card_source.fetch(client)

        self._transition(run_id, SyncState.FETCHING_PRICES, "Fetching CardMarket price data...")
        raw_prices = await self.price_source.fetch(client)
        return raw_cards, raw_prices

    def _transition(self, run_id: uuid.UUID, state: SyncState, progress: str) -> None:
        log.info(f"Sync {run_id}: {state.value}")
        self.status_store.transition(run_id, state, progress)

    @staticmethod
    def _log_summary(result: SyncResult) -> None:
        log.info("=" * 40)
        log.info("SYNC COMPLETE")
        for table, table_result in result.results.items():
            log.info(f"  {table}: {table_result.imported} imported")
        log.info(f"  Duration: {result.duration:.2f}s")
        log.info(f"  Errors:   {result.total_errors} failed batches")
        log.info("=" * 40)
        if result.total_errors > 0:
            log.warning("Some batches failed. Check the log above for details.")
